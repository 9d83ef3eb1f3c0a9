# -*- coding: utf-8 -*-
"""Vision — failure kinds of a food analysis call.

Every failure aborts the whole call; none of these carry partial results.
``description`` is the user-facing message, ``detail`` is for logs only.
"""

from __future__ import annotations

from typing import Optional


class AnalysisError(Exception):
    kind = "analysis_error"
    message = "Food analysis failed"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(self.description if detail is None else f"{self.description} ({detail})")

    @property
    def description(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, object]:
        return {"kind": self.kind, "message": self.description}


class InvalidImage(AnalysisError):
    kind = "invalid_image"
    message = "Failed to process image"


class CompressionFailed(AnalysisError):
    kind = "compression_failed"
    message = "Failed to compress image"


class NetworkError(AnalysisError):
    kind = "network_error"

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(None)

    @property
    def description(self) -> str:
        # Timeouts often carry an empty message.
        detail = str(self.cause) or type(self.cause).__name__
        return f"Network error: {detail}"


class HTTPError(AnalysisError):
    kind = "http_error"

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(None)

    @property
    def description(self) -> str:
        return f"HTTP error: {self.status_code}"

    def to_dict(self) -> dict[str, object]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class InvalidResponse(AnalysisError):
    kind = "invalid_response"
    message = "Invalid response from server"


class DecodingError(AnalysisError):
    kind = "decoding_error"
    message = "Failed to decode server response"


class NoValidCandidates(AnalysisError):
    kind = "no_valid_candidates"
    message = "No valid response from the AI model"


class InvalidJSONFormat(AnalysisError):
    kind = "invalid_json_format"
    message = "Invalid response format from AI model"


class EmptyResponse(AnalysisError):
    kind = "empty_response"
    message = "No food items detected in the image"
