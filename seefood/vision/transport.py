# -*- coding: utf-8 -*-
"""Vision — HTTP transports for the inference call.

``HttpxTransport`` talks to the network; ``FixtureTransport`` replays a canned
response so the rest of the pipeline runs unchanged in tests and demos.
Neither retries.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

import httpx

from .errors import AnalysisError, InvalidResponse, NetworkError
from .request import redact_url

logger = logging.getLogger(__name__)


class RedactKeyFilter(logging.Filter):
    """Rewrites records whose rendered message carries a ``key=`` query value."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_url(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


# httpx logs every request URL at INFO, and the Gemini key travels in the query.
_httpx_logger = logging.getLogger("httpx")
if not any(isinstance(f, RedactKeyFilter) for f in _httpx_logger.filters):
    _httpx_logger.addFilter(RedactKeyFilter())


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    content: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299


class Transport(Protocol):
    def send(self, url: str, body: Dict[str, Any]) -> TransportResponse: ...


class HttpxTransport:
    """Single POST through ``httpx``; every transport failure becomes ``NetworkError``."""

    def __init__(self, *, timeout: float = 60.0, client: Optional[httpx.Client] = None) -> None:
        self.timeout = timeout
        self._client = client

    def send(self, url: str, body: Dict[str, Any]) -> TransportResponse:
        headers = {"Content-Type": "application/json"}
        content = json.dumps(body).encode("utf-8")
        logger.info("POST %s (%d bytes)", redact_url(url), len(content))
        try:
            if self._client is not None:
                resp = self._client.post(url, content=content, headers=headers)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                    resp = client.post(url, content=content, headers=headers)
        except (httpx.HTTPError, OSError) as exc:
            logger.error("Network error calling %s: %s", redact_url(url), exc)
            raise NetworkError(exc) from exc
        logger.info("Response status %s (%d bytes)", resp.status_code, len(resp.content))
        return TransportResponse(
            status_code=resp.status_code,
            content=resp.content,
            headers=dict(resp.headers),
        )


class FixtureTransport:
    """Deterministic transport returning a configured response or raising a configured error."""

    def __init__(
        self,
        status_code: Optional[int] = None,
        content: bytes | str | None = None,
        *,
        error: Optional[BaseException] = None,
    ) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.status_code = status_code
        self.content = content
        self.error = error
        self.requests: List[Tuple[str, Dict[str, Any]]] = []

    @classmethod
    def from_file(cls, path: Path, status_code: int = 200) -> "FixtureTransport":
        return cls(status_code, Path(path).read_bytes())

    def send(self, url: str, body: Dict[str, Any]) -> TransportResponse:
        self.requests.append((url, body))
        logger.info("fixture POST %s", redact_url(url))
        if self.error is not None:
            if isinstance(self.error, AnalysisError):
                raise self.error
            raise NetworkError(self.error) from self.error
        if self.status_code is None or self.content is None:
            raise InvalidResponse("fixture transport has no response configured")
        return TransportResponse(status_code=self.status_code, content=self.content)
