# -*- coding: utf-8 -*-
"""Vision — Gemini generateContent request construction."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict

import httpx

from .errors import InvalidResponse
from .models import JPEG_MIME

# The extractor relies on the model answering with a bare JSON array
# (Gemini wraps it in a ```json fence).
PROMPT = (
    "Analyze this food image and provide nutritional information in a structured JSON format.\n"
    "Return the response in this exact format:\n"
    "[\n"
    "    {\n"
    '        "name": "food item name",\n'
    '        "calories": number,\n'
    '        "protein": number in grams,\n'
    '        "carbs": number in grams,\n'
    '        "fats": number in grams\n'
    "    }\n"
    "]\n"
    "List every food item visible in the image as its own entry.\n"
    "Be precise and return only the JSON array, with no other text."
)

TEMPERATURE = 0.1
TOP_P = 1.0
TOP_K = 32
MAX_OUTPUT_TOKENS = 2048

_KEY_PARAM_RE = re.compile(r"([?&]key=)[^&#\s\"]*")


@dataclass(frozen=True)
class InferenceRequest:
    url: str
    body: Dict[str, Any]

    @property
    def redacted_url(self) -> str:
        return redact_url(self.url)


def redact_url(url: str) -> str:
    """Hide the ``key`` query parameter so URLs can be logged."""
    return _KEY_PARAM_RE.sub(r"\1<REDACTED>", url)


def generation_config() -> Dict[str, Any]:
    return {
        "temperature": TEMPERATURE,
        "top_p": TOP_P,
        "top_k": TOP_K,
        "max_output_tokens": MAX_OUTPUT_TOKENS,
    }


def build_body(image_b64: str, mime_type: str = JPEG_MIME) -> Dict[str, Any]:
    return {
        "contents": [
            {
                "parts": [
                    {"text": PROMPT},
                    {"inline_data": {"mime_type": mime_type, "data": image_b64}},
                ]
            }
        ],
        "generation_config": generation_config(),
    }


def build_url(base_url: str, api_key: str) -> str:
    if not api_key or not api_key.strip():
        raise InvalidResponse("API key is missing")
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise InvalidResponse(f"invalid base URL: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidResponse(f"invalid base URL: {redact_url(base_url)}")
    try:
        return str(url.copy_set_param("key", api_key.strip()))
    except (httpx.InvalidURL, TypeError) as exc:
        raise InvalidResponse(f"cannot append API key: {exc}") from exc


def build_request(
    api_key: str,
    image_b64: str,
    *,
    base_url: str,
    mime_type: str = JPEG_MIME,
) -> InferenceRequest:
    return InferenceRequest(url=build_url(base_url, api_key), body=build_body(image_b64, mime_type))
