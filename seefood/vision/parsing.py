# -*- coding: utf-8 -*-
"""Vision — turning the Gemini reply into nutrition records."""

from __future__ import annotations

import json
import logging
import re
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from .errors import DecodingError, EmptyResponse, InvalidJSONFormat
from .models import APIFoodItem, GeminiResponse, NutritionRecord

logger = logging.getLogger(__name__)

# Opening fence must be followed by a newline; the closing fence starts its own line.
_JSON_BLOCK_RE = re.compile(r"```json\s*\n([\s\S]*?)\n```")

_ITEMS = TypeAdapter(List[APIFoodItem])


def decode_envelope(content: bytes | str) -> GeminiResponse:
    try:
        return GeminiResponse.model_validate_json(content)
    except ValidationError as exc:
        logger.error("Decoding error: %s", exc)
        raise DecodingError(f"{exc.error_count()} envelope error(s)") from exc


def extract_json_block(text: str) -> Optional[str]:
    """Return the trimmed body of the first ```json fence, or None."""
    match = _JSON_BLOCK_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def normalize_records(inner_text: str) -> List[NutritionRecord]:
    try:
        payload = inner_text.encode("utf-8")
    except UnicodeEncodeError as exc:
        logger.error("Failed to convert JSON string to data: %s", exc)
        raise InvalidJSONFormat(str(exc)) from exc

    try:
        raw = json.loads(payload)
    except (ValueError, RecursionError) as exc:
        logger.error("Failed to decode food items: %s", exc)
        raise DecodingError(f"not JSON: {exc}") from exc

    if not isinstance(raw, list):
        logger.error("Failed to decode food items: top level is %s", type(raw).__name__)
        raise DecodingError("expected a JSON array")
    if not raw:
        logger.warning("No food items detected")
        raise EmptyResponse()

    try:
        items = _ITEMS.validate_python(raw)
    except ValidationError as exc:
        logger.error("Failed to decode food items: %s", exc)
        raise DecodingError(f"{exc.error_count()} item error(s)") from exc

    return [item.to_record() for item in items]
