# -*- coding: utf-8 -*-
"""Vision — Pydantic models for the Gemini envelope and nutrition records."""

from __future__ import annotations

import base64
import math
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID, uuid4

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, field_validator

JPEG_MIME = "image/jpeg"


class NutritionRecord(BaseModel):
    """One food item estimated by the model. Serving scaling happens downstream."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    calories: int = Field(0, ge=0)
    protein: int = Field(0, ge=0, description="grams")
    carbs: int = Field(0, ge=0, description="grams")
    fats: int = Field(0, ge=0, description="grams")


class APIFoodItem(BaseModel):
    """Item shape the prompt asks the model for."""

    name: str
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fats: int = 0

    @field_validator("calories", "protein", "carbs", "fats", mode="before")
    @classmethod
    def _coerce_amount(cls, value: object) -> int:
        if value is None:
            return 0
        # bool is an int subclass; the model never means True as "1 gram".
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be a number")
        if not math.isfinite(value):
            raise ValueError("must be finite")
        return max(0, int(round(value)))

    def to_record(self) -> NutritionRecord:
        return NutritionRecord(
            name=self.name,
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fats=self.fats,
        )


# ---- Gemini generateContent envelope ----


class _Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Part(_Envelope):
    text: str


class Content(_Envelope):
    parts: List[Part]
    role: Optional[str] = None


class Candidate(_Envelope):
    content: Content
    finish_reason: Optional[str] = Field(None, alias="finishReason")
    avg_logprobs: Optional[float] = Field(None, alias="avgLogprobs")


class TokenDetail(_Envelope):
    modality: str
    token_count: int = Field(0, alias="tokenCount")


class UsageMetadata(_Envelope):
    prompt_token_count: int = Field(0, alias="promptTokenCount")
    candidates_token_count: int = Field(0, alias="candidatesTokenCount")
    total_token_count: int = Field(0, alias="totalTokenCount")
    prompt_tokens_details: List[TokenDetail] = Field(default_factory=list, alias="promptTokensDetails")
    candidates_tokens_details: List[TokenDetail] = Field(default_factory=list, alias="candidatesTokensDetails")


class GeminiResponse(_Envelope):
    candidates: List[Candidate]
    usage_metadata: Optional[UsageMetadata] = Field(None, alias="usageMetadata")
    model_version: Optional[str] = Field(None, alias="modelVersion")
    response_id: Optional[str] = Field(None, alias="responseId")

    def first_text(self) -> Optional[str]:
        if not self.candidates:
            return None
        parts = self.candidates[0].content.parts
        if not parts:
            return None
        return parts[0].text


@dataclass(frozen=True)
class EncodedImage:
    display_image: Image.Image
    encoded_bytes: bytes
    mime_type: str = JPEG_MIME

    @property
    def size(self) -> tuple[int, int]:
        return self.display_image.size

    def to_base64(self) -> str:
        return base64.b64encode(self.encoded_bytes).decode("ascii")
