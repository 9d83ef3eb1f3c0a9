# -*- coding: utf-8 -*-
"""Food photo analysis via the Gemini generateContent API."""

from .errors import (
    AnalysisError,
    CompressionFailed,
    DecodingError,
    EmptyResponse,
    HTTPError,
    InvalidImage,
    InvalidJSONFormat,
    InvalidResponse,
    NetworkError,
    NoValidCandidates,
)
from .models import NutritionRecord
from .service import AnalysisState, FoodAnalyzer, build_analyzer

__all__ = [
    "AnalysisError",
    "AnalysisState",
    "CompressionFailed",
    "DecodingError",
    "EmptyResponse",
    "FoodAnalyzer",
    "HTTPError",
    "InvalidImage",
    "InvalidJSONFormat",
    "InvalidResponse",
    "NetworkError",
    "NoValidCandidates",
    "NutritionRecord",
    "build_analyzer",
]
