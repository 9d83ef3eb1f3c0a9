"""
SeeFood backend API

Meal photo analysis (Gemini) and the per-day food diary.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import settings
from .diet.api import router as diet_router
from .logging_setup import configure_logging

configure_logging(settings.log_level)

app = FastAPI(
    title="SeeFood",
    description="Food photo nutrition estimation and daily meal log",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(diet_router)


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "version": __version__,
        "mock_transport": settings.mock_response is not None,
        "timestamp": datetime.now().isoformat(),
    }
