from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional


class Settings:
    """Centralized configuration for the SeeFood backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("SEEFOOD_DATA_ROOT") or data_root_default
        ).expanduser()
        self.images_dir: Path = Path(
            os.environ.get("SEEFOOD_IMAGES_DIR") or (self.data_root / "MealImages")
        ).expanduser()
        self.logs_dir: Path = Path(
            os.environ.get("SEEFOOD_LOGS_DIR") or (self.data_root / "logs")
        ).expanduser()
        self.credentials_file: Path = Path(
            os.environ.get("SEEFOOD_CREDENTIALS_FILE") or (self.data_root / "credentials.json")
        ).expanduser()

        # ---- Gemini ----
        self.gemini_model: str = os.environ.get("SEEFOOD_GEMINI_MODEL", "gemini-1.5-flash")
        self.gemini_base_url: str = os.environ.get(
            "SEEFOOD_GEMINI_BASE_URL",
            f"https://generativelanguage.googleapis.com/v1/models/{self.gemini_model}:generateContent",
        )
        # Seconds, for the whole request.
        self.gemini_timeout: float = float(os.environ.get("SEEFOOD_GEMINI_TIMEOUT") or "60")

        # ---- Image optimisation ----
        self.max_image_dimension: int = int(os.environ.get("SEEFOOD_MAX_IMAGE_DIMENSION") or "1200")
        self.jpeg_quality: float = float(os.environ.get("SEEFOOD_JPEG_QUALITY") or "0.7")
        self.max_upload_mb: int = int(os.environ.get("SEEFOOD_MAX_UPLOAD_MB") or "20")

        # Fixture file with a canned Gemini response; when set, no network calls are made.
        mock = (os.environ.get("SEEFOOD_MOCK_RESPONSE") or "").strip()
        self.mock_response: Optional[Path] = Path(mock).expanduser() if mock else None

        self.log_level: str = (os.environ.get("SEEFOOD_LOG_LEVEL") or "INFO").upper()

        cors = os.environ.get("SEEFOOD_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


settings = Settings()
