# -*- coding: utf-8 -*-
"""Vision — image resizing, JPEG encoding and on-disk copies of analysed photos."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Tuple
from uuid import UUID

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import CompressionFailed, InvalidImage
from .models import EncodedImage

logger = logging.getLogger(__name__)

MAX_DIMENSION = 1200
COMPRESSION_QUALITY = 0.7


class ImageSaveError(Exception):
    """Writing the analysed image copy failed."""


def load_image(data: bytes) -> Image.Image:
    """Decode uploaded bytes into an RGB-compatible image with EXIF rotation applied."""
    if not data:
        raise InvalidImage("empty image payload")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise InvalidImage(str(exc)) from exc
    # Phone cameras store rotation in EXIF instead of rotating pixels.
    img = ImageOps.exif_transpose(img)
    if img.width <= 0 or img.height <= 0:
        raise InvalidImage("image has no pixels")
    return img


def scaled_size(size: Tuple[int, int], max_dimension: int = MAX_DIMENSION) -> Tuple[int, int]:
    width, height = size
    if width <= max_dimension and height <= max_dimension:
        return width, height
    scale = max_dimension / max(width, height)
    return max(1, round(width * scale)), max(1, round(height * scale))


class ImageOptimizer:
    """Shrinks photos to a bounded size before upload and keeps a copy per meal."""

    def __init__(
        self,
        *,
        max_dimension: int = MAX_DIMENSION,
        compression_quality: float = COMPRESSION_QUALITY,
        images_dir: Optional[Path] = None,
    ) -> None:
        if max_dimension <= 0:
            raise ValueError("max_dimension must be positive")
        if not 0.0 < compression_quality <= 1.0:
            raise ValueError("compression_quality must be in (0, 1]")
        self.max_dimension = max_dimension
        self.compression_quality = compression_quality
        self.images_dir = images_dir

    @property
    def jpeg_quality(self) -> int:
        # Pillow takes 1..95 (100 disables some compression stages).
        return max(1, min(95, round(self.compression_quality * 100)))

    def optimize(self, image: Image.Image) -> EncodedImage:
        if image is None or image.width <= 0 or image.height <= 0:
            raise InvalidImage("image has no pixels")
        resized = self.resize_if_needed(image)
        return EncodedImage(display_image=resized, encoded_bytes=self.compress(resized))

    def resize_if_needed(self, image: Image.Image) -> Image.Image:
        new_size = scaled_size(image.size, self.max_dimension)
        if new_size == image.size:
            return image.copy()
        logger.debug("resizing image %sx%s -> %sx%s", image.width, image.height, *new_size)
        return image.resize(new_size, Image.Resampling.LANCZOS)

    def compress(self, image: Image.Image) -> bytes:
        try:
            rgb = _to_jpeg_mode(image)
            buffer = io.BytesIO()
            rgb.save(buffer, format="JPEG", quality=self.jpeg_quality, optimize=True)
        except (OSError, ValueError, KeyError) as exc:
            logger.error("Failed to compress image: %s", exc)
            raise CompressionFailed(str(exc)) from exc
        data = buffer.getvalue()
        if not data:
            logger.error("Failed to compress image: encoder produced no bytes")
            raise CompressionFailed("encoder produced no bytes")
        return data

    def image_path(self, meal_id: UUID | str) -> Path:
        if self.images_dir is None:
            raise ImageSaveError("images_dir is not configured")
        return self.images_dir / f"{meal_id}.jpg"

    def save_image(self, image: Image.Image, meal_id: UUID | str) -> Path:
        path = self.image_path(meal_id)
        encoded = self.optimize(image)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(encoded.encoded_bytes)
        except OSError as exc:
            logger.error("Failed to save image: %s", exc)
            raise ImageSaveError(str(exc)) from exc
        logger.info("Saved image for meal %s", meal_id)
        return path


def _to_jpeg_mode(image: Image.Image) -> Image.Image:
    if image.mode in ("RGB", "L"):
        return image
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")
