# -*- coding: utf-8 -*-

from __future__ import annotations

import io
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock
from uuid import uuid4

from PIL import Image

from seefood.vision.errors import CompressionFailed, InvalidImage
from seefood.vision.images import ImageOptimizer, ImageSaveError, load_image, scaled_size


def _jpeg_bytes(size: tuple[int, int] = (64, 48)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (180, 90, 40)).save(buf, format="JPEG")
    return buf.getvalue()


class TestImageOptimizer(unittest.TestCase):
    def setUp(self) -> None:
        self.optimizer = ImageOptimizer()

    def test_small_image_keeps_dimensions(self) -> None:
        for size in [(1, 1), (640, 480), (1200, 1200), (1200, 300)]:
            img = Image.new("RGB", size)
            encoded = self.optimizer.optimize(img)
            self.assertEqual(encoded.display_image.size, size)
            self.assertIsNot(encoded.display_image, img)

    def test_large_image_scaled_to_max_dimension(self) -> None:
        cases = {
            (2400, 1800): (1200, 900),
            (3000, 1000): (1200, 400),
            (1000, 3000): (400, 1200),
            (1201, 1201): (1200, 1200),
        }
        for size, expected in cases.items():
            encoded = self.optimizer.optimize(Image.new("RGB", size))
            self.assertEqual(encoded.display_image.size, expected)

    def test_scaled_size_preserves_aspect_ratio(self) -> None:
        width, height = scaled_size((4032, 3024))
        self.assertEqual(width, 1200)
        self.assertAlmostEqual(width / height, 4032 / 3024, places=2)

    def test_encodes_jpeg_at_quality_70(self) -> None:
        self.assertEqual(self.optimizer.jpeg_quality, 70)
        encoded = self.optimizer.optimize(Image.new("RGB", (100, 100), (10, 200, 30)))
        self.assertEqual(encoded.mime_type, "image/jpeg")
        self.assertTrue(encoded.encoded_bytes.startswith(b"\xff\xd8"))
        self.assertEqual(Image.open(io.BytesIO(encoded.encoded_bytes)).format, "JPEG")

    def test_transparent_image_is_flattened(self) -> None:
        img = Image.new("RGBA", (20, 20), (0, 0, 0, 0))
        encoded = self.optimizer.optimize(img)
        decoded = Image.open(io.BytesIO(encoded.encoded_bytes))
        self.assertEqual(decoded.mode, "RGB")

    def test_encoder_error_raises_compression_failed(self) -> None:
        img = Image.new("RGB", (10, 10))
        with mock.patch.object(Image.Image, "save", side_effect=OSError("cannot write mode")):
            with self.assertRaises(CompressionFailed):
                self.optimizer.optimize(img)

    def test_encoder_without_output_raises_compression_failed(self) -> None:
        img = Image.new("RGB", (10, 10))
        with mock.patch.object(Image.Image, "save", return_value=None):
            with self.assertRaises(CompressionFailed):
                self.optimizer.compress(img)

    def test_rejects_bad_settings(self) -> None:
        with self.assertRaises(ValueError):
            ImageOptimizer(max_dimension=0)
        with self.assertRaises(ValueError):
            ImageOptimizer(compression_quality=1.5)


class TestLoadImage(unittest.TestCase):
    def test_decodes_jpeg(self) -> None:
        img = load_image(_jpeg_bytes((32, 16)))
        self.assertEqual(img.size, (32, 16))

    def test_garbage_raises_invalid_image(self) -> None:
        with self.assertRaises(InvalidImage):
            load_image(b"definitely not an image")

    def test_empty_raises_invalid_image(self) -> None:
        with self.assertRaises(InvalidImage) as ctx:
            load_image(b"")
        self.assertEqual(ctx.exception.description, "Failed to process image")


class TestSaveImage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="seefood-img-"))

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_writes_jpeg_named_after_meal(self) -> None:
        optimizer = ImageOptimizer(images_dir=self._tmp / "MealImages")
        meal_id = uuid4()
        path = optimizer.save_image(Image.new("RGB", (2400, 1200)), meal_id)
        self.assertEqual(path, self._tmp / "MealImages" / f"{meal_id}.jpg")
        self.assertEqual(Image.open(path).size, (1200, 600))

    def test_write_failure_raises_image_save_error(self) -> None:
        blocker = self._tmp / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        optimizer = ImageOptimizer(images_dir=blocker)
        with self.assertRaises(ImageSaveError):
            optimizer.save_image(Image.new("RGB", (8, 8)), uuid4())

    def test_without_directory_raises_image_save_error(self) -> None:
        with self.assertRaises(ImageSaveError):
            ImageOptimizer().save_image(Image.new("RGB", (8, 8)), uuid4())


if __name__ == "__main__":
    unittest.main()
