"""
Unit tests for image_ops module.

Tests decode, rotate, extract, resize and encode helpers on synthetic images.
"""

import io

import cv2
import numpy as np
import pytest
from PIL import Image

from src.common.types import CropBox
from src.cover_alignment.geometry import rotated_canvas_size
from src.cover_alignment.image_ops import (
    decode_image,
    encode_jpeg,
    extract_region,
    image_size,
    resize_to_fit,
    rotate_image,
)


def _pil_bytes(fmt, size=(64, 48), color=(200, 30, 30), mode="RGB"):
    buffer = io.BytesIO()
    if mode == "P":
        # Web palette; web-safe colours quantize exactly
        img = Image.new("RGB", size, color).convert("P")
    else:
        img = Image.new(mode, size, color)
    img.save(buffer, format=fmt)
    return buffer.getvalue()


class TestDecodeImage:
    """Tests for decode_image function."""

    @pytest.mark.parametrize("fmt", ["JPEG", "PNG", "GIF", "WEBP"])
    def test_decodes_accepted_formats(self, fmt):
        """Test every accepted upload type decodes to BGR."""
        image = decode_image(_pil_bytes(fmt))

        assert image.shape == (48, 64, 3)
        assert image.dtype == np.uint8

    def test_png_with_alpha_drops_channel(self):
        image = decode_image(_pil_bytes("PNG", color=(10, 20, 30, 128), mode="RGBA"))

        assert image.shape == (48, 64, 3)

    def test_channel_order_is_bgr(self):
        image = decode_image(_pil_bytes("PNG", color=(255, 0, 0)))

        assert tuple(image[0, 0]) == (0, 0, 255)

    def test_sixteen_bit_gray_png_rescaled(self):
        """Test 16-bit grayscale samples are scaled down, not clamped to white."""
        samples = np.full((200, 300), 20000, dtype=np.uint16)
        ok, buffer = cv2.imencode(".png", samples)
        assert ok

        image = decode_image(buffer.tobytes())

        assert image.shape == (200, 300, 3)
        assert abs(image.mean() - 20000 / 257) < 1

    @pytest.mark.parametrize(
        "fmt,mode,color,expected_mean",
        [
            ("PNG", "L", 90, 90),
            ("PNG", "LA", (90, 200), 90),
            ("PNG", "RGB", (204, 51, 51), 102),
            ("GIF", "P", (204, 51, 51), 102),
            ("WEBP", "RGB", (60, 120, 180), 120),
        ],
    )
    def test_pixel_values_preserved(self, fmt, mode, color, expected_mean):
        """Test decoded intensity matches the source for each source mode."""
        image = decode_image(_pil_bytes(fmt, color=color, mode=mode))

        assert abs(image.mean() - expected_mean) < 3

    def test_invalid_bytes_raise(self):
        with pytest.raises(ValueError, match="unsupported image format"):
            decode_image(b"not-valid-image-data")

    def test_empty_buffer_raises(self):
        with pytest.raises(ValueError, match="empty"):
            decode_image(b"")

    def test_buffer_not_mutated(self):
        data = bytearray(_pil_bytes("PNG"))
        original = bytes(data)

        decode_image(data)

        assert bytes(data) == original


class TestRotateImage:
    """Tests for rotate_image function."""

    def test_canvas_expands(self):
        image = np.zeros((100, 100, 3), dtype=np.uint8)

        rotated = rotate_image(image, 45)

        assert image_size(rotated) == rotated_canvas_size(100, 100, 45)

    def test_exposed_area_filled_white(self):
        image = np.zeros((100, 100, 3), dtype=np.uint8)

        rotated = rotate_image(image, 45)

        assert tuple(rotated[0, 0]) == (255, 255, 255)
        assert tuple(rotated[-1, -1]) == (255, 255, 255)
        # Centre stays black
        assert rotated[70, 70].max() < 10

    def test_custom_fill_colour_is_rgb(self):
        image = np.zeros((100, 100, 3), dtype=np.uint8)

        rotated = rotate_image(image, 30, background_color=(255, 0, 0))

        assert tuple(rotated[0, 0]) == (0, 0, 255)

    def test_positive_angle_is_clockwise(self):
        """Test the top-left corner moves to the top-right at +90 degrees."""
        image = np.zeros((100, 200, 3), dtype=np.uint8)
        image[0:20, 0:20] = (0, 0, 255)

        rotated = rotate_image(image, 90)

        assert image_size(rotated) == (100, 200)
        assert rotated[10, 90, 2] > 200
        assert rotated[10, 10, 2] < 50

    def test_negative_angle_is_counter_clockwise(self):
        """Test the top-left corner moves to the bottom-left at -90 degrees."""
        image = np.zeros((100, 200, 3), dtype=np.uint8)
        image[0:20, 0:20] = (0, 0, 255)

        rotated = rotate_image(image, -90)

        assert rotated[190, 10, 2] > 200
        assert rotated[10, 10, 2] < 50


class TestExtractRegion:
    """Tests for extract_region function."""

    def test_extracts_region(self):
        image = np.zeros((100, 200, 3), dtype=np.uint8)
        image[20:50, 30:90] = 255

        region = extract_region(image, CropBox(left=30, top=20, width=60, height=30))

        assert region.shape == (30, 60, 3)
        assert region.min() == 255

    def test_region_is_a_copy(self):
        image = np.zeros((100, 200, 3), dtype=np.uint8)

        region = extract_region(image, CropBox(left=0, top=0, width=10, height=10))
        region[:] = 255

        assert image.max() == 0

    def test_out_of_bounds_raises(self):
        image = np.zeros((100, 200, 3), dtype=np.uint8)

        with pytest.raises(ValueError, match="outside"):
            extract_region(image, CropBox(left=150, top=0, width=100, height=10))


class TestResizeToFit:
    """Tests for resize_to_fit function."""

    def test_small_image_not_enlarged(self):
        image = np.zeros((640, 800, 3), dtype=np.uint8)

        resized = resize_to_fit(image, 1200)

        assert resized.shape == (640, 800, 3)

    def test_large_image_shrinks(self):
        image = np.zeros((2000, 3000, 3), dtype=np.uint8)

        resized = resize_to_fit(image, 1200)

        assert resized.shape == (800, 1200, 3)

    @pytest.mark.parametrize("interpolation", ["linear", "cubic", "nearest", "area", "lanczos"])
    def test_interpolations(self, interpolation):
        image = np.zeros((300, 100, 3), dtype=np.uint8)

        resized = resize_to_fit(image, 150, interpolation)

        assert resized.shape == (150, 50, 3)


class TestEncodeJpeg:
    """Tests for encode_jpeg function."""

    def test_produces_jpeg(self):
        image = np.full((40, 60, 3), 128, dtype=np.uint8)

        data = encode_jpeg(image, 85)

        assert data[:3] == b"\xff\xd8\xff"
        decoded = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        assert decoded.shape == (40, 60, 3)

    def test_quality_affects_size(self):
        rng = np.random.default_rng(0)
        image = rng.integers(0, 256, size=(128, 128, 3), dtype=np.uint8)

        assert len(encode_jpeg(image, 20)) < len(encode_jpeg(image, 95))
