"""
Image Codec Operations

Decode, rotate, extract, resize and encode helpers used by the cover
alignment pipeline. Images travel between stages as BGR numpy arrays
(OpenCV convention).

Decoding goes through Pillow so every accepted upload type (JPEG, PNG,
GIF, WebP) is readable; all pixel transforms and the JPEG encode use OpenCV.
"""

import io
import logging
from typing import Tuple

import cv2
import numpy as np
from PIL import Image

from src.common.types import CropBox
from src.cover_alignment.geometry import fit_inside_size, rotated_canvas_size

logger = logging.getLogger(__name__)

# Pillow modes for 16-bit grayscale; convert("RGB") would clamp them to white
HIGH_DEPTH_GRAY_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")

INTERPOLATION_FLAGS = {
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "nearest": cv2.INTER_NEAREST,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}


def decode_image(image_bytes: bytes) -> np.ndarray:
    """
    Decode an encoded image into a BGR array.

    Animated images contribute their first frame; alpha is dropped.
    The caller's buffer is only read.

    Args:
        image_bytes: Encoded image data.

    Returns:
        Array of shape (H, W, 3), dtype uint8.

    Raises:
        ValueError: If the buffer is empty or cannot be decoded.
    """
    if not image_bytes:
        raise ValueError("Input buffer is empty")

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            if img.mode in HIGH_DEPTH_GRAY_MODES:
                gray = _gray_to_8bit(np.asarray(img))
                return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)
            rgb = np.asarray(img.convert("RGB"))
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Input buffer contains unsupported image format: {e}") from e

    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)


def _gray_to_8bit(samples: np.ndarray) -> np.ndarray:
    """Rescale 16-bit grayscale samples (0..65535) to uint8."""
    scaled = np.clip(samples.astype(np.float64), 0, 65535) / 257.0
    return np.round(scaled).astype(np.uint8)


def image_size(image: np.ndarray) -> Tuple[int, int]:
    """Return (width, height) of an image array."""
    return int(image.shape[1]), int(image.shape[0])


def rotate_image(
    image: np.ndarray,
    degrees: float,
    background_color: Tuple[int, int, int] = (255, 255, 255),
) -> np.ndarray:
    """
    Rotate an image clockwise by ``degrees`` on an expanded canvas.

    The canvas grows to hold the whole rotated image; newly exposed area is
    filled with ``background_color`` (RGB).

    Args:
        image: BGR image array.
        degrees: Clockwise rotation angle; negative values rotate
            counter-clockwise.
        background_color: RGB fill colour.

    Returns:
        Rotated BGR image array.
    """
    width, height = image_size(image)
    new_width, new_height = rotated_canvas_size(width, height, degrees)

    # OpenCV treats positive angles as counter-clockwise
    matrix = cv2.getRotationMatrix2D((width / 2, height / 2), -degrees, 1.0)
    matrix[0, 2] += new_width / 2 - width / 2
    matrix[1, 2] += new_height / 2 - height / 2

    r, g, b = background_color
    rotated = cv2.warpAffine(
        image,
        matrix,
        (new_width, new_height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(b, g, r),
    )

    logger.debug(
        f"Rotated {width}x{height} by {degrees:.2f} deg -> {new_width}x{new_height}"
    )
    return rotated


def extract_region(image: np.ndarray, crop: CropBox) -> np.ndarray:
    """
    Copy a rectangular region out of an image.

    Raises:
        ValueError: If the region does not lie inside the image.
    """
    width, height = image_size(image)
    if not crop.fits_within(width, height):
        raise ValueError(
            f"Extract area {crop.to_tuple()} is outside the {width}x{height} image"
        )
    return image[crop.top : crop.bottom, crop.left : crop.right].copy()


def resize_to_fit(
    image: np.ndarray, max_dimension: int, interpolation: str = "area"
) -> np.ndarray:
    """
    Shrink an image to fit inside ``max_dimension`` on both axes.

    Aspect ratio is preserved and images already inside the bound are
    returned unchanged (no enlargement).
    """
    width, height = image_size(image)
    target_width, target_height = fit_inside_size(width, height, max_dimension)
    if (target_width, target_height) == (width, height):
        return image

    logger.debug(f"Resizing {width}x{height} -> {target_width}x{target_height}")
    return cv2.resize(
        image,
        (target_width, target_height),
        interpolation=INTERPOLATION_FLAGS[interpolation],
    )


def encode_jpeg(image: np.ndarray, quality: int = 85) -> bytes:
    """
    Encode an image as JPEG.

    Raises:
        ValueError: If OpenCV fails to encode the image.
    """
    ok, buffer = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ok:
        raise ValueError("JPEG encoding failed")
    return buffer.tobytes()
