"""
Geometric helpers for the Cover Alignment module.

Pure functions that turn the detector's normalized quadrilateral into
pixel-space crop regions, before and after a rotation pass. Nothing here
touches pixels.
"""

import logging
import math
from typing import Optional, Tuple

from src.common.types import BoundingBox, CropBox

logger = logging.getLogger(__name__)


def normalized_to_pixels(box: BoundingBox, width: float, height: float) -> BoundingBox:
    """
    Convert normalized (0-1) bounding box coordinates to pixel coordinates.

    Each corner's x is scaled by ``width`` and its y by ``height``.

    Example:
        >>> box = BoundingBox.from_list([[0.1, 0.1], [0.9, 0.1], [0.9, 0.9], [0.1, 0.9]])
        >>> normalized_to_pixels(box, 1000, 800).top_left.to_tuple()
        (100.0, 80.0)
    """
    return BoundingBox(
        top_left=box.top_left.scaled(width, height),
        top_right=box.top_right.scaled(width, height),
        bottom_right=box.bottom_right.scaled(width, height),
        bottom_left=box.bottom_left.scaled(width, height),
    )


def axis_aligned_crop(
    pixel_box: BoundingBox, width: int, height: int
) -> Optional[CropBox]:
    """
    Derive the axis-aligned crop rectangle of a pixel-space quadrilateral.

    Each edge is taken from its outer pair of corners only: the left pair
    gives min x, the right pair max x, the top pair min y and the bottom
    pair max y. Edges are floored/ceiled outward and clamped to the image.

    Args:
        pixel_box: Quadrilateral in pixel coordinates.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        CropBox, or None if the clamped rectangle has no area.
    """
    tl, tr, br, bl = pixel_box.corners()

    min_x = max(0, math.floor(min(tl.x, bl.x)))
    max_x = min(width, math.ceil(max(tr.x, br.x)))
    min_y = max(0, math.floor(min(tl.y, tr.y)))
    max_y = min(height, math.ceil(max(bl.y, br.y)))

    crop_width = max_x - min_x
    crop_height = max_y - min_y

    logger.debug(
        f"Axis-aligned crop: x=[{min_x}, {max_x}) y=[{min_y}, {max_y}) "
        f"size={crop_width}x{crop_height}"
    )

    if crop_width <= 0 or crop_height <= 0:
        return None

    return CropBox(left=min_x, top=min_y, width=crop_width, height=crop_height)


def is_rotation_significant(rotation_degrees: float, dead_zone_deg: float = 0.5) -> bool:
    """Check whether a rotation lies outside the detector-noise dead zone."""
    return abs(rotation_degrees) > dead_zone_deg


def rotated_canvas_size(width: int, height: int, degrees: float) -> Tuple[int, int]:
    """
    Size of the canvas needed to hold an image rotated by ``degrees``.

    Example:
        >>> rotated_canvas_size(1000, 800, 20)
        (1213, 1094)
    """
    radians = math.radians(degrees)
    cos_a = abs(math.cos(radians))
    sin_a = abs(math.sin(radians))
    new_width = int(round(width * cos_a + height * sin_a))
    new_height = int(round(width * sin_a + height * cos_a))
    return new_width, new_height


def rescale_crop_for_rotation(
    crop: CropBox,
    width: int,
    height: int,
    rotated_width: int,
    rotated_height: int,
) -> Optional[CropBox]:
    """
    Map a crop rectangle onto the canvas of a rotated image.

    The rectangle's centre and size are scaled linearly by the per-axis
    growth of the canvas. This approximates the rotated cover position
    without re-projecting the quadrilateral corners, so it is close for
    small angles and drifts as the angle grows.

    Args:
        crop: Crop rectangle on the original image.
        width: Original image width.
        height: Original image height.
        rotated_width: Width of the rotated canvas.
        rotated_height: Height of the rotated canvas.

    Returns:
        CropBox clamped to the rotated canvas, or None if nothing remains.
    """
    scale_x = rotated_width / width
    scale_y = rotated_height / height

    center_x, center_y = crop.center
    new_center_x = center_x * scale_x
    new_center_y = center_y * scale_y
    new_crop_width = crop.width * scale_x
    new_crop_height = crop.height * scale_y

    new_min_x = max(0, math.floor(new_center_x - new_crop_width / 2))
    new_min_y = max(0, math.floor(new_center_y - new_crop_height / 2))

    extract_width = min(math.floor(new_crop_width), rotated_width - new_min_x)
    extract_height = min(math.floor(new_crop_height), rotated_height - new_min_y)

    logger.debug(
        f"Rotated crop: scale=({scale_x:.3f}, {scale_y:.3f}) "
        f"origin=({new_min_x}, {new_min_y}) size={extract_width}x{extract_height}"
    )

    if extract_width <= 0 or extract_height <= 0:
        return None

    return CropBox(
        left=new_min_x, top=new_min_y, width=extract_width, height=extract_height
    )


def fit_inside_size(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    """
    Target size for a fit-inside resize that never enlarges.

    Example:
        >>> fit_inside_size(2400, 1200, 1200)
        (1200, 600)
        >>> fit_inside_size(800, 640, 1200)
        (800, 640)
    """
    if width <= max_dimension and height <= max_dimension:
        return width, height

    scale = min(max_dimension / width, max_dimension / height)
    return max(1, int(round(width * scale))), max(1, int(round(height * scale)))
