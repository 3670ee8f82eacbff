"""
Common type definitions for the album cover alignment pipeline.

This module provides Pydantic-based type definitions for the geometric
values exchanged between the bounds detector and the image processor:
points, quadrilateral bounding boxes, and axis-aligned crop regions.

These types provide:
- Type validation and conversion
- Verbatim JSON field names (``topLeft``, ``bottomRight``, ...) on the wire
- Helper methods for common operations
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Point(BaseModel):
    """
    A 2D coordinate (x, y).

    Coordinates are kept as floats: detector output is normalized to
    [0.0, 1.0] of the image size and pixel conversion must not round.

    Attributes:
        x: X-coordinate (horizontal).
        y: Y-coordinate (vertical).

    Example:
        >>> point = Point(x=0.1, y=0.25)
        >>> point.to_tuple()
        (0.1, 0.25)
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _check_numeric(cls, v: float) -> float:
        """Reject booleans and non-numeric coordinates."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"Coordinate must be numeric, got {type(v)}")
        return float(v)

    def scaled(self, scale_x: float, scale_y: float) -> "Point":
        """Return a new point with x and y scaled independently."""
        return Point(x=self.x * scale_x, y=self.y * scale_y)

    def to_tuple(self) -> Tuple[float, float]:
        """Convert Point to tuple (x, y)."""
        return (self.x, self.y)


class BoundingBox(BaseModel):
    """
    Four corner points tracing a detected quadrilateral clockwise.

    The corners describe the cover as it visually appears in the photo and
    need not form a rectangle. Field names follow the detector's JSON output
    (``topLeft``, ``topRight``, ``bottomRight``, ``bottomLeft``); the
    snake_case names are accepted too.

    Example:
        >>> box = BoundingBox.model_validate({
        ...     "topLeft": {"x": 0.1, "y": 0.1},
        ...     "topRight": {"x": 0.9, "y": 0.1},
        ...     "bottomRight": {"x": 0.9, "y": 0.9},
        ...     "bottomLeft": {"x": 0.1, "y": 0.9},
        ... })
        >>> box.top_right.x
        0.9
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    top_left: Point = Field(..., alias="topLeft")
    top_right: Point = Field(..., alias="topRight")
    bottom_right: Point = Field(..., alias="bottomRight")
    bottom_left: Point = Field(..., alias="bottomLeft")

    @classmethod
    def from_list(cls, coords: list) -> "BoundingBox":
        """
        Create BoundingBox from a list of 4 [x, y] pairs in TL, TR, BR, BL order.

        Raises:
            ValueError: If the list does not contain exactly 4 pairs.
        """
        if len(coords) != 4:
            raise ValueError(f"Expected list with 4 points, got {len(coords)}")
        tl, tr, br, bl = (Point(x=c[0], y=c[1]) for c in coords)
        return cls(top_left=tl, top_right=tr, bottom_right=br, bottom_left=bl)

    def corners(self) -> Tuple[Point, Point, Point, Point]:
        """Return corners in clockwise order (TL, TR, BR, BL)."""
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)

    def to_wire(self) -> dict:
        """Serialize with the detector's camelCase field names."""
        return self.model_dump(by_alias=True)


class CropBox(BaseModel):
    """
    Integer extract region ``(left, top, width, height)`` in pixels.

    Attributes:
        left: X offset of the region's left edge.
        top: Y offset of the region's top edge.
        width: Region width, strictly positive.
        height: Region height, strictly positive.
    """

    model_config = ConfigDict(frozen=True)

    left: int = Field(..., ge=0)
    top: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @property
    def right(self) -> int:
        """Exclusive right edge (left + width)."""
        return self.left + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge (top + height)."""
        return self.top + self.height

    @property
    def center(self) -> Tuple[float, float]:
        """Centre of the region."""
        return ((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    def fits_within(self, image_width: int, image_height: int) -> bool:
        """Check that the region lies completely inside an image of the given size."""
        return self.right <= image_width and self.bottom <= image_height

    def to_tuple(self) -> Tuple[int, int, int, int]:
        """Convert to tuple (left, top, width, height)."""
        return (self.left, self.top, self.width, self.height)

    def __repr__(self) -> str:
        return (
            f"CropBox(left={self.left}, top={self.top}, "
            f"width={self.width}, height={self.height})"
        )
