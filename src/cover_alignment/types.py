"""
Data types and structures for the Cover Alignment module.

Provides type-safe containers for detector input, configuration and results.
"""

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from src.common.types import BoundingBox, CropBox

OUTPUT_MIME_TYPE = "image/jpeg"


class Confidence(str, Enum):
    """Detector confidence levels (wire values are kept verbatim)."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FailureReason(Enum):
    """Specific reasons a processing call did not produce an image."""

    NO_ALBUM_DETECTED = "No Album Detected"  # Detector found nothing or no bounds
    UNREADABLE_IMAGE = "Unreadable Image"  # Decode failed or zero-size image
    INVALID_CROP_GEOMETRY = "Invalid Crop Geometry"  # Degenerate crop rectangle
    TRANSFORM_FAILURE = "Transform Failure"  # Codec error during rotate/extract/resize/encode
    NONE = "None"  # No failure


class AlbumBoundsAnalysis(BaseModel):
    """
    Bounds detector report for a single photo.

    Attributes:
        album_detected: Whether an album cover was found.
        bounding_box: Normalized quadrilateral of the cover, if any.
        rotation_degrees: Clockwise rotation needed to make the cover
            upright, roughly within -45..45.
        confidence: Detector confidence.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    album_detected: bool = Field(..., alias="albumDetected")
    bounding_box: Optional[BoundingBox] = Field(default=None, alias="boundingBox")
    rotation_degrees: float = Field(default=0.0, alias="rotationDegrees")
    confidence: Confidence = Confidence.LOW

    def to_wire(self) -> dict:
        """Serialize with the detector's field names and enum values."""
        return self.model_dump(by_alias=True, mode="json")


@dataclass(frozen=True)
class GeometryConfig:
    """Configuration for rotation and crop geometry."""

    rotation_dead_zone_deg: float  # |rotation| at or below this is treated as 0
    background_color: Tuple[int, int, int]  # Fill for canvas exposed by rotation (RGB)


@dataclass(frozen=True)
class OutputConfig:
    """Configuration for the resize and encode stages."""

    max_dimension: int  # Fit-inside bound for both axes
    jpeg_quality: int
    resize_interpolation: str


@dataclass(frozen=True)
class CoverAlignmentConfig:
    """Complete cover alignment module configuration."""

    geometry: GeometryConfig
    output: OutputConfig


@dataclass
class ProcessingResult:
    """
    Output from the cover alignment pipeline.

    ``processed_image`` holds the raw encoded JPEG bytes. Callers that need
    a text transport use ``to_base64()`` or ``to_data_url()``.

    Attributes:
        success: True only when an encoded image is present.
        processed_image: Encoded output bytes (None on failure).
        mime_type: ``image/jpeg`` on success, the source type otherwise.
        applied_rotation: Signed detector rotation that was applied, 0 if none.
        applied_crop: Whether a crop was applied.
        failure_reason: Typed failure category.
        error: Human-readable reason on failure.
        crop_box: Region extracted from the (possibly rotated) image.
    """

    success: bool
    processed_image: Optional[bytes]
    mime_type: str
    applied_rotation: float
    applied_crop: bool
    failure_reason: FailureReason = FailureReason.NONE
    error: Optional[str] = None
    crop_box: Optional[CropBox] = None

    @classmethod
    def failure(
        cls, reason: FailureReason, error: str, mime_type: str
    ) -> "ProcessingResult":
        """Build a failure result; no image, no crop, no rotation."""
        return cls(
            success=False,
            processed_image=None,
            mime_type=mime_type,
            applied_rotation=0,
            applied_crop=False,
            failure_reason=reason,
            error=error,
        )

    def is_success(self) -> bool:
        """Check if the pipeline produced an image."""
        return self.success and bool(self.processed_image)

    def to_base64(self) -> Optional[str]:
        """Base64 text of the encoded image, or None on failure."""
        if not self.processed_image:
            return None
        return base64.b64encode(self.processed_image).decode("ascii")

    def to_data_url(self) -> Optional[str]:
        """``data:<mime>;base64,<payload>`` for JSON transport, or None on failure."""
        encoded = self.to_base64()
        if encoded is None:
            return None
        return f"data:{self.mime_type};base64,{encoded}"
