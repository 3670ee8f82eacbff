"""
Album Cover Alignment

Turns a detector-reported album cover quadrilateral into a straightened,
cropped, size-bounded JPEG.

Pipeline stages:
1. Detection gate
2. Decode & dimension probe
3. Crop geometry (normalized box -> pixel rectangle)
4. Rotation with crop recomputation, or direct crop
5. Fit-inside resize & JPEG encode
"""

from src.cover_alignment.config_loader import load_config
from src.cover_alignment.geometry import (
    axis_aligned_crop,
    normalized_to_pixels,
    rescale_crop_for_rotation,
)
from src.cover_alignment.preprocess import (
    PreprocessResponse,
    UploadValidationError,
    parse_bounds_analysis,
    preprocess_upload,
    validate_upload,
)
from src.cover_alignment.processor import CoverAlignmentProcessor, process_album_image
from src.cover_alignment.types import (
    AlbumBoundsAnalysis,
    Confidence,
    CoverAlignmentConfig,
    FailureReason,
    ProcessingResult,
)

__all__ = [
    "CoverAlignmentProcessor",
    "process_album_image",
    "load_config",
    "normalized_to_pixels",
    "axis_aligned_crop",
    "rescale_crop_for_rotation",
    "parse_bounds_analysis",
    "preprocess_upload",
    "validate_upload",
    "PreprocessResponse",
    "UploadValidationError",
    "AlbumBoundsAnalysis",
    "Confidence",
    "CoverAlignmentConfig",
    "FailureReason",
    "ProcessingResult",
]
