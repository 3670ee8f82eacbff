"""
Main processor for the Cover Alignment module.

Orchestrates the complete pipeline:
1. Detection gate (album + bounding box present)
2. Decode & dimension probe
3. Crop geometry (normalized box -> axis-aligned pixel rectangle)
4. Rotation + crop recomputation, or direct crop
5. Fit-inside resize and JPEG encode

Implements fail-fast strategy: stops at first failure and reports it as a
typed result instead of raising.
"""

import logging
from pathlib import Path
from typing import Optional

from src.cover_alignment.config_loader import load_config
from src.cover_alignment.geometry import (
    axis_aligned_crop,
    is_rotation_significant,
    normalized_to_pixels,
    rescale_crop_for_rotation,
)
from src.cover_alignment.image_ops import (
    decode_image,
    encode_jpeg,
    extract_region,
    image_size,
    resize_to_fit,
    rotate_image,
)
from src.cover_alignment.types import (
    OUTPUT_MIME_TYPE,
    AlbumBoundsAnalysis,
    CoverAlignmentConfig,
    FailureReason,
    ProcessingResult,
)

logger = logging.getLogger(__name__)


class CoverAlignmentProcessor:
    """
    Crops and straightens album cover photos from detector bounds.

    The processor holds only immutable configuration, so a single instance
    can serve concurrent callers.

    Example:
        >>> processor = CoverAlignmentProcessor()
        >>> analysis = AlbumBoundsAnalysis.model_validate(detector_json)
        >>> result = processor.process(image_bytes, "image/png", analysis)
        >>> if result.is_success():
        ...     Path("cover.jpg").write_bytes(result.processed_image)
    """

    def __init__(
        self,
        config: Optional[CoverAlignmentConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the cover alignment processor.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses default location.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else load_config()
            logger.info("Loaded configuration from file")

    def process(
        self,
        image_bytes: bytes,
        source_mime_type: str,
        analysis: AlbumBoundsAnalysis,
    ) -> ProcessingResult:
        """
        Execute the complete cover alignment pipeline.

        Args:
            image_bytes: Encoded source photo. Never modified.
            source_mime_type: MIME type of the upload (validated upstream).
            analysis: Detector report for the photo.

        Returns:
            ProcessingResult with the encoded JPEG on success, or a failure
            reason and message. Exceptions never escape.
        """
        logger.info("[Stage 1/5] Detection Gate")
        if not analysis.album_detected or analysis.bounding_box is None:
            logger.warning("Processing REJECTED at Stage 1: No album detected")
            return ProcessingResult.failure(
                FailureReason.NO_ALBUM_DETECTED, "No album detected", source_mime_type
            )

        try:
            return self._run_pipeline(image_bytes, source_mime_type, analysis)
        except Exception as e:
            logger.error(f"Image processing failed: {e}")
            return ProcessingResult.failure(
                FailureReason.TRANSFORM_FAILURE,
                str(e) or "Processing failed",
                source_mime_type,
            )

    def _run_pipeline(
        self,
        image_bytes: bytes,
        source_mime_type: str,
        analysis: AlbumBoundsAnalysis,
    ) -> ProcessingResult:
        # Stage 2: Decode & probe
        logger.info("[Stage 2/5] Decode & Dimension Probe")
        try:
            image = decode_image(image_bytes)
        except ValueError as e:
            logger.warning(f"Processing REJECTED at Stage 2: {e}")
            return ProcessingResult.failure(
                FailureReason.UNREADABLE_IMAGE, str(e), source_mime_type
            )

        width, height = image_size(image)
        if width == 0 or height == 0:
            logger.warning("Processing REJECTED at Stage 2: zero-size image")
            return ProcessingResult.failure(
                FailureReason.UNREADABLE_IMAGE,
                "Could not read image dimensions",
                source_mime_type,
            )
        logger.info(f"Decoded image size: {width}x{height}")

        # Stage 3: Crop geometry
        logger.info("[Stage 3/5] Crop Geometry")
        pixel_box = normalized_to_pixels(analysis.bounding_box, width, height)
        crop = axis_aligned_crop(pixel_box, width, height)
        if crop is None:
            logger.warning("Processing REJECTED at Stage 3: Invalid crop dimensions")
            return ProcessingResult.failure(
                FailureReason.INVALID_CROP_GEOMETRY,
                "Invalid crop dimensions",
                source_mime_type,
            )

        # Stage 4: Rotate (optional) and extract
        rotation = analysis.rotation_degrees
        if is_rotation_significant(rotation, self.config.geometry.rotation_dead_zone_deg):
            logger.info(f"[Stage 4/5] Rotate {rotation:.2f} deg & Extract")
            rotated = rotate_image(
                image, -rotation, self.config.geometry.background_color
            )
            rotated_width, rotated_height = image_size(rotated)
            crop = rescale_crop_for_rotation(
                crop, width, height, rotated_width, rotated_height
            )
            if crop is None:
                logger.warning(
                    "Processing REJECTED at Stage 4: crop vanished after rotation"
                )
                return ProcessingResult.failure(
                    FailureReason.INVALID_CROP_GEOMETRY,
                    "Invalid crop dimensions",
                    source_mime_type,
                )
            region = extract_region(rotated, crop)
            applied_rotation = rotation
        else:
            logger.info("[Stage 4/5] Extract (rotation within dead zone)")
            region = extract_region(image, crop)
            applied_rotation = 0

        logger.info(f"Extracted region {crop}")

        # Stage 5: Resize & encode
        logger.info("[Stage 5/5] Resize & Encode")
        region = resize_to_fit(
            region,
            self.config.output.max_dimension,
            self.config.output.resize_interpolation,
        )
        encoded = encode_jpeg(region, self.config.output.jpeg_quality)

        logger.info(
            f"Processing PASSED - {region.shape[1]}x{region.shape[0]} JPEG, "
            f"{len(encoded)} bytes"
        )

        return ProcessingResult(
            success=True,
            processed_image=encoded,
            mime_type=OUTPUT_MIME_TYPE,
            applied_rotation=applied_rotation,
            applied_crop=True,
            crop_box=crop,
        )


def process_album_image(
    image_bytes: bytes,
    source_mime_type: str,
    analysis: AlbumBoundsAnalysis,
    config: Optional[CoverAlignmentConfig] = None,
) -> ProcessingResult:
    """
    Convenience function for one-shot cover processing.

    Args:
        image_bytes: Encoded source photo.
        source_mime_type: MIME type of the upload.
        analysis: Detector report for the photo.
        config: Optional custom configuration. Uses default if None.

    Returns:
        ProcessingResult object.
    """
    processor = CoverAlignmentProcessor(config=config)
    return processor.process(image_bytes, source_mime_type, analysis)
