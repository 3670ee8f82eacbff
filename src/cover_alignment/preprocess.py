"""
Preprocess boundary for uploaded album photos.

Bridges the bounds detector and the HTTP layer:
- parses the detector's reply into an AlbumBoundsAnalysis,
- validates uploads (type and size),
- runs the processor and shapes the JSON response the frontend expects.

A failed response always means "keep the original photo"; nothing here
raises for detector or processing problems.
"""

import json
import logging
import re
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.cover_alignment.processor import CoverAlignmentProcessor
from src.cover_alignment.types import AlbumBoundsAnalysis, Confidence

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB

LOW_CONFIDENCE_ERROR = "Could not detect album in image with sufficient confidence"

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


class UploadValidationError(ValueError):
    """Raised when an upload is missing, too large, or of a disallowed type."""


class AnalysisSummary(BaseModel):
    """Detector fields echoed back to the client."""

    model_config = ConfigDict(populate_by_name=True)

    album_detected: bool = Field(..., alias="albumDetected")
    rotation_degrees: float = Field(..., alias="rotationDegrees")
    confidence: Confidence


class PreprocessResponse(BaseModel):
    """JSON body returned to the frontend for a preprocess request."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    processed_image_data_url: Optional[str] = Field(
        default=None, alias="processedImageDataUrl"
    )
    analysis: AnalysisSummary
    error: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with camelCase names; ``error`` is omitted on success."""
        data = self.model_dump(by_alias=True, mode="json")
        if data["error"] is None:
            del data["error"]
        return data


def no_detection() -> AlbumBoundsAnalysis:
    """Analysis used when the detector reply is unusable."""
    return AlbumBoundsAnalysis(
        album_detected=False,
        bounding_box=None,
        rotation_degrees=0.0,
        confidence=Confidence.LOW,
    )


def parse_bounds_analysis(payload: Union[str, bytes, Dict[str, Any]]) -> AlbumBoundsAnalysis:
    """
    Parse the bounds detector's reply.

    Accepts a decoded JSON object or the raw text reply, which may wrap the
    JSON object in a fenced code block. Anything unparseable or off-schema
    degrades to "no album detected" with low confidence.

    Example:
        >>> parse_bounds_analysis('{"albumDetected": false}').album_detected
        False
        >>> parse_bounds_analysis("I cannot see an album").confidence
        <Confidence.LOW: 'low'>
    """
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")

    if isinstance(payload, str):
        text = payload.strip()
        fenced = _FENCED_JSON.search(text)
        if fenced:
            text = fenced.group(1)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Detector reply is not JSON: {e}")
            return no_detection()

    if not isinstance(payload, dict):
        logger.warning(f"Detector reply is not a JSON object: {type(payload).__name__}")
        return no_detection()

    try:
        return AlbumBoundsAnalysis.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Detector reply failed validation: {e.error_count()} error(s)")
        return no_detection()


def validate_upload(image_bytes: Optional[bytes], mime_type: Optional[str]) -> None:
    """
    Check an upload against the accepted types and size limit.

    Raises:
        UploadValidationError: If the upload is empty, too large, or of a
            type other than JPEG, PNG, GIF or WebP.
    """
    if not image_bytes:
        raise UploadValidationError("No image file provided")

    if mime_type not in ALLOWED_MIME_TYPES:
        raise UploadValidationError(
            "Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed."
        )

    if len(image_bytes) > MAX_UPLOAD_BYTES:
        raise UploadValidationError(
            f"File too large: {len(image_bytes)} bytes exceeds {MAX_UPLOAD_BYTES}"
        )


def _summary(analysis: AlbumBoundsAnalysis, rotation: Optional[float] = None) -> AnalysisSummary:
    return AnalysisSummary(
        album_detected=analysis.album_detected,
        rotation_degrees=analysis.rotation_degrees if rotation is None else rotation,
        confidence=analysis.confidence,
    )


def preprocess_upload(
    image_bytes: bytes,
    mime_type: str,
    analysis: AlbumBoundsAnalysis,
    processor: Optional[CoverAlignmentProcessor] = None,
) -> PreprocessResponse:
    """
    Crop and straighten an uploaded photo for storage.

    Low-confidence or missing detections skip processing entirely. On
    success the image is returned as a ``data:`` URL and the reported
    rotation is the one actually applied.

    Args:
        image_bytes: Upload body (already validated).
        mime_type: Upload MIME type.
        analysis: Detector report for the upload.
        processor: Processor to use; a default one is created if None.

    Returns:
        PreprocessResponse ready for JSON serialization.
    """
    if not analysis.album_detected or analysis.confidence == Confidence.LOW:
        logger.info(
            f"Skipping preprocessing: detected={analysis.album_detected}, "
            f"confidence={analysis.confidence.value}"
        )
        return PreprocessResponse(
            success=False,
            processed_image_data_url=None,
            analysis=_summary(analysis),
            error=LOW_CONFIDENCE_ERROR,
        )

    processor = processor or CoverAlignmentProcessor()
    result = processor.process(image_bytes, mime_type, analysis)

    if not result.is_success():
        logger.info(f"Preprocessing failed, original image kept: {result.error}")
        return PreprocessResponse(
            success=False,
            processed_image_data_url=None,
            analysis=_summary(analysis),
            error=result.error or "Image processing failed",
        )

    logger.info("Image preprocessed successfully")
    return PreprocessResponse(
        success=True,
        processed_image_data_url=result.to_data_url(),
        analysis=_summary(analysis, rotation=result.applied_rotation),
    )
