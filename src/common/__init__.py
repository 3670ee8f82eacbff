"""
Common types shared across the album cover alignment modules.

This module provides standardized geometric data types so the detector
boundary and the image processor agree on coordinates and regions.
"""

from src.common.types import BoundingBox, CropBox, Point

__all__ = ["Point", "BoundingBox", "CropBox"]
