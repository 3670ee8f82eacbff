"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest


@pytest.fixture
def unit_box():
    """Fixture providing the full-frame normalized bounding box."""
    from src.common.types import BoundingBox

    return BoundingBox.from_list([[0, 0], [1, 0], [1, 1], [0, 1]])


@pytest.fixture
def inset_box():
    """Fixture providing a box inset by 10% on every side."""
    from src.common.types import BoundingBox

    return BoundingBox.from_list([[0.1, 0.1], [0.9, 0.1], [0.9, 0.9], [0.1, 0.9]])


@pytest.fixture
def make_analysis(inset_box):
    """Factory fixture building detector analyses around the inset box."""
    from src.cover_alignment.types import AlbumBoundsAnalysis, Confidence

    def _make(rotation=0.0, detected=True, box=inset_box, confidence=Confidence.HIGH):
        return AlbumBoundsAnalysis(
            album_detected=detected,
            bounding_box=box,
            rotation_degrees=rotation,
            confidence=confidence,
        )

    return _make


@pytest.fixture
def make_cover_photo():
    """
    Factory fixture encoding a synthetic photo of an album cover.

    The photo is a white background with a dark square filling the 10%
    inset region, returned as encoded bytes.
    """
    import cv2
    import numpy as np

    def _make(width=1000, height=800, ext=".jpg"):
        image = np.ones((height, width, 3), dtype=np.uint8) * 255
        cv2.rectangle(
            image,
            (int(width * 0.1), int(height * 0.1)),
            (int(width * 0.9) - 1, int(height * 0.9) - 1),
            (40, 40, 40),
            -1,
        )
        ok, buffer = cv2.imencode(ext, image)
        assert ok
        return buffer.tobytes()

    return _make


@pytest.fixture
def decode_output():
    """Fixture decoding processor output bytes back into a BGR array."""
    import cv2
    import numpy as np

    def _decode(data):
        return cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)

    return _decode
