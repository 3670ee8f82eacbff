"""
Crop and straighten an album cover photo from a saved detector reply.

Usage:
    # Process a photo with the detector's JSON reply
    python scripts/process_cover.py photo.jpg analysis.json -o cover.jpg

    # Use a custom configuration
    python scripts/process_cover.py photo.png analysis.json --config my_config.yaml
"""

import argparse
import logging
import mimetypes
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.cover_alignment.config_loader import load_config  # noqa: E402
from src.cover_alignment.preprocess import (  # noqa: E402
    UploadValidationError,
    parse_bounds_analysis,
    validate_upload,
)
from src.cover_alignment.processor import CoverAlignmentProcessor  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Crop and straighten an album cover photo",
    )
    parser.add_argument("image", type=Path, help="Source photo (JPEG, PNG, GIF, WebP)")
    parser.add_argument(
        "analysis", type=Path, help="Bounds detector reply (JSON file)"
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output JPEG path (default: <image>_cover.jpg)",
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="Custom config.yaml path"
    )
    parser.add_argument(
        "--mime-type",
        type=str,
        default=None,
        help="Override the source MIME type (default: guessed from extension)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    image_bytes = args.image.read_bytes()
    mime_type = args.mime_type or mimetypes.guess_type(args.image.name)[0]

    try:
        validate_upload(image_bytes, mime_type)
    except UploadValidationError as e:
        logger.error(str(e))
        return 1

    analysis = parse_bounds_analysis(args.analysis.read_text(encoding="utf-8"))

    config = load_config(args.config) if args.config else load_config()
    processor = CoverAlignmentProcessor(config=config)
    result = processor.process(image_bytes, mime_type, analysis)

    if not result.is_success():
        print(f"FAILED ({result.failure_reason.value}): {result.error}")
        return 1

    output = args.output or args.image.with_name(f"{args.image.stem}_cover.jpg")
    output.write_bytes(result.processed_image)
    print(
        f"OK: crop={result.crop_box.to_tuple()} rotation={result.applied_rotation} "
        f"-> {output}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
