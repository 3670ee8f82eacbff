"""
Configuration loader for the Cover Alignment module.

Loads and validates configuration from config.yaml file.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from src.cover_alignment.types import CoverAlignmentConfig, GeometryConfig, OutputConfig

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

VALID_INTERPOLATIONS = ["linear", "cubic", "nearest", "area", "lanczos"]


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> CoverAlignmentConfig:
    """
    Load cover alignment configuration from YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated CoverAlignmentConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid or missing required fields.

    Example:
        >>> config = load_config()
        >>> print(config.output.max_dimension)
        1200
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading cover alignment config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    try:
        config = _parse_config(raw_config)
        _validate_config(config)
        logger.info("Successfully loaded cover alignment configuration")
        return config
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration file: {e}") from e


def _parse_config(raw: Dict[str, Any]) -> CoverAlignmentConfig:
    """Parse raw dictionary into structured config objects."""
    color_raw = raw["geometry"]["background_color"]
    if len(color_raw) != 3:
        raise ValueError(f"background_color needs 3 channels, got {len(color_raw)}")

    return CoverAlignmentConfig(
        geometry=GeometryConfig(
            rotation_dead_zone_deg=float(raw["geometry"]["rotation_dead_zone_deg"]),
            background_color=tuple(int(c) for c in color_raw),
        ),
        output=OutputConfig(
            max_dimension=int(raw["output"]["max_dimension"]),
            jpeg_quality=int(raw["output"]["jpeg_quality"]),
            resize_interpolation=str(raw["output"]["resize_interpolation"]),
        ),
    )


def _validate_config(config: CoverAlignmentConfig) -> None:
    """
    Validate configuration values for logical consistency.

    Raises:
        ValueError: If any configuration value is invalid.
    """
    if config.geometry.rotation_dead_zone_deg < 0:
        raise ValueError("rotation_dead_zone_deg cannot be negative")

    for channel in config.geometry.background_color:
        if not 0 <= channel <= 255:
            raise ValueError(f"background_color channel {channel} outside 0..255")

    if config.output.max_dimension < 1:
        raise ValueError("max_dimension must be at least 1")

    if not 1 <= config.output.jpeg_quality <= 100:
        raise ValueError(
            f"jpeg_quality must be within 1..100, got {config.output.jpeg_quality}"
        )

    if config.output.resize_interpolation not in VALID_INTERPOLATIONS:
        raise ValueError(
            f"Invalid resize_interpolation: {config.output.resize_interpolation}. "
            f"Must be one of {VALID_INTERPOLATIONS}"
        )

    logger.debug("Configuration validation passed")
