"""Helpers for sizing parts and resolving upload configuration."""

import logging
import math
import os
from typing import Any

from partflow.config_manager.upload_config import UploadConfig
from partflow.sources import ContentSource

logger = logging.getLogger(__name__)

_ENV_MAP: dict[str, str] = {
    "min_part_size": "PARTFLOW_MIN_PART_SIZE",
    "max_parts": "PARTFLOW_MAX_PARTS",
    "num_workers": "PARTFLOW_NUM_WORKERS",
    "bandwidth_limit": "PARTFLOW_BANDWIDTH_LIMIT",
    "show_progress": "PARTFLOW_SHOW_PROGRESS",
}

YES_CONFIRMATION = {"1", "true", "yes", "y"}

_UNIT_MULTIPLIERS = {
    "b": 1,
    "k": 1024,
    "kb": 1024,
    "m": 1024**2,
    "mb": 1024**2,
    "g": 1024**3,
    "gb": 1024**3,
}


def parse_bytes(value: int | str) -> int:
    """Parse a byte quantity from an integer or unit-suffixed string.

    Supported string units (case-insensitive):
        b, k, kb, m, mb, g, gb

    Args:
        value: Raw byte value as an ``int`` or a string such as ``"64mb"``.

    Returns:
        The parsed value in bytes.

    Raises:
        ValueError: If the input cannot be parsed or contains an unknown unit.
    """
    if isinstance(value, int):
        return value

    normalized_value = str(value).strip().lower()
    if normalized_value.isdigit():
        return int(normalized_value)

    digits = len(normalized_value) - len(normalized_value.lstrip("0123456789"))
    numeric_part = normalized_value[:digits]
    unit_suffix = normalized_value[digits:]

    if not numeric_part or unit_suffix not in _UNIT_MULTIPLIERS:
        raise ValueError(f"Invalid byte value: {value!r}")

    return int(numeric_part) * _UNIT_MULTIPLIERS[unit_suffix]


def get_content_length(source: ContentSource) -> int | None:
    """Return the total number of bytes a source will upload, if known."""
    return source.content_length


def is_upload_parallelizable(source: ContentSource) -> bool:
    """Return True if parts of the source may be uploaded concurrently.

    Only seekable sources qualify: parts of a stream must be read in order.
    """
    return source.is_seekable


def calculate_optimal_part_size(content_length: int, config: UploadConfig) -> int:
    """Pick a part size that keeps the upload within the part-count limit.

    Args:
        content_length: Total bytes to upload.
        config: Upload configuration supplying the limits.

    Returns:
        The larger of ``config.min_part_size`` and the size needed to fit
        the payload into ``config.max_parts`` parts.
    """
    optimal_part_size = math.ceil(content_length / config.max_parts)
    return max(optimal_part_size, config.min_part_size)


def _read_env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    for field_name, env_var_name in _ENV_MAP.items():
        env_value = os.getenv(env_var_name)
        if env_value is None:
            continue

        if field_name in {"min_part_size", "bandwidth_limit"}:
            try:
                overrides[field_name] = parse_bytes(env_value)
            except ValueError:
                logger.warning("Ignoring invalid %s=%r", env_var_name, env_value)
        elif field_name in {"max_parts", "num_workers"}:
            try:
                overrides[field_name] = int(env_value)
            except ValueError:
                logger.warning("Ignoring invalid %s=%r", env_var_name, env_value)
        else:
            overrides[field_name] = env_value.lower() in YES_CONFIRMATION

    return overrides


def build_upload_config(**overrides: Any) -> UploadConfig:
    """Build the effective upload configuration.

    Environment variables override the defaults, and keyword arguments
    override both.

    Returns:
        The resolved ``UploadConfig``.
    """
    values = _read_env_overrides()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return UploadConfig(**values)
