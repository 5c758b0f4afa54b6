"""Environment variable parsing helpers shared by config modules."""

from __future__ import annotations

import os


def get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed float value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def get_str_env(key: str, *fallback_keys: str) -> str | None:
    """Get the first non-blank value among key and fallback keys."""
    for name in (key, *fallback_keys):
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None
