"""Environment variable parsing utilities."""

from __future__ import annotations


def parse_bool_env(value: str | None) -> bool | None:
    """Parse a boolean from an environment variable string.

    Returns True for "1", "true", "yes", "on" (case-insensitive).
    Returns None if value is None.
    """
    if value is None:
        return None
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_int_env(value: str | None) -> int | None:
    """Parse an integer from an environment variable string.

    Returns None if value is None or cannot be parsed.
    """
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_str_env(value: str | None, *, strip: bool = True) -> str | None:
    """Return the raw string value, or None when unset.

    Leading/trailing whitespace is removed unless ``strip`` is False; some
    settings (separators) are whitespace-significant.
    """
    if value is None:
        return None
    return value.strip() if strip else value
