"""Helpers for reading loosely-typed key/value sources.

The environment (and anything else shaped like ``Mapping[str, object]``)
is read through these helpers so that blank values are treated as unset
and typed values are validated in one place.
"""

from __future__ import annotations

from collections.abc import Mapping


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value from a mapping, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_float(table: Mapping[str, object], key: str) -> float | None:
    """Get a float value from a mapping.

    Numeric strings are parsed. Returns None if missing or blank.

    Raises:
        ValueError: If the value is present but not a number.
    """
    value = table.get(key)
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number, got {value!r}")
    if isinstance(value, int | float):
        return float(value)
    s = get_str(table, key)
    if s is None:
        return None
    try:
        return float(s)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {s!r}") from None
