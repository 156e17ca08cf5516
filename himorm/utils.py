"""Conversions of columns and values to their SQL text form."""

from __future__ import annotations

from typing import Any

CANNOT_CONVERT = "column cannot convert to string"

_PLAIN_TYPES = (bool, int, float, complex, bytes, bytearray, list, tuple, dict, set, frozenset)


def _is_stringer(value: Any) -> bool:
    """Tell whether a value carries its own text form through ``__str__``."""
    if value is None or isinstance(value, _PLAIN_TYPES):
        return False
    return type(value).__str__ is not object.__str__


def _format_float(value: float) -> str:
    if value != value:
        return "NaN"
    if value in (float("inf"), float("-inf")):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _format_value(value: Any) -> str:
    """Render a value the way a default value formatter shows it."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_value(item) for item in value) + "]"
    return str(value)


def column_to_string(column: Any) -> str:
    """Return the name of a column given as text or as an object with a text form."""
    if isinstance(column, str):
        return column
    if _is_stringer(column):
        return str(column)
    return CANNOT_CONVERT


def columns_to_string(*columns: Any) -> list[str]:
    """Convert columns in order, stopping after the first one that cannot be converted."""
    result: list[str] = []
    for column in columns:
        text = column_to_string(column)
        result.append(text)
        if text == CANNOT_CONVERT and not isinstance(column, str) and not _is_stringer(column):
            break
    return result


def to_string(value: Any) -> str:
    """Convert any value to text."""
    if isinstance(value, str):
        return value
    if _is_stringer(value):
        return str(value)
    return _format_value(value)


def to_strings(*values: Any) -> list[str]:
    """Convert every value to text."""
    return [to_string(value) for value in values]


def values(*items: str | int | float) -> list[str]:
    """Convert strings and numbers to text; other types are rejected."""
    result: list[str] = []
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise TypeError(f"unsupported value type: {type(item).__name__}")
        result.append(_format_value(item))
    return result