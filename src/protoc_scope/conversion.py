"""Conversion of numeric literal tokens into Python values."""

from __future__ import annotations

import math

from protoc_scope.errors import ValueConverterError


def _check_not_empty(text: str | None, type_name: str) -> str:
    if text is None or not text.strip():
        raise ValueConverterError(f"Couldn't convert empty string to {type_name}.")
    return text.strip()


def to_int(text: str | None) -> int:
    """Convert a decimal, hex (0x) or octal (leading 0) integer literal."""
    value = _check_not_empty(text, "int")
    sign = 1
    digits = value
    if digits[0] in "+-":
        sign = -1 if digits[0] == "-" else 1
        digits = digits[1:]
    try:
        if digits.lower().startswith("0x"):
            return sign * int(digits[2:], 16)
        if len(digits) > 1 and digits.startswith("0"):
            return sign * int(digits[1:], 8)
        return sign * int(digits, 10)
    except ValueError as e:
        raise ValueConverterError(f"Couldn't convert '{value}' to int.") from e


def to_double(text: str | None) -> float:
    """Convert a floating point literal, including ``inf`` and ``nan``."""
    value = _check_not_empty(text, "double")
    lowered = value.lower()
    if lowered in ("inf", "+inf"):
        return math.inf
    if lowered == "-inf":
        return -math.inf
    if lowered in ("nan", "+nan", "-nan"):
        return math.nan
    try:
        return float(value)
    except ValueError as e:
        raise ValueConverterError(f"Couldn't convert '{value}' to double.") from e


def to_number(text: str) -> int | float:
    """Convert a numeric literal to int when possible, otherwise to float."""
    try:
        return to_int(text)
    except ValueConverterError:
        return to_double(text)
