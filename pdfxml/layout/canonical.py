"""Coordinate canonicalization: stable integer keys for grouping decisions.

Fragments printed on the same line rarely share bit-identical coordinates, so
every grouping step works on quantized keys (coordinate scaled by 10 and
rounded half up) instead of raw floats.
"""

from __future__ import annotations

import math
from typing import Union

QUANTIZE_SCALE = 10

Key = Union[int, float]


def quantize(value: float, scale: int = QUANTIZE_SCALE) -> Key:
    """Return the integer grouping key of a coordinate.

    Doxygen:
    - @param value: Raw page-space coordinate.
    - @param scale: Keys per coordinate unit (10 → 0.1 granularity).
    - @return: `round_half_up(value * scale)`; non-finite values are returned
      unchanged (NaN always as the shared `math.nan` so they group together).
    """
    try:
        value = float(value)
    except (TypeError, ValueError):
        return math.nan
    if math.isnan(value):
        return math.nan
    if math.isinf(value):
        return value
    return int(math.floor(value * scale + 0.5))


def dequantize(key: Key, scale: int = QUANTIZE_SCALE) -> float:
    """Map a key back to its coordinate (e.g. 55 → 5.5)."""
    return key / scale


def is_finite_key(key: Key) -> bool:
    return isinstance(key, int) or math.isfinite(key)


def as_key(value) -> Key:
    """Normalize a key read back from a DataFrame (numpy scalar, float) to `Key`."""
    value = float(value)
    if math.isnan(value):
        return math.nan
    if math.isinf(value):
        return value
    return int(value)


def format_number(value: Union[int, float, None]) -> str:
    """Render a coordinate the way it appears in XML attributes.

    Integral floats drop the trailing `.0` (`10.0` → `10`), others keep their
    shortest repr (`10.5` → `10.5`).
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_key(key: Key, scale: int = QUANTIZE_SCALE) -> str:
    """Render a quantized key as a coordinate (`55` → `5.5`)."""
    if not is_finite_key(key):
        return format_number(key)
    return format_number(round(dequantize(key, scale), 6))
