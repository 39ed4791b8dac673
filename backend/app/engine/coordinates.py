"""Resolve LLM-issued coordinates and lengths into canvas pixels.

The model is inconsistent about conventions: it may send absolute pixels,
positions on a fixed 400-unit grid, offsets from the canvas centre, or
percentage strings. Every value is mapped to *something* on the canvas rather
than rejecting the plan. Ambiguous values (300 on an 800-wide canvas fits both
"absolute" and "offset") are settled by the fixed rule order below.
"""

from __future__ import annotations

import math
from typing import Any

# Nominal grid size the model tends to draw on when it ignores the real canvas size
NOMINAL_GRID = 400.0

# Length used when the model gives no usable length: 10% of the axis
DEFAULT_LENGTH_FRACTION = 0.1


def to_number(value: Any) -> float:
    """Coerce a JSON value to float; anything unusable becomes NaN."""
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def _parse_percentage(value: Any) -> float | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if not stripped.endswith("%"):
        return None
    pct = to_number(stripped[:-1])
    return pct if math.isfinite(pct) else None


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def resolve_coordinate(value: Any, size: float, is_relative: bool = False) -> float:
    """Map a coordinate on an axis of length ``size`` to a pixel position.

    Rules, first match wins:
      1. ``"N%"`` → N% of the axis, clamped to [0, size]
      2. missing / non-numeric / non-finite → axis midpoint
      3. relative mode → midpoint + value (clamping is left to the caller)
      4. within [0, size] → as is
      5. within [-mid, mid] → offset from the midpoint
      6. within [0, 400] → rescaled from the 400-unit nominal grid
      7. other negatives → midpoint + value, floored at 0
      8. anything else → clamped to [0, size]
    """
    center = size / 2
    pct = _parse_percentage(value)
    if pct is not None:
        return _clamp(pct / 100 * size, 0.0, size)

    num = to_number(value)
    if not math.isfinite(num):
        return center

    if is_relative:
        return center + num

    if 0 <= num <= size:
        return num
    if -center <= num <= center:
        return center + num
    if 0 <= num <= NOMINAL_GRID:
        return num / NOMINAL_GRID * size
    if num < 0:
        return max(0.0, center + num)
    return _clamp(num, 0.0, size)


def normalize_length(value: Any, axis_size: float) -> float:
    """Length analogue of :func:`resolve_coordinate` (radius, width, height)."""
    pct = _parse_percentage(value)
    if pct is not None:
        return _clamp(pct / 100 * axis_size, 0.0, axis_size)

    num = to_number(value)
    if not math.isfinite(num):
        return axis_size * DEFAULT_LENGTH_FRACTION

    num = abs(num)
    if num <= axis_size:
        return num
    if num <= NOMINAL_GRID:
        return num / NOMINAL_GRID * axis_size
    return min(axis_size, num)


class CoordinateResolver:
    """Axis-aware front end over a fixed canvas size."""

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def axis_size(self, axis: str) -> float:
        if axis == "x":
            return self.width
        if axis == "y":
            return self.height
        raise ValueError(f"Unknown axis: {axis!r}")

    def resolve(self, value: Any, axis: str, is_relative: bool = False) -> float:
        return resolve_coordinate(value, self.axis_size(axis), is_relative)

    def length(self, value: Any, axis_size: float) -> float:
        return normalize_length(value, axis_size)

    def clamp(self, value: float, axis: str) -> float:
        return _clamp(value, 0.0, self.axis_size(axis))
