from __future__ import annotations

import math

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* into ``[lo, hi]``.  Non-finite values collapse to *lo*."""
    if not math.isfinite(value):
        return lo
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def js_round(value: float) -> int:
    """
    Round half up (``floor(x + 0.5)``).
    Python's built-in round() uses banker's rounding, which shifts bucket
    and window boundaries on exact .5 values.
    """
    return int(math.floor(value + 0.5))


def is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        return False
    return math.isfinite(float(value))


def sanitize(values) -> np.ndarray:
    """Return a float64 copy of *values* with NaN/Inf replaced by 0."""
    arr = np.array(values, dtype=np.float64, copy=True).reshape(-1)
    if arr.size:
        arr[~np.isfinite(arr)] = 0.0
    return arr
