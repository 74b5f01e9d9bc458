from __future__ import annotations

import math

import numpy as np

from .utils import clamp, js_round, lerp, sanitize


def tapered_window_size(base_window_size: float, position: float) -> float:
    """Window size at *position* (0..1) along the buffer.

    Piecewise linear through ``base`` at 0, ``base / 2`` at 0.5 and 1 at the
    end of the buffer.
    """
    if base_window_size <= 1:
        return 1.0
    position = clamp(position if math.isfinite(position) else 0.0, 0.0, 1.0)
    mid_window_size = max(1.0, base_window_size / 2.0)
    if position <= 0.5:
        return lerp(base_window_size, mid_window_size, position / 0.5)
    return lerp(mid_window_size, 1.0, (position - 0.5) / 0.5)


def damp(values, radius: float) -> np.ndarray:
    """Forward-looking moving average with a position-tapered window.

    Sample ``i`` is replaced by the mean of ``values[i .. i + r]`` where
    ``r`` shrinks from ``floor(radius)`` at the start of the buffer to 0 at
    the end.  The window does not look backwards.  Non-finite samples
    count as 0.
    """
    values = sanitize(values)
    if not radius or radius <= 0 or not math.isfinite(radius):
        return values.copy()
    n = values.size
    if n == 0:
        return values.copy()

    base_window_size = max(1, int(math.floor(radius)) + 1)
    denom = max(1, n - 1)
    cs = np.empty(n + 1, dtype=np.float64)
    cs[0] = 0.0
    np.cumsum(values, out=cs[1:])

    result = np.empty(n, dtype=np.float64)
    for i in range(n):
        window = tapered_window_size(base_window_size, i / denom)
        dynamic_radius = max(0, js_round(window) - 1)
        end = min(n - 1, i + dynamic_radius)
        result[i] = (cs[end + 1] - cs[i]) / (end - i + 1)
    return result
