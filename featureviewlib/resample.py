from __future__ import annotations

import numpy as np

from .utils import js_round, sanitize


def ensure_point_count(width: float, fallback: float, prefer_larger: bool = True) -> int:
    """Number of display points for a series of *fallback* native samples.

    With *prefer_larger* the native resolution wins over a narrower display
    so no detail is discarded below it.
    """
    desired = max(2, js_round(width))
    safe_fallback = max(2, js_round(fallback))
    return max(desired, safe_fallback) if prefer_larger else min(desired, safe_fallback)


def upsample_linear(values: np.ndarray, target_count: int) -> np.ndarray:
    """Stretch *values* to *target_count* points by linear interpolation."""
    values = sanitize(values)
    if target_count <= 0:
        return np.zeros(0, dtype=np.float64)
    if values.size == 0:
        return np.zeros(target_count, dtype=np.float64)
    if values.size == 1:
        return np.full(target_count, values[0], dtype=np.float64)
    if target_count == values.size:
        return values.copy()

    last = values.size - 1
    denom = target_count - 1
    if denom == 0:
        positions = np.zeros(1, dtype=np.float64)
    else:
        positions = np.arange(target_count, dtype=np.float64) / denom * last
    left = np.minimum(np.floor(positions).astype(np.int64), last)
    frac = positions - left
    right = np.minimum(left + 1, last)
    return values[left] + (values[right] - values[left]) * frac


def downsample_averaged(values: np.ndarray, target_count: int) -> np.ndarray:
    """Shrink *values* to *target_count* points by bucket means."""
    # non-finite samples count as 0
    values = sanitize(values)
    if target_count <= 0:
        return np.zeros(0, dtype=np.float64)
    if values.size == 0:
        return np.zeros(target_count, dtype=np.float64)
    if target_count >= values.size:
        return values.copy()

    n = values.size
    bucket_size = n / target_count
    buckets = np.arange(target_count, dtype=np.float64)
    starts = np.floor(buckets * bucket_size).astype(np.int64)
    ends = np.minimum(np.floor((buckets + 1) * bucket_size).astype(np.int64), n)
    counts = ends - starts

    cs = np.empty(n + 1, dtype=np.float64)
    cs[0] = 0.0
    np.cumsum(values, out=cs[1:])
    result = np.empty(target_count, dtype=np.float64)
    filled = counts > 0
    result[filled] = (cs[ends[filled]] - cs[starts[filled]]) / counts[filled]
    for bucket in np.flatnonzero(~filled):
        nearest = min(n - 1, max(0, js_round(bucket * bucket_size)))
        result[bucket] = values[nearest]
    return result


def resample(values, target_count: int) -> np.ndarray:
    """Map *values* onto exactly *target_count* points.

    Upsamples linearly, downsamples by bucket averaging.  Empty input gives
    zeros; a single value is repeated.  Non-finite samples count as 0.
    """
    values = sanitize(values)
    target_count = int(target_count)
    if target_count <= 0:
        return np.zeros(0, dtype=np.float64)
    if values.size <= 1:
        fill = values[0] if values.size else 0.0
        return np.full(target_count, fill, dtype=np.float64)
    if values.size == target_count:
        return values.copy()
    if values.size < target_count:
        return upsample_linear(values, target_count)
    return downsample_averaged(values, target_count)
