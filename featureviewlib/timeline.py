from __future__ import annotations

import logging
import math

import numpy as np

from .models import FeatureRangeSample, PaddingPlan
from .timing import TimingContext
from .utils import is_finite_number

log = logging.getLogger(__name__)


def compute_tick_window(timing: TimingContext, target_time: float,
                        window_seconds: float) -> tuple[int, int]:
    """Return the ``[start_tick, end_tick)`` window centred on *target_time*.

    The window start never goes below zero seconds; the end tick is always
    at least one tick past the start.
    """
    start_seconds = max(0.0, target_time - window_seconds / 2.0)
    end_seconds = start_seconds + window_seconds
    start_tick = int(math.floor(timing.seconds_to_ticks(start_seconds)))
    end_tick = max(start_tick + 1, int(math.ceil(timing.seconds_to_ticks(end_seconds))))
    return start_tick, end_tick


def build_padding_plan(
    sample: FeatureRangeSample,
    series: dict,
    start_tick: float,
    end_tick: float,
) -> PaddingPlan:
    """Work out how many silent frames are missing before / after the data."""
    lengths = [len(v) for v in series.values() if v is not None]
    observed = max([int(sample.frame_count or 0), *lengths, 0])

    hop = sample.hop_ticks
    if not is_finite_number(hop) or hop <= 0:
        return PaddingPlan(target_length=max(2, observed), pad_start=0, pad_end=0)

    track_start = sample.track_start_tick if is_finite_number(sample.track_start_tick) else start_tick
    track_end = sample.track_end_tick if is_finite_number(sample.track_end_tick) else end_tick
    missing_before = max(0.0, track_start - start_tick)
    missing_after = max(0.0, end_tick - track_end)
    pad_start = max(0, int(math.ceil(missing_before / hop)))
    pad_end = max(0, int(math.ceil(missing_after / hop)))
    plan = PaddingPlan(
        target_length=max(2, observed + pad_start + pad_end),
        pad_start=pad_start,
        pad_end=pad_end,
    )
    if pad_start or pad_end:
        log.debug("Padding plan %s for window [%s, %s)", plan, start_tick, end_tick)
    return plan


def apply_padding(values: np.ndarray, plan: PaddingPlan) -> np.ndarray:
    """Zero-pad one channel series according to *plan*.

    A series that already meets the target length and needs no padding is
    returned as-is (same object).  The result is never shorter than the
    input.
    """
    target = max(2, int(math.floor(plan.target_length)))
    pad_start = max(0, int(math.floor(plan.pad_start)))
    pad_end = max(0, int(math.floor(plan.pad_end)))
    if not (pad_start > 0 or pad_end > 0 or len(values) < target):
        return values

    desired = max(target, pad_start + len(values) + pad_end)
    extended = np.zeros(desired, dtype=np.float64)
    copy_count = min(len(values), desired - pad_start)
    extended[pad_start:pad_start + copy_count] = values[:copy_count]
    return extended


def pad_channel_series(series: dict, plan: PaddingPlan) -> dict:
    """Apply :func:`apply_padding` to every series; returns *series* itself
    when nothing changed."""
    padded = {}
    mutated = False
    for key, values in series.items():
        if values is None:
            continue
        result = apply_padding(values, plan)
        mutated = mutated or result is not values
        padded[key] = result
    return padded if mutated else series
