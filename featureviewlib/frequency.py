"""Frequency-scale remapping of spectrogram magnitude bins.

A spectrogram frame arrives as ``n`` linearly spaced bins from 0 Hz to
Nyquist.  Displays want ``m`` bins spread evenly on a perceptual scale
(linear, log10 or mel) between a chosen minimum and maximum frequency.
Each display bin centre is mapped back to Hz through the scale's inverse
and read from the source bins by linear interpolation.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any

import numpy as np

from .models import FeatureDescriptor, FeatureFrameSample
from .utils import clamp, is_finite_number, sanitize

log = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100.0
MEL_FACTOR = 2595.0
MEL_DIVISOR = 700.0
LOG_MIN_FREQUENCY = 1e-3


class FrequencyScale(Enum):
    LINEAR = "linear"
    LOG = "log"
    MEL = "mel"

    @classmethod
    def parse(cls, value: Any, fallback: FrequencyScale | None = None) -> FrequencyScale:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for scale in cls:
                if scale.value == normalized:
                    return scale
        return fallback if fallback is not None else cls.LINEAR

    def forward(self, frequency: float) -> float:
        """Hz -> scale units."""
        hz = max(0.0, frequency)
        if self is FrequencyScale.LINEAR:
            return hz
        if self is FrequencyScale.LOG:
            return math.log10(max(LOG_MIN_FREQUENCY, hz))
        return MEL_FACTOR * math.log10(1.0 + hz / MEL_DIVISOR)

    def inverse(self, value: float) -> float:
        """Scale units -> Hz."""
        if self is FrequencyScale.LINEAR:
            return max(0.0, value)
        if self is FrequencyScale.LOG:
            return 10.0 ** value
        return MEL_DIVISOR * (10.0 ** (value / MEL_FACTOR) - 1.0)


def resolve_frequency_range(min_frequency: float | None, max_frequency: float | None,
                            nyquist: float) -> tuple[float, float]:
    """Clamp the requested range into ``[0, nyquist]`` and repair inversions.

    An empty or inverted range is widened upwards by 1% of Nyquist (at
    least 1 Hz); if that hits Nyquist the minimum is pulled down instead.
    """
    lo = clamp(min_frequency if min_frequency is not None else 0.0, 0.0, nyquist)
    hi = clamp(max_frequency if max_frequency is not None else nyquist, lo or 0.0, nyquist)
    if hi <= lo:
        step = max(1.0, nyquist * 0.01)
        hi = min(nyquist, lo + step)
        if hi <= lo:
            lo = max(0.0, hi - step)
        log.debug("Frequency range [%s, %s] is empty, using [%s, %s] Hz",
                  min_frequency, max_frequency, lo, hi)
    return min(lo, hi), hi


def remap_frequency_bins(
    values,
    sample_rate: float,
    min_frequency: float,
    max_frequency: float,
    target_bin_count: int,
    scale: FrequencyScale | str = FrequencyScale.LINEAR,
) -> np.ndarray:
    """Re-bin linear-frequency magnitudes onto *target_bin_count* scaled bins."""
    scale = FrequencyScale.parse(scale)
    source = sanitize(values)
    target_bins = max(1, int(math.floor(target_bin_count)))
    if not is_finite_number(sample_rate) or sample_rate <= 0:
        sample_rate = DEFAULT_SAMPLE_RATE
    nyquist = sample_rate / 2.0
    safe_min, safe_max = resolve_frequency_range(min_frequency, max_frequency, nyquist)

    if source.size == 0:
        return np.zeros(target_bins, dtype=np.float64)

    source_bins = source.size
    frequency_step = nyquist / (source_bins - 1) if source_bins > 1 else nyquist
    scale_min = scale.forward(
        safe_min if scale is FrequencyScale.LINEAR else max(LOG_MIN_FREQUENCY, safe_min)
    )
    scale_max = scale.forward(max(safe_min, safe_max))
    scale_range = max(1e-9, scale_max - scale_min)

    output = np.empty(target_bins, dtype=np.float64)
    for i in range(target_bins):
        t = (i + 0.5) / target_bins
        frequency = clamp(scale.inverse(scale_min + scale_range * t), safe_min, safe_max)
        raw_index = frequency / frequency_step if frequency_step > 0 else 0.0
        index = clamp(raw_index, 0.0, source_bins - 1)
        lower = int(math.floor(index))
        upper = min(source_bins - 1, lower + 1)
        frac = index - lower
        output[i] = source[lower] + (source[upper] - source[lower]) * frac
    return output


def _positive(value: Any) -> float | None:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    return numeric if math.isfinite(numeric) and numeric > 0 else None


def resolve_spectrogram_sample_rate(sample: FeatureFrameSample | None,
                                    descriptor: FeatureDescriptor | None = None,
                                    fallback: float = DEFAULT_SAMPLE_RATE) -> float:
    """Find the analysis sample rate from frame and descriptor metadata."""
    if sample is None:
        return fallback
    descriptor = descriptor or sample.descriptor
    candidates: list[Any] = [sample.sample_rate]
    if descriptor is not None:
        overrides = descriptor.profile_overrides or {}
        candidates.append(overrides.get("sampleRate"))
        registry = descriptor.profile_registry or {}
        profile_id = descriptor.analysis_profile_id
        if profile_id and isinstance(registry.get(profile_id), dict):
            candidates.append(registry[profile_id].get("sampleRate"))
        for entry in registry.values():
            if isinstance(entry, dict):
                candidates.append(entry.get("sampleRate"))

    for candidate in candidates:
        resolved = _positive(candidate)
        if resolved is not None:
            return resolved
    return fallback
