from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import numpy as np

from .amplitude import (
    apply_gain,
    apply_side_selection,
    apply_spectrum_gain,
    apply_spectrum_tilt,
    normalize_decibels,
)
from .channels import extract_waveform_channels, resolve_channel_selection
from .config import validate_config
from .context import SamplingContext
from .frequency import FrequencyScale, remap_frequency_bins
from .models import FeatureRangeSample, WaveformResult, WaveformSide
from .resample import ensure_point_count, resample
from .sampler import FeatureSampler
from .smoothing import damp
from .timeline import build_padding_plan, pad_channel_series
from .utils import clamp, is_finite_number, js_round, sanitize

log = logging.getLogger(__name__)

MSG_NO_WAVEFORM = "No waveform data"
MSG_WAVEFORM_TOO_SHORT = "Waveform too short"

_DENSITY_MIN = 0.1
_FULL_DENSITY = 0.999


# ---------------------------------------------------------------------------
# Waveform
# ---------------------------------------------------------------------------

def prepare_values_for_display(
    values,
    width: float,
    damp_radius: float,
    side: WaveformSide | str,
    density: float,
    gain: float,
) -> np.ndarray | None:
    """Fit one channel series to the display and apply the visual stages.

    Resample to the display width (never below native resolution),
    optionally thin out by *density*, then damp, gain and side selection.
    Returns ``None`` when fewer than two values are available.
    """
    if values is None or len(values) < 2:
        return None
    values = np.asarray(values, dtype=np.float64)
    density = clamp(density if is_finite_number(density) else 1.0, _DENSITY_MIN, 1.0)

    base_count = ensure_point_count(width, len(values), True)
    normalized = resample(values, base_count)
    if density < _FULL_DENSITY:
        density_target = max(2, js_round(width * density))
        if density_target < len(normalized):
            normalized = resample(normalized, density_target)

    averaged = damp(normalized, damp_radius)
    amplified = apply_gain(averaged, gain)
    return apply_side_selection(amplified, side)


def sample_waveform_range(
    range_sample: FeatureRangeSample | None,
    start_tick: float,
    end_tick: float,
    *,
    primary_channel: Any = "left",
    secondary_channel: Any = "right",
    width: float = 420,
    damp_radius: float = 0,
    side: WaveformSide | str = WaveformSide.BOTH,
    density: float = 1.0,
    gain: float = 1.0,
) -> WaveformResult:
    """Turn a sampled waveform window into display-ready primary/secondary
    series."""
    if range_sample is None or range_sample.data is None or len(range_sample.data) == 0:
        return WaveformResult(message=MSG_NO_WAVEFORM)

    base = extract_waveform_channels(range_sample)
    plan = build_padding_plan(range_sample, base, start_tick, end_tick)
    series = pad_channel_series(base, plan)

    primary = resolve_channel_selection(series, primary_channel)
    exclude = {primary.key} if primary is not None else None
    secondary = resolve_channel_selection(series, secondary_channel, exclude)

    options = dict(width=width, damp_radius=damp_radius, side=side,
                   density=density, gain=gain)
    prepared_primary = (prepare_values_for_display(primary.values, **options)
                        if primary is not None else None)
    prepared_secondary = (prepare_values_for_display(secondary.values, **options)
                          if secondary is not None else None)

    renderable = any(
        p is not None and len(p) >= 2 for p in (prepared_primary, prepared_secondary)
    )
    if not renderable:
        log.debug("Waveform window [%s, %s) has fewer than two points", start_tick, end_tick)
        return WaveformResult(message=MSG_WAVEFORM_TOO_SHORT)

    return WaveformResult(
        primary=prepared_primary,
        secondary=prepared_secondary,
        primary_key=primary.key if primary is not None else None,
        secondary_key=secondary.key if secondary is not None else None,
    )


# ---------------------------------------------------------------------------
# Spectrum / meter
# ---------------------------------------------------------------------------

def prepare_spectrum_bins(
    values,
    sample_rate: float,
    *,
    min_frequency: float = 20.0,
    max_frequency: float = 20000.0,
    bar_count: int = 64,
    scale: FrequencyScale | str = FrequencyScale.LINEAR,
    tilt: float = 0.0,
    gain: float = 1.0,
    min_decibels: float = -100.0,
    max_decibels: float = -10.0,
) -> np.ndarray:
    """Remap a dB magnitude frame onto display bins and normalize to [0, 1]."""
    source = sanitize(values)
    if source.size == 0:
        return np.zeros(0, dtype=np.float64)
    scaled = remap_frequency_bins(source, sample_rate, min_frequency,
                                  max_frequency, bar_count, scale)
    shaped = apply_spectrum_gain(apply_spectrum_tilt(scaled, tilt), gain)
    return normalize_decibels(shaped, min_decibels, max_decibels)


def normalize_meter_level(value: float, min_value: float, max_value: float) -> float:
    span = max(1e-6, max_value - min_value)
    return clamp((value - min_value) / span, 0.0, 1.0)


# ---------------------------------------------------------------------------
# Façade
# ---------------------------------------------------------------------------

class SamplingPipeline:
    """Holds a configured set of samplers and runs them against a context.

    Samplers share no mutable state, so :meth:`sample_all` fans them out
    over a thread pool.
    """

    def __init__(
        self,
        samplers: list[FeatureSampler] | None = None,
        config: dict[str, Any] | None = None,
        max_workers: int | None = None,
    ):
        if samplers is None:
            from .samplers import default_samplers
            samplers = default_samplers()
        self.config = config or {}
        validate_config(self.config)
        self.max_workers = max_workers or min(os.cpu_count() or 4, 8)

        self.samplers: dict[str, FeatureSampler] = {}
        for sampler in samplers:
            if sampler.id in self.samplers:
                raise ValueError(f"Duplicate sampler id: {sampler.id}")
            sampler.configure(self.config)
            self.samplers[sampler.id] = sampler
        log.debug("Configured samplers: %s", ", ".join(self.samplers))

    def sample(self, sampler_id: str, context: SamplingContext,
               track_id: str | None, time_seconds: float):
        """Run one sampler.  Unknown ids raise ``KeyError``."""
        return self.samplers[sampler_id].sample(context, track_id, time_seconds)

    def sample_all(self, context: SamplingContext, track_id: str | None,
                   time_seconds: float) -> dict[str, Any]:
        """Run every sampler for one instant; returns ``{sampler_id: result}``."""
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                sid: pool.submit(s.sample, context, track_id, time_seconds)
                for sid, s in self.samplers.items()
            }
            return {sid: fut.result() for sid, fut in futures.items()}
