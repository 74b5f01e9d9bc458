"""Amplitude stages: gain, side selection, decibel normalization, transfer curves."""

from __future__ import annotations

import math
from typing import Any

import numpy as np

from .models import WaveformSide
from .utils import is_finite_number

SPECTRUM_DB_FLOOR = -80.0  # pivot for spectrum tilt / gain in the dB domain

TRANSFER_FUNCTIONS = ("linear", "log", "power", "db")
_EPSILON = 1e-6


# ---------------------------------------------------------------------------
# Waveform stages
# ---------------------------------------------------------------------------

def apply_gain(values, gain: float) -> np.ndarray:
    """Scale by ``max(0, gain)`` and clamp to ``[-1, 1]``.

    Unity (or non-finite) gain returns an untouched copy.
    """
    values = np.asarray(values, dtype=np.float64)
    if not is_finite_number(gain) or gain == 1:
        return values.copy()
    return np.clip(values * max(0.0, float(gain)), -1.0, 1.0)


def normalize_waveform_side(value: Any,
                            fallback: WaveformSide = WaveformSide.BOTH) -> WaveformSide:
    if isinstance(value, WaveformSide):
        return value
    if isinstance(value, str):
        for side in WaveformSide:
            if side.value == value:
                return side
    return fallback


def apply_side_selection(values, side: WaveformSide | str) -> np.ndarray:
    """Rectify onto one half of the baseline (sideA up, sideB down)."""
    side = normalize_waveform_side(side)
    values = np.asarray(values, dtype=np.float64)
    if side == WaveformSide.BOTH:
        return values.copy()
    sign = 1.0 if side == WaveformSide.SIDE_A else -1.0
    return sign * np.abs(values)


# ---------------------------------------------------------------------------
# Spectrum stages (dB domain)
# ---------------------------------------------------------------------------

def normalize_decibels(values, min_db: float, max_db: float) -> np.ndarray:
    """Map ``[min_db, max_db]`` onto ``[0, 1]``; NaN maps to 0."""
    values = np.asarray(values, dtype=np.float64)
    span = max(1e-6, max_db - min_db)
    normalized = (values - min_db) / span
    normalized[~np.isfinite(normalized)] = 0.0
    return np.clip(normalized, 0.0, 1.0)


def apply_spectrum_tilt(values, tilt: float) -> np.ndarray:
    """Tilt the spectrum around its centre bin.

    Positive tilt lifts high bins and lowers low bins, pivoting on the
    -80 dB floor.
    """
    values = np.asarray(values, dtype=np.float64)
    n = values.size
    if n < 2 or not tilt:
        return values.copy()
    positions = np.arange(n, dtype=np.float64) / (n - 1)
    factor = 1.0 + tilt * (positions - 0.5) * 2.0
    return (values - SPECTRUM_DB_FLOOR) * factor + SPECTRUM_DB_FLOOR


def apply_spectrum_gain(values, gain: float) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    return (values - SPECTRUM_DB_FLOOR) * gain + SPECTRUM_DB_FLOOR


# ---------------------------------------------------------------------------
# Transfer functions
# ---------------------------------------------------------------------------

def _clamp_normalized(values: np.ndarray) -> np.ndarray:
    out = np.array(values, dtype=np.float64, copy=True)
    out[~np.isfinite(out)] = 0.0
    return np.clip(out, 0.0, 1.0)


def _opt(options: dict, key: str, default: float) -> float:
    value = options.get(key)
    return float(value) if is_finite_number(value) else default


def apply_transfer_function(values, kind: str = "linear", **options: Any) -> np.ndarray:
    """Shape normalized ``[0, 1]`` values with a display transfer curve.

    Parameters
    ----------
    kind : str
        ``"linear"`` (clamp only), ``"log"`` (``base``, ``epsilon``),
        ``"power"`` (``exponent``) or ``"db"`` (``decibel_value``,
        ``reference_decibels``, ``gain``).  Unknown kinds behave like linear.
    """
    values = np.atleast_1d(np.asarray(values, dtype=np.float64))
    clamped = _clamp_normalized(values)

    if kind == "log":
        base = max(2.0, _opt(options, "base", 10.0))
        epsilon = max(_EPSILON, _opt(options, "epsilon", _EPSILON))
        denominator = math.log(base + epsilon)
        shaped = np.log(clamped * (base - 1.0) + 1.0 + epsilon) / denominator
        shaped[clamped <= 0] = 0.0
        return _clamp_normalized(shaped)

    if kind == "power":
        exponent = max(_EPSILON, _opt(options, "exponent", 2.0))
        return _clamp_normalized(np.power(clamped, exponent))

    if kind == "db":
        decibel_value = options.get("decibel_value")
        reference = options.get("reference_decibels")
        if not is_finite_number(decibel_value) or not is_finite_number(reference):
            return np.zeros_like(clamped)
        gain = max(0.0, _opt(options, "gain", 1.0))
        amplitude = 10.0 ** ((float(decibel_value) - float(reference)) / 20.0)
        level = amplitude * gain if math.isfinite(amplitude) else 0.0
        return _clamp_normalized(np.full_like(clamped, level))

    return clamped
