"""Channel extraction and channel-selector resolution.

Turns a packed :class:`FeatureRangeSample` into named per-channel series
(left, right, derived mid/side, and ``chN`` for any further channels) and
picks the series a display asked for, falling back in a fixed priority
order when the request cannot be honoured.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Union

import numpy as np

from .models import (
    CHANNEL_FALLBACK_ORDER,
    ChannelLayout,
    ChannelSampleSelection,
    ChannelSelection,
    ChannelSelector,
    FeatureFrameSample,
    FeatureRangeSample,
    SelectorKind,
    WaveformChannel,
    WaveformFormat,
)
from .utils import is_finite_number, sanitize

log = logging.getLogger(__name__)

ChannelKey = Union[WaveformChannel, str]
ChannelSeriesMap = dict[ChannelKey, np.ndarray]

_ALIASES = {ch.value: ch for ch in WaveformChannel}


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def channel_key_for_index(index: int) -> ChannelKey:
    """Map a base channel number onto its series key."""
    if index == 0:
        return WaveformChannel.LEFT
    if index == 1:
        return WaveformChannel.RIGHT
    return f"ch{index}"


def _channel_stride(channels: Any) -> int:
    if not is_finite_number(channels):
        return 1
    return max(1, int(math.floor(channels)) or 1)


def _gather(data: np.ndarray, indices: np.ndarray, missing: np.ndarray | float) -> np.ndarray:
    """Read ``data[indices]``, substituting *missing* where out of range."""
    in_range = indices < data.size
    safe = np.where(in_range, indices, 0)
    return np.where(in_range, data[safe], missing)


def extract_base_channels(sample: FeatureRangeSample) -> list[np.ndarray]:
    """Split the packed frame data into one clamped series per base channel."""
    stride = _channel_stride(sample.channels)
    frame_count = int(sample.frame_count or 0)
    if sample.data is None or len(sample.data) == 0 or frame_count < 1:
        return []
    data = sanitize(sample.data)
    bases = np.arange(frame_count, dtype=np.int64) * stride

    result: list[np.ndarray] = []
    if sample.format == WaveformFormat.WAVEFORM_MINMAX:
        waveform_channels = max(1, stride // 2)
        for channel in range(waveform_channels):
            pair = bases + channel * 2
            mins = _gather(data, pair, 0.0)
            maxs = _gather(data, pair + 1, mins)
            result.append(np.clip((mins + maxs) / 2.0, -1.0, 1.0))
        return result

    for channel in range(stride):
        values = _gather(data, bases + channel, 0.0)
        result.append(np.clip(values, -1.0, 1.0))
    return result


def extract_waveform_channels(sample: FeatureRangeSample) -> ChannelSeriesMap:
    """Build the named channel map, deriving mid/side from a stereo pair."""
    series: ChannelSeriesMap = {}
    for index, values in enumerate(extract_base_channels(sample)):
        series[channel_key_for_index(index)] = values

    left = series.get(WaveformChannel.LEFT)
    right = series.get(WaveformChannel.RIGHT)
    if left is not None and right is not None and len(left) == len(right):
        series[WaveformChannel.MID] = np.clip((left + right) / 2.0, -1.0, 1.0)
        series[WaveformChannel.SIDE] = np.clip((left - right) / 2.0, -1.0, 1.0)
    return series


# ---------------------------------------------------------------------------
# Selector parsing
# ---------------------------------------------------------------------------

def normalize_channel_selector_input(value: Any) -> int | str | None:
    """Normalize a raw UI value into ``None``, an index, or a trimmed alias."""
    if is_finite_number(value):
        return max(0, int(math.floor(value)))
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        numeric = _parse_numeric(trimmed)
        if numeric is not None:
            return max(0, int(math.floor(numeric)))
        return trimmed
    return None


def _parse_numeric(text: str) -> float | None:
    try:
        numeric = float(text)
    except ValueError:
        return None
    return numeric if math.isfinite(numeric) else None


def parse_channel_selector(value: Any) -> ChannelSelector:
    """Parse ``None`` / int / numeric string / alias string into a selector.

    Alias matching is case-insensitive.  Unknown aliases degrade to the
    default selector so resolution falls back to the priority order.
    """
    if isinstance(value, ChannelSelector):
        return value
    if isinstance(value, WaveformChannel):
        return ChannelSelector.of_alias(value)
    normalized = normalize_channel_selector_input(value)
    if normalized is None:
        return ChannelSelector.default()
    if isinstance(normalized, int):
        return ChannelSelector.of_index(normalized)
    alias = _ALIASES.get(normalized.lower())
    if alias is None:
        log.debug("Unknown channel alias %r, using fallback order", value)
        return ChannelSelector.default()
    return ChannelSelector.of_alias(alias)


def _selector_key(selector: ChannelSelector) -> ChannelKey | None:
    if selector.kind == SelectorKind.ALIAS:
        return selector.alias
    if selector.kind == SelectorKind.INDEX and selector.index is not None:
        return channel_key_for_index(selector.index)
    return None


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_channel_selection(
    series: ChannelSeriesMap,
    selector: Any,
    exclude: set[ChannelKey] | None = None,
) -> ChannelSelection | None:
    """Pick the requested series, or the first non-empty fallback.

    An exact match always wins.  Otherwise the fallback order
    ``left, right, mid, side`` is walked, skipping keys in *exclude* so a
    secondary channel never duplicates the primary.
    """
    selector = parse_channel_selector(selector)
    key = _selector_key(selector)
    if key is not None:
        exact = series.get(key)
        if exact is not None and len(exact):
            return ChannelSelection(key=key, values=exact)

    for candidate in CHANNEL_FALLBACK_ORDER:
        if exclude and candidate in exclude:
            continue
        values = series.get(candidate)
        if values is not None and len(values):
            return ChannelSelection(key=candidate, values=values)
    return None


# ---------------------------------------------------------------------------
# Single-instant samples
# ---------------------------------------------------------------------------

def _semantic_channel_index(token: str, semantics: str | None,
                            channel_count: int) -> int | None:
    normalized = token.strip().lower()
    if not normalized:
        return None
    last = min(1, max(0, channel_count - 1))
    if semantics == "mono":
        return 0
    if semantics == "stereo":
        if normalized in ("l", "left"):
            return 0
        if normalized in ("r", "right"):
            return last
    elif semantics == "mid-side":
        if normalized == "mid":
            return 0
        if normalized == "side":
            return last
    return None


def _clamp_index(index: float, channel_count: int) -> int:
    return min(max(0, int(math.floor(index))), max(0, channel_count - 1))


def _resolve_alias_index(alias: str, aliases: list[str] | None,
                         layout: ChannelLayout | None, channel_count: int) -> int | None:
    normalized = alias.lower()
    alias_list = [a.lower() if isinstance(a, str) else "" for a in (aliases or [])]
    if normalized in alias_list:
        return _clamp_index(alias_list.index(normalized), channel_count)
    semantics = layout.semantics if layout is not None else None
    return _semantic_channel_index(normalized, semantics, channel_count)


def resolve_frame_channel_index(
    selector: Any,
    aliases: list[str] | None,
    layout: ChannelLayout | None,
    channel_count: int,
) -> int:
    """Resolve a selector against a frame's alias list and channel layout."""
    if selector is None:
        return 0
    if is_finite_number(selector):
        return _clamp_index(selector, channel_count)
    if isinstance(selector, str):
        trimmed = selector.strip()
        if not trimmed:
            return 0
        index = _resolve_alias_index(trimmed, aliases, layout, channel_count)
        if index is not None:
            return index
        numeric = _parse_numeric(trimmed)
        if numeric is not None:
            return _clamp_index(numeric, channel_count)
        return 0
    if isinstance(selector, dict):
        index = selector.get("index")
        if is_finite_number(index):
            return _clamp_index(index, channel_count)
        alias = selector.get("alias")
        if isinstance(alias, str) and alias.strip():
            resolved = _resolve_alias_index(alias.strip(), aliases, layout, channel_count)
            if resolved is not None:
                return resolved
    return 0


def select_channel_sample(
    sample: FeatureFrameSample | None,
    selector: Any = None,
) -> ChannelSampleSelection | None:
    """Pick one channel's values out of a single-instant frame sample."""
    if sample is None:
        return None
    alias_source = sample.channel_aliases
    if alias_source is None and sample.channel_layout is not None:
        alias_source = sample.channel_layout.aliases
    if sample.channel_values:
        channel_values = list(sample.channel_values)
    else:
        channel_values = [sanitize(sample.values if sample.values is not None else [])]
    channel_count = len(channel_values) or max(1, sample.channels or len(alias_source or []))

    index = resolve_frame_channel_index(selector, alias_source, sample.channel_layout, channel_count)
    index = min(max(index, 0), max(0, channel_count - 1))
    selected = channel_values[index] if index < len(channel_values) else None
    alias = None
    if alias_source and index < len(alias_source):
        alias = alias_source[index]
    return ChannelSampleSelection(
        values=sanitize(selected if selected is not None else []),
        channel_index=index,
        channel_count=channel_count,
        alias=alias,
        channel_aliases=alias_source,
        channel_layout=sample.channel_layout,
    )
