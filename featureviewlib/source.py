"""Feature-source boundary and an in-memory reference implementation.

The analysis engine and its per-track cache are external to this package.
Samplers talk to them only through :class:`FeatureSource`.
:class:`InMemoryFeatureSource` holds pre-analysed frames in memory and is
what tests, tools and headless renders plug in.
"""

from __future__ import annotations

import logging
import math
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
import soundfile as sf

from .models import (
    ChannelLayout,
    FeatureDescriptor,
    FeatureFrameSample,
    FeatureRangeSample,
    WaveformFormat,
)
from .timing import ConstantTempoTiming, TimingContext
from .utils import is_finite_number

log = logging.getLogger(__name__)

DEFAULT_HOP_SAMPLES = 512


class FeatureSource(ABC):
    """Read-only access to analysed feature data."""

    @abstractmethod
    def sample_frame(self, track_id: str, descriptor: FeatureDescriptor,
                     time_seconds: float, smoothing: float = 0) -> FeatureFrameSample | None:
        """Return the frame at *time_seconds*, or ``None`` for an unknown track.

        *smoothing* is a radius in frames: the result averages frames
        ``[i - smoothing, i + smoothing]``.  Outside the analysed extent the
        frame is silent (all zeros).
        """
        ...

    @abstractmethod
    def sample_range(self, track_id: str, feature_key: str,
                     start_tick: float, end_tick: float,
                     calculator_id: str | None = None,
                     profile_id: str | None = None) -> FeatureRangeSample | None:
        """Return the analysed frames overlapping ``[start_tick, end_tick)``."""
        ...


@dataclass
class FeatureTrackData:
    """One analysed feature for one audio track.

    Attributes:
        frames:         2-D array ``(frame_count, values_per_frame)``.
        format:         Encoding of each frame row.
        channels:       Audio channel count the rows were computed from.
        hop_seconds:    Time between consecutive frames.
        sample_rate:    Sample rate of the analysed audio.
        start_seconds:  Audio time of frame 0.
        offset_ticks:   Timeline position of the audio clip.
        channel_aliases: Optional per-channel names (``["L", "R"]`` …).
        channel_layout: Optional layout semantics for alias resolution.
        frame_length:   Optional valid prefix of each per-channel vector.
    """
    frames: np.ndarray
    format: WaveformFormat = WaveformFormat.INTERLEAVED
    channels: int = 1
    hop_seconds: float = DEFAULT_HOP_SAMPLES / 44100.0
    sample_rate: float = 44100.0
    start_seconds: float = 0.0
    offset_ticks: float = 0.0
    channel_aliases: list[str] | None = None
    channel_layout: ChannelLayout | None = None
    frame_length: int | None = None

    def __post_init__(self):
        frames = np.asarray(self.frames, dtype=np.float64)
        if frames.ndim == 1:
            frames = frames.reshape(-1, 1)
        self.frames = frames

    @property
    def frame_count(self) -> int:
        return int(self.frames.shape[0])

    @property
    def stride(self) -> int:
        return int(self.frames.shape[1]) if self.frames.ndim == 2 else 1


class InMemoryFeatureSource(FeatureSource):
    """Feature source backed by :class:`FeatureTrackData` held in memory."""

    def __init__(self, timing: TimingContext | None = None):
        self.timing = timing or ConstantTempoTiming()
        self._tracks: dict[tuple[str, str], FeatureTrackData] = {}

    def add_track(self, track_id: str, feature_key: str, data: FeatureTrackData) -> None:
        self._tracks[(track_id, feature_key)] = data

    def remove_track(self, track_id: str, feature_key: str | None = None) -> None:
        for key in list(self._tracks):
            if key[0] == track_id and (feature_key is None or key[1] == feature_key):
                del self._tracks[key]

    def get_track(self, track_id: str, feature_key: str) -> FeatureTrackData | None:
        return self._tracks.get((track_id, feature_key))

    # -- FeatureSource -------------------------------------------------------

    def _frame_row(self, track: FeatureTrackData, index: int) -> np.ndarray:
        if 0 <= index < track.frame_count:
            return track.frames[index]
        return np.zeros(track.stride, dtype=np.float64)

    def sample_frame(self, track_id, descriptor, time_seconds, smoothing=0):
        track = self.get_track(track_id, descriptor.feature_key)
        if track is None or track.frame_count == 0 or track.hop_seconds <= 0:
            log.debug("No %s data for track %s", descriptor.feature_key, track_id)
            return None
        local = time_seconds - self.timing.ticks_to_seconds(track.offset_ticks)
        position = (local - track.start_seconds) / track.hop_seconds

        if not math.isfinite(position) or position < 0 or position >= track.frame_count:
            row = np.zeros(track.stride, dtype=np.float64)
        else:
            index = int(math.floor(position))
            frac = position - index
            radius = max(0, int(math.floor(smoothing))) if is_finite_number(smoothing) else 0
            window = [self._frame_row(track, i) for i in range(index - radius, index + radius + 1)]
            row = np.mean(window, axis=0)
            # minmax pairs are never blended across frames
            if radius == 0 and frac > 1e-3 and track.format != WaveformFormat.WAVEFORM_MINMAX:
                following = self._frame_row(track, index + 1)
                row = row + (following - row) * frac

        row = np.array(row, dtype=np.float64)
        channel_values: list[np.ndarray] = []
        channels = max(1, track.channels)
        if track.format == WaveformFormat.INTERLEAVED and channels > 1 and row.size % channels == 0:
            channel_values = [part.copy() for part in np.split(row, channels)]
        return FeatureFrameSample(
            values=channel_values[0] if channel_values else row,
            channel_values=channel_values,
            channels=channels,
            channel_aliases=track.channel_aliases,
            channel_layout=track.channel_layout,
            sample_rate=track.sample_rate,
            descriptor=descriptor,
            frame_length=track.frame_length,
        )

    def sample_range(self, track_id, feature_key, start_tick, end_tick,
                     calculator_id=None, profile_id=None):
        track = self.get_track(track_id, feature_key)
        if track is None or track.frame_count == 0 or track.hop_seconds <= 0:
            log.debug("No %s range for track %s", feature_key, track_id)
            return None

        timing = self.timing
        lo_tick, hi_tick = min(start_tick, end_tick), max(start_tick, end_tick)
        lo_sec = timing.ticks_to_seconds(lo_tick - track.offset_ticks)
        hi_sec = timing.ticks_to_seconds(hi_tick - track.offset_ticks)
        first = int(math.floor((lo_sec - track.start_seconds) / track.hop_seconds))
        last = int(math.floor((hi_sec - track.start_seconds) / track.hop_seconds))
        first = max(0, first)
        last = min(track.frame_count - 1, last)
        if last < first:
            return None

        window = track.frames[first:last + 1]
        track_start_tick = track.offset_ticks + timing.seconds_to_ticks(track.start_seconds)
        duration_ticks = timing.seconds_to_ticks(track.frame_count * track.hop_seconds)
        return FeatureRangeSample(
            channels=track.stride,
            sample_rate=track.sample_rate,
            format=track.format,
            data=window.reshape(-1).copy(),
            frame_count=int(window.shape[0]),
            hop_ticks=timing.seconds_to_ticks(track.hop_seconds),
            track_start_tick=track_start_tick,
            track_end_tick=track_start_tick + duration_ticks,
        )


# ---------------------------------------------------------------------------
# Waveform track builders
# ---------------------------------------------------------------------------

def build_minmax_track(audio: np.ndarray, samplerate: int,
                       hop_samples: int = DEFAULT_HOP_SAMPLES, *,
                       offset_ticks: float = 0.0) -> FeatureTrackData:
    """Reduce PCM audio to one (min, max) pair per channel per hop."""
    data = np.asarray(audio, dtype=np.float64)
    if data.ndim == 1:
        data = data.reshape(-1, 1)
    hop = max(1, int(hop_samples))
    n, channels = data.shape
    if n == 0:
        frames = np.zeros((0, channels * 2), dtype=np.float64)
    else:
        starts = np.arange(0, n, hop)
        mins = np.minimum.reduceat(data, starts, axis=0)
        maxs = np.maximum.reduceat(data, starts, axis=0)
        frames = np.empty((len(starts), channels * 2), dtype=np.float64)
        frames[:, 0::2] = mins
        frames[:, 1::2] = maxs
    aliases = ["L", "R"] if channels == 2 else None
    return FeatureTrackData(
        frames=frames,
        format=WaveformFormat.WAVEFORM_MINMAX,
        channels=channels,
        hop_seconds=hop / float(samplerate),
        sample_rate=float(samplerate),
        offset_ticks=offset_ticks,
        channel_aliases=aliases,
    )


def load_minmax_track(filepath: str, hop_samples: int = DEFAULT_HOP_SAMPLES,
                      **kwargs) -> FeatureTrackData:
    """Read an audio file and build its min/max waveform track."""
    data, samplerate = sf.read(filepath, dtype='float64')
    log.debug("Loaded %s (%d Hz, %s)", os.path.basename(filepath), samplerate, data.shape)
    return build_minmax_track(data, samplerate, hop_samples, **kwargs)
