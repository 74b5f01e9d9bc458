from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np


class WaveformFormat(Enum):
    INTERLEAVED = "interleaved"
    WAVEFORM_MINMAX = "waveform-minmax"


class WaveformChannel(Enum):
    LEFT = "left"
    RIGHT = "right"
    MID = "mid"
    SIDE = "side"


CHANNEL_FALLBACK_ORDER: tuple[WaveformChannel, ...] = (
    WaveformChannel.LEFT,
    WaveformChannel.RIGHT,
    WaveformChannel.MID,
    WaveformChannel.SIDE,
)


class WaveformSide(Enum):
    BOTH = "both"
    SIDE_A = "sideA"
    SIDE_B = "sideB"


class SelectorKind(Enum):
    DEFAULT = "default"
    INDEX = "index"
    ALIAS = "alias"


@dataclass(frozen=True)
class ChannelSelector:
    """Closed variant for a requested channel.

    Exactly one shape is meaningful per ``kind``:

    * ``DEFAULT`` -- nothing requested; resolution walks the fallback order.
    * ``INDEX``   -- ``index`` holds a non-negative channel number.
    * ``ALIAS``   -- ``alias`` holds one of left / right / mid / side.

    Build instances with :func:`featureviewlib.channels.parse_channel_selector`
    rather than by hand.
    """
    kind: SelectorKind = SelectorKind.DEFAULT
    index: int | None = None
    alias: WaveformChannel | None = None

    @classmethod
    def default(cls) -> ChannelSelector:
        return cls()

    @classmethod
    def of_index(cls, index: int) -> ChannelSelector:
        return cls(kind=SelectorKind.INDEX, index=max(0, int(index)))

    @classmethod
    def of_alias(cls, alias: WaveformChannel) -> ChannelSelector:
        return cls(kind=SelectorKind.ALIAS, alias=alias)


@dataclass(frozen=True)
class FeatureDescriptor:
    """Lookup key for one analysed feature.  Opaque to the sampling code."""
    feature_key: str
    calculator_id: str | None = None
    band_index: int | None = None
    profile_overrides: dict[str, Any] | None = None
    analysis_profile_id: str | None = None
    profile_registry: dict[str, dict[str, Any]] | None = None


@dataclass
class FeatureRangeSample:
    """A window of analysed frames as handed out by a feature source.

    Attributes:
        channels:         Values stored per frame (the row stride of ``data``).
        sample_rate:      Sample rate of the analysed audio.
        format:           Encoding of ``data``.
        data:             Flat frame-major sequence of values.
        frame_count:      Number of frames in ``data``.
        hop_ticks:        Timeline ticks between consecutive frames.
        track_start_tick: First tick covered by analysed data.
        track_end_tick:   Last tick covered by analysed data.
    """
    channels: int
    sample_rate: float
    format: WaveformFormat
    data: np.ndarray
    frame_count: int
    hop_ticks: float
    track_start_tick: float
    track_end_tick: float


@dataclass
class ChannelLayout:
    semantics: str | None = None     # "mono", "stereo" or "mid-side"
    aliases: list[str] | None = None


@dataclass
class FeatureFrameSample:
    """A single-instant sample plus the metadata needed to interpret it."""
    values: np.ndarray
    channel_values: list[np.ndarray] = field(default_factory=list)
    channels: int = 1
    channel_aliases: list[str] | None = None
    channel_layout: ChannelLayout | None = None
    sample_rate: float | None = None
    descriptor: FeatureDescriptor | None = None
    frame_length: int | None = None  # valid prefix of each channel vector, if known


@dataclass(frozen=True)
class PaddingPlan:
    target_length: int
    pad_start: int
    pad_end: int


@dataclass
class ChannelSelection:
    key: WaveformChannel | str
    values: np.ndarray


@dataclass
class ChannelSampleSelection:
    values: np.ndarray
    channel_index: int
    channel_count: int
    alias: str | None = None
    channel_aliases: list[str] | None = None
    channel_layout: ChannelLayout | None = None


@dataclass
class WaveformResult:
    primary: np.ndarray | None = None
    secondary: np.ndarray | None = None
    primary_key: WaveformChannel | str | None = None
    secondary_key: WaveformChannel | str | None = None
    message: str | None = None

    @property
    def renderable(self) -> bool:
        return self.message is None


@dataclass
class SpectrumResult:
    bins: np.ndarray = field(default_factory=lambda: np.zeros(0))
    sample_rate: float = 44100.0
    message: str | None = None

    @property
    def renderable(self) -> bool:
        return self.message is None


@dataclass
class MeterResult:
    level: float = 0.0
    raw_value: float = 0.0
    channel_index: int = 0
    message: str | None = None

    @property
    def renderable(self) -> bool:
        return self.message is None


@dataclass
class OscilloscopeResult:
    values: np.ndarray = field(default_factory=lambda: np.zeros(0))
    channel_index: int = 0
    message: str | None = None

    @property
    def renderable(self) -> bool:
        return self.message is None
