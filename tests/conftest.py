import numpy as np
import pytest

from featureviewlib.events import EventBus
from featureviewlib.context import SamplingContext
from featureviewlib.models import FeatureRangeSample, WaveformFormat
from featureviewlib.source import FeatureTrackData, InMemoryFeatureSource, build_minmax_track
from featureviewlib.timing import ConstantTempoTiming

SR = 44100
PITCH_CYCLE_LEFT = [0.0, 0.5, 1.5, -2.0, 0.25, 0.1, 0.9, 0.9]


@pytest.fixture
def timing():
    return ConstantTempoTiming(bpm=120.0, ppq=960)


@pytest.fixture
def stereo_audio():
    t = np.arange(SR, dtype=np.float64) / SR
    left = 0.8 * np.sin(2.0 * np.pi * 220.0 * t)
    right = 0.4 * np.sin(2.0 * np.pi * 330.0 * t)
    return np.column_stack([left, right])


@pytest.fixture
def source(timing, stereo_audio):
    src = InMemoryFeatureSource(timing)
    src.add_track("vox", "waveform", build_minmax_track(stereo_audio, SR, 512))
    src.add_track("vox", "spectrogram", FeatureTrackData(
        frames=np.full((10, 513), -40.0),
        hop_seconds=0.1,
        sample_rate=float(SR),
    ))
    src.add_track("vox", "rms", FeatureTrackData(
        frames=np.tile([0.2, 0.8], (10, 1)),
        channels=2,
        hop_seconds=0.1,
        sample_rate=float(SR),
        channel_aliases=["L", "R"],
    ))
    src.add_track("vox", "pitchWaveform", FeatureTrackData(
        frames=np.tile(PITCH_CYCLE_LEFT + [-0.1] * 8, (10, 1)),
        channels=2,
        hop_seconds=0.1,
        sample_rate=float(SR),
        channel_aliases=["L", "R"],
        frame_length=6,
    ))
    return src


@pytest.fixture
def events():
    bus = EventBus()
    received = []
    bus.subscribe("sample.ready", lambda **kw: received.append(("ready", kw)))
    bus.subscribe("sample.placeholder", lambda **kw: received.append(("placeholder", kw)))
    return bus, received


@pytest.fixture
def context(source, timing, events):
    bus, _ = events
    return SamplingContext(source=source, timing=timing, event_bus=bus)


def _build_range(data, channels=2, fmt=WaveformFormat.INTERLEAVED, frame_count=None,
                 hop_ticks=0.0, track_start_tick=0.0, track_end_tick=0.0):
    data = np.asarray(data, dtype=np.float64)
    if frame_count is None:
        stride = max(1, channels)
        frame_count = len(data) // stride
    return FeatureRangeSample(
        channels=channels,
        sample_rate=float(SR),
        format=fmt,
        data=data,
        frame_count=frame_count,
        hop_ticks=hop_ticks,
        track_start_tick=track_start_tick,
        track_end_tick=track_end_tick,
    )


@pytest.fixture
def make_range():
    """Factory for FeatureRangeSample instances with test-friendly defaults."""
    return _build_range
