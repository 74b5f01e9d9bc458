"""Tests for featureviewlib.source and featureviewlib.timing."""

import numpy as np
import pytest
import soundfile as sf
from numpy.testing import assert_allclose, assert_array_equal

from featureviewlib.models import FeatureDescriptor, WaveformFormat
from featureviewlib.source import (
    FeatureTrackData,
    InMemoryFeatureSource,
    build_minmax_track,
    load_minmax_track,
)
from featureviewlib.timing import ConstantTempoTiming


class TestTiming:
    def test_ticks_per_second(self):
        assert ConstantTempoTiming(120, 960).ticks_per_second == 1920.0

    def test_round_trip(self, timing):
        assert timing.ticks_to_seconds(timing.seconds_to_ticks(1.25)) == pytest.approx(1.25)

    @pytest.mark.parametrize("bpm, ppq", [(0, 960), (120, 0), (-1, 480)])
    def test_rejects_non_positive(self, bpm, ppq):
        with pytest.raises(ValueError):
            ConstantTempoTiming(bpm, ppq)


class TestMinMaxTrack:
    def test_reduces_per_hop(self):
        track = build_minmax_track(np.array([0.1, -0.2, 0.3, 0.5, -0.5]), 10, 2)
        assert track.format is WaveformFormat.WAVEFORM_MINMAX
        assert_allclose(track.frames, [[-0.2, 0.1], [0.3, 0.5], [-0.5, -0.5]])
        assert track.hop_seconds == pytest.approx(0.2)

    def test_stereo_layout(self, stereo_audio):
        track = build_minmax_track(stereo_audio, 44100, 512)
        assert track.stride == 4
        assert track.channel_aliases == ["L", "R"]
        assert np.all(track.frames[:, 0] <= track.frames[:, 1])
        assert np.all(track.frames[:, 2] <= track.frames[:, 3])

    def test_empty_audio(self):
        track = build_minmax_track(np.zeros((0, 2)), 44100)
        assert track.frame_count == 0

    def test_load_from_file(self, tmp_path, stereo_audio):
        path = tmp_path / "tone.wav"
        sf.write(str(path), stereo_audio, 44100, subtype="FLOAT")
        track = load_minmax_track(str(path), 1024)
        expected = build_minmax_track(stereo_audio, 44100, 1024)
        assert track.frame_count == expected.frame_count
        assert_allclose(track.frames, expected.frames, atol=1e-6)


@pytest.fixture
def ramp_source(timing):
    src = InMemoryFeatureSource(timing)
    src.add_track("t1", "rms", FeatureTrackData(
        frames=np.arange(10, dtype=np.float64),
        hop_seconds=0.5,
    ))
    return src


class TestInMemorySource:
    def test_range_clipped_to_window(self, ramp_source):
        sample = ramp_source.sample_range("t1", "rms", 0, 1920)
        assert sample.frame_count == 3
        assert_array_equal(sample.data, [0.0, 1.0, 2.0])
        assert sample.hop_ticks == pytest.approx(960.0)
        assert sample.track_start_tick == 0.0
        assert sample.track_end_tick == pytest.approx(9600.0)

    def test_range_clipped_to_track(self, ramp_source):
        sample = ramp_source.sample_range("t1", "rms", 8000, 20000)
        assert_array_equal(sample.data, [8.0, 9.0])

    def test_range_outside_track(self, ramp_source):
        assert ramp_source.sample_range("t1", "rms", 50000, 60000) is None

    def test_unknown_track(self, ramp_source):
        assert ramp_source.sample_range("nope", "rms", 0, 100) is None
        assert ramp_source.sample_frame("nope", FeatureDescriptor("rms"), 0.0) is None

    def test_frame_on_hop_boundary(self, ramp_source):
        frame = ramp_source.sample_frame("t1", FeatureDescriptor("rms"), 1.0)
        assert_allclose(frame.values, [2.0])

    def test_frame_interpolates_between_hops(self, ramp_source):
        frame = ramp_source.sample_frame("t1", FeatureDescriptor("rms"), 1.2)
        assert_allclose(frame.values, [2.4])

    def test_frame_outside_track_is_silent(self, ramp_source):
        for t in (5.0, -0.1):
            frame = ramp_source.sample_frame("t1", FeatureDescriptor("rms"), t)
            assert_array_equal(frame.values, [0.0])

    def test_smoothing_averages_neighbours(self, ramp_source):
        frame = ramp_source.sample_frame("t1", FeatureDescriptor("rms"), 1.0, smoothing=1)
        assert_allclose(frame.values, [2.0])
        frame = ramp_source.sample_frame("t1", FeatureDescriptor("rms"), 4.5, smoothing=1)
        assert_allclose(frame.values, [(8.0 + 9.0 + 0.0) / 3])

    def test_smoothing_pads_with_silence(self, ramp_source):
        frame = ramp_source.sample_frame("t1", FeatureDescriptor("rms"), 0.0, smoothing=2)
        assert_allclose(frame.values, [0.6])

    def test_smoothing_disables_interpolation(self, ramp_source):
        frame = ramp_source.sample_frame("t1", FeatureDescriptor("rms"), 1.2, smoothing=1)
        assert_allclose(frame.values, [2.0])

    def test_minmax_frames_not_interpolated(self, timing):
        src = InMemoryFeatureSource(timing)
        src.add_track("t1", "waveform", build_minmax_track(
            np.array([0.1, -0.2, 0.3, 0.5]), 10, 2))
        frame = src.sample_frame("t1", FeatureDescriptor("waveform"), 0.1)
        assert_allclose(frame.values, [-0.2, 0.1])

    def test_frame_length_passed_through(self, source):
        frame = source.sample_frame("vox", FeatureDescriptor("pitchWaveform"), 0.25)
        assert frame.frame_length == 6

    def test_clip_offset(self, timing):
        src = InMemoryFeatureSource(timing)
        src.add_track("t1", "rms", FeatureTrackData(
            frames=np.arange(4, dtype=np.float64), hop_seconds=0.5, offset_ticks=1920))
        assert_array_equal(src.sample_frame("t1", FeatureDescriptor("rms"), 0.5).values, [0.0])
        assert_allclose(src.sample_frame("t1", FeatureDescriptor("rms"), 1.5).values, [1.0])
        assert src.sample_range("t1", "rms", 1920, 2000).track_start_tick == 1920

    def test_interleaved_frame_split(self, source):
        frame = source.sample_frame("vox", FeatureDescriptor("rms"), 0.25)
        assert len(frame.channel_values) == 2
        assert_array_equal(frame.channel_values[1], [0.8])

    def test_remove_track(self, ramp_source):
        ramp_source.remove_track("t1")
        assert ramp_source.get_track("t1", "rms") is None
