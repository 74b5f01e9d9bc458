"""Tests for featureviewlib.channels (extraction, selector parsing, resolution)."""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from featureviewlib.channels import (
    channel_key_for_index,
    extract_base_channels,
    extract_waveform_channels,
    normalize_channel_selector_input,
    parse_channel_selector,
    resolve_channel_selection,
    resolve_frame_channel_index,
    select_channel_sample,
)
from featureviewlib.models import (
    ChannelLayout,
    ChannelSelector,
    FeatureFrameSample,
    SelectorKind,
    WaveformChannel,
    WaveformFormat,
)

L, R, MID, SIDE = (WaveformChannel.LEFT, WaveformChannel.RIGHT,
                   WaveformChannel.MID, WaveformChannel.SIDE)


class TestExtraction:
    def test_minmax_midpoints(self, make_range):
        # frame 0: L(-0.2, 0.6) R(-1.0, 0.0); frame 1: L(0.0, 0.4) R(-0.5, -0.1)
        sample = make_range([-0.2, 0.6, -1.0, 0.0, 0.0, 0.4, -0.5, -0.1],
                            channels=4, fmt=WaveformFormat.WAVEFORM_MINMAX, frame_count=2)
        left, right = extract_base_channels(sample)
        assert_allclose(left, [0.2, 0.2])
        assert_allclose(right, [-0.5, -0.3])

    def test_minmax_stereo_pairs(self, make_range):
        sample = make_range([-1, 1, -0.5, 0.5, 0, 0.2, -0.2, 0.2],
                            channels=4, fmt=WaveformFormat.WAVEFORM_MINMAX, frame_count=2)
        left, right = extract_base_channels(sample)
        assert_allclose(left, [0.0, 0.1])
        assert_allclose(right, [0.0, 0.0])

    def test_minmax_missing_max_uses_min(self, make_range):
        sample = make_range([-0.4], channels=2, fmt=WaveformFormat.WAVEFORM_MINMAX,
                            frame_count=1)
        (only,) = extract_base_channels(sample)
        assert_allclose(only, [-0.4])

    def test_interleaved_with_clamp_and_nan(self, make_range):
        sample = make_range([0.5, -0.5, 2.0, -2.0, math.nan, 0.25], channels=2)
        left, right = extract_base_channels(sample)
        assert_allclose(left, [0.5, 1.0, 0.0])
        assert_allclose(right, [-0.5, -1.0, 0.25])

    def test_non_finite_channel_count_is_mono(self, make_range):
        sample = make_range([0.1, 0.2, 0.3], channels=math.nan, frame_count=3)
        (mono,) = extract_base_channels(sample)
        assert_allclose(mono, [0.1, 0.2, 0.3])

    def test_zero_frames_is_empty(self, make_range):
        assert extract_base_channels(make_range([0.1, 0.2], frame_count=0)) == []

    def test_mid_side_derived(self, make_range):
        sample = make_range([0.5, -0.5, 2.0, -2.0, math.nan, 0.25], channels=2)
        series = extract_waveform_channels(sample)
        assert set(series) == {L, R, MID, SIDE}
        assert_allclose(series[MID], [0.0, 0.0, 0.125])
        assert_allclose(series[SIDE], [0.5, 1.0, -0.125])

    def test_mono_has_no_mid_side(self, make_range):
        series = extract_waveform_channels(make_range([0.1, 0.2], channels=1))
        assert set(series) == {L}

    def test_extra_channels_keyed_by_number(self, make_range):
        series = extract_waveform_channels(make_range([0.1, 0.2, 0.3], channels=3))
        assert "ch2" in series
        assert channel_key_for_index(5) == "ch5"

    def test_outputs_bounded(self, make_range):
        rng = np.random.default_rng(3)
        data = rng.uniform(-4, 4, 64)
        series = extract_waveform_channels(
            make_range(data, channels=4, fmt=WaveformFormat.WAVEFORM_MINMAX))
        for values in series.values():
            assert np.all(np.abs(values) <= 1.0)


class TestSelectorParsing:
    def test_none_is_default(self):
        assert parse_channel_selector(None).kind is SelectorKind.DEFAULT

    def test_empty_string_is_default(self):
        assert parse_channel_selector("   ").kind is SelectorKind.DEFAULT

    def test_alias_case_insensitive(self):
        sel = parse_channel_selector(" Left ")
        assert sel == ChannelSelector.of_alias(L)

    def test_numeric_string(self):
        assert parse_channel_selector("2") == ChannelSelector.of_index(2)

    def test_float_floored(self):
        assert parse_channel_selector(3.7) == ChannelSelector.of_index(3)

    def test_negative_index_clamped(self):
        assert parse_channel_selector(-2) == ChannelSelector.of_index(0)

    def test_unknown_alias_is_default(self):
        assert parse_channel_selector("surround").kind is SelectorKind.DEFAULT

    @pytest.mark.parametrize("raw, expected", [
        (2.9, 2),
        (" 1 ", 1),
        ("side", "side"),
        ("", None),
        (True, None),
        (object(), None),
        (math.inf, None),
    ])
    def test_normalize_input(self, raw, expected):
        assert normalize_channel_selector_input(raw) == expected


@pytest.fixture
def stereo_series():
    return {
        L: np.array([0.1, 0.2]),
        R: np.array([0.3, 0.4]),
        MID: np.array([0.2, 0.3]),
        SIDE: np.array([-0.1, -0.1]),
    }


class TestResolution:
    def test_exact_alias(self, stereo_series):
        assert resolve_channel_selection(stereo_series, "mid").key is MID

    def test_index_one_is_right(self, stereo_series):
        assert resolve_channel_selection(stereo_series, 1).key is R

    def test_default_is_left(self, stereo_series):
        assert resolve_channel_selection(stereo_series, None).key is L

    def test_missing_index_falls_back(self, stereo_series):
        assert resolve_channel_selection(stereo_series, 5).key is L

    def test_exclusion_skips_primary(self, stereo_series):
        sel = resolve_channel_selection(stereo_series, None, exclude={L})
        assert sel.key is R

    def test_exact_match_ignores_exclusion(self, stereo_series):
        assert resolve_channel_selection(stereo_series, "left", exclude={L}).key is L

    def test_empty_series_skipped(self, stereo_series):
        stereo_series[L] = np.array([])
        assert resolve_channel_selection(stereo_series, "left").key is R

    def test_nothing_left(self):
        series = {L: np.array([0.1, 0.2])}
        assert resolve_channel_selection(series, "right", exclude={L}) is None

    def test_values_are_the_series(self, stereo_series):
        sel = resolve_channel_selection(stereo_series, "side")
        assert_array_equal(sel.values, [-0.1, -0.1])


def _frame(aliases=None, layout=None):
    return FeatureFrameSample(
        values=np.array([0.1]),
        channel_values=[np.array([0.1]), np.array([0.2])],
        channels=2,
        channel_aliases=aliases,
        channel_layout=layout,
    )


class TestFrameChannelSelection:
    def test_default_first_channel(self):
        sel = select_channel_sample(_frame(["L", "R"]))
        assert sel.channel_index == 0
        assert_array_equal(sel.values, [0.1])

    def test_alias_lookup(self):
        sel = select_channel_sample(_frame(["L", "R"]), "r")
        assert sel.channel_index == 1
        assert sel.alias == "R"
        assert_array_equal(sel.values, [0.2])

    def test_index_clamped(self):
        assert select_channel_sample(_frame(), 5).channel_index == 1

    def test_numeric_string(self):
        assert select_channel_sample(_frame(), "1").channel_index == 1

    def test_stereo_semantics(self):
        layout = ChannelLayout(semantics="stereo")
        assert select_channel_sample(_frame(layout=layout), "right").channel_index == 1

    def test_mid_side_semantics(self):
        layout = ChannelLayout(semantics="mid-side")
        assert select_channel_sample(_frame(layout=layout), "side").channel_index == 1
        assert select_channel_sample(_frame(layout=layout), "mid").channel_index == 0

    def test_layout_aliases_used(self):
        layout = ChannelLayout(aliases=["front", "rear"])
        assert select_channel_sample(_frame(layout=layout), "rear").channel_index == 1

    def test_dict_selector(self):
        assert select_channel_sample(_frame(["L", "R"]), {"alias": "R"}).channel_index == 1
        assert select_channel_sample(_frame(), {"index": 1}).channel_index == 1

    def test_unknown_alias_is_first(self):
        assert resolve_frame_channel_index("surround", ["L", "R"], None, 2) == 0

    def test_missing_sample(self):
        assert select_channel_sample(None, "L") is None

    def test_flat_values_without_split(self):
        frame = FeatureFrameSample(values=np.array([0.5, math.nan]))
        sel = select_channel_sample(frame)
        assert sel.channel_count == 1
        assert_array_equal(sel.values, [0.5, 0.0])
