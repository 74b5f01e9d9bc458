from __future__ import annotations

from ..config import ParamSpec
from ..context import SamplingContext
from ..models import WaveformChannel, WaveformResult
from ..amplitude import normalize_waveform_side
from ..channels import parse_channel_selector
from ..pipeline import MSG_NO_WAVEFORM, sample_waveform_range
from ..sampler import MSG_SELECT_TRACK, FeatureSampler
from ..timeline import compute_tick_window
from ..utils import js_round

_CHANNEL_CHOICES = [c.value for c in WaveformChannel]


class WaveformSampler(FeatureSampler):
    """Scrolling waveform window around the playhead."""
    id = "waveform"
    name = "Audio Waveform"
    feature_key = "waveform"

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        return super().config_params() + [
            ParamSpec(
                key="window_seconds", type=(int, float), default=0.12,
                min=0.01, max=1.0,
                label="Window (s)",
                description="Length of audio shown, centred on the playhead.",
            ),
            ParamSpec(
                key="waveform_width", type=(int, float), default=420, min=1,
                label="Display width (px)",
                description="Physical width the series is fitted to.",
            ),
            ParamSpec(
                key="side", type=str, default="both",
                choices=["both", "sideA", "sideB"],
                label="Side",
                description="Draw both halves, or rectify onto the upper "
                            "(sideA) or lower (sideB) half.",
            ),
            ParamSpec(
                key="primary_channel", type=str, default="left",
                choices=_CHANNEL_CHOICES,
                label="Primary channel",
            ),
            ParamSpec(
                key="secondary_channel", type=str, default="right",
                choices=_CHANNEL_CHOICES,
                label="Secondary channel",
                description="Never duplicates the channel picked as primary.",
            ),
            ParamSpec(
                key="waveform_gain", type=(int, float), default=1.0,
                min=0.0, max=10.0,
                label="Gain",
            ),
            ParamSpec(
                key="density", type=(int, float), default=1.0,
                min=0.1, max=1.0,
                label="Density",
                description="Fraction of display points kept. Lower values "
                            "give a sparser, blockier waveform.",
            ),
            ParamSpec(
                key="damp", type=int, default=0, min=0, max=64,
                label="Damp",
                description="Smoothing radius in display points.",
            ),
        ]

    def configure(self, config):
        super().configure(config)
        self.window_seconds = float(self.param(config, "window_seconds"))
        self.width = float(self.param(config, "waveform_width"))
        self.side = normalize_waveform_side(self.param(config, "side"))
        self.primary = parse_channel_selector(self.param(config, "primary_channel"))
        self.secondary = parse_channel_selector(self.param(config, "secondary_channel"))
        self.gain = float(self.param(config, "waveform_gain"))
        self.density = float(self.param(config, "density"))
        self.damp_radius = max(0, js_round(self.param(config, "damp")))

    def sample(self, context: SamplingContext, track_id, time_seconds) -> WaveformResult:
        if not track_id:
            self._placeholder(context, track_id, MSG_SELECT_TRACK)
            return WaveformResult(message=MSG_SELECT_TRACK)

        start_tick, end_tick = compute_tick_window(
            context.timing, time_seconds, self.window_seconds,
        )
        range_sample = context.source.sample_range(
            track_id, self.feature_key, start_tick, end_tick,
            None, self._profile_id,
        )
        if range_sample is None:
            self._placeholder(context, track_id, MSG_NO_WAVEFORM)
            return WaveformResult(message=MSG_NO_WAVEFORM)

        result = sample_waveform_range(
            range_sample, start_tick, end_tick,
            primary_channel=self.primary,
            secondary_channel=self.secondary,
            width=self.width,
            damp_radius=self.damp_radius,
            side=self.side,
            density=self.density,
            gain=self.gain,
        )
        if result.message is not None:
            self._placeholder(context, track_id, result.message)
        else:
            self._ready(context, track_id, len(result.primary if result.primary is not None
                                               else result.secondary))
        return result
