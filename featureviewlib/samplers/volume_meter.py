from __future__ import annotations

from ..channels import normalize_channel_selector_input, select_channel_sample
from ..config import ParamSpec
from ..context import SamplingContext
from ..models import FeatureDescriptor, MeterResult
from ..pipeline import normalize_meter_level
from ..sampler import MSG_SELECT_TRACK, FeatureSampler


class VolumeMeterSampler(FeatureSampler):
    """Single RMS level for a level meter."""
    id = "volume_meter"
    name = "Audio Volume Meter"
    feature_key = "rms"

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        return super().config_params() + [
            ParamSpec(
                key="meter_min_value", type=(int, float), default=0.0,
                label="Minimum value",
            ),
            ParamSpec(
                key="meter_max_value", type=(int, float), default=1.0,
                label="Maximum value",
            ),
            ParamSpec(
                key="meter_channel", type=(int, str), default=None, nullable=True,
                label="Channel",
                description="Channel index or alias (e.g. 'L', 'right', 'side'). "
                            "Empty uses the first channel.",
            ),
            ParamSpec(
                key="meter_smoothing", type=(int, float), default=0, min=0, max=64,
                label="Smoothing",
                description="Average this many frames either side of the playhead.",
            ),
        ]

    def configure(self, config):
        super().configure(config)
        self.min_value = float(self.param(config, "meter_min_value"))
        self.max_value = float(self.param(config, "meter_max_value"))
        self.channel = normalize_channel_selector_input(self.param(config, "meter_channel"))
        self.smoothing = int(self.param(config, "meter_smoothing"))

    def sample(self, context: SamplingContext, track_id, time_seconds) -> MeterResult:
        if not track_id:
            self._placeholder(context, track_id, MSG_SELECT_TRACK)
            return MeterResult(message=MSG_SELECT_TRACK)

        descriptor = FeatureDescriptor(feature_key=self.feature_key,
                                       analysis_profile_id=self._profile_id)
        frame = context.source.sample_frame(track_id, descriptor, time_seconds, self.smoothing)
        selected = select_channel_sample(frame, self.channel)

        raw = 0.0
        channel_index = 0
        if selected is not None:
            channel_index = selected.channel_index
            if len(selected.values):
                raw = float(selected.values[0])
            elif frame is not None and len(frame.values):
                raw = float(frame.values[0])

        level = normalize_meter_level(raw, self.min_value, self.max_value)
        self._ready(context, track_id, 1)
        return MeterResult(level=level, raw_value=raw, channel_index=channel_index)
