from __future__ import annotations

import math

import numpy as np

from ..channels import normalize_channel_selector_input, select_channel_sample
from ..config import ParamSpec
from ..context import SamplingContext
from ..models import FeatureDescriptor, OscilloscopeResult
from ..pipeline import MSG_WAVEFORM_TOO_SHORT
from ..sampler import MSG_SELECT_TRACK, FeatureSampler
from ..utils import is_finite_number, sanitize

MSG_NO_PITCH_WAVEFORM = "Pitch waveform unavailable"


class LockedOscilloscopeSampler(FeatureSampler):
    """One pitch-locked waveform cycle at the playhead.

    Reads the ``pitchWaveform`` frame under the playhead, picks a channel,
    trims it to the frame's declared length and clamps it to ``[-1, 1]``.
    """
    id = "locked_oscilloscope"
    name = "Audio Locked Oscilloscope"
    feature_key = "pitchWaveform"

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        return super().config_params() + [
            ParamSpec(
                key="oscilloscope_channel", type=(int, str), default=None, nullable=True,
                label="Channel",
                description="Channel index or alias. Empty uses the first channel.",
            ),
        ]

    def configure(self, config):
        super().configure(config)
        self.channel = normalize_channel_selector_input(
            self.param(config, "oscilloscope_channel"))

    def sample(self, context: SamplingContext, track_id, time_seconds) -> OscilloscopeResult:
        if not track_id:
            self._placeholder(context, track_id, MSG_SELECT_TRACK)
            return OscilloscopeResult(message=MSG_SELECT_TRACK)

        descriptor = FeatureDescriptor(feature_key=self.feature_key,
                                       analysis_profile_id=self._profile_id)
        frame = context.source.sample_frame(track_id, descriptor, time_seconds)
        selected = select_channel_sample(frame, self.channel)
        if selected is not None:
            values, channel_index = selected.values, selected.channel_index
        else:
            values, channel_index = np.zeros(0), 0

        if len(values) == 0:
            self._placeholder(context, track_id, MSG_NO_PITCH_WAVEFORM)
            return OscilloscopeResult(message=MSG_NO_PITCH_WAVEFORM)

        length = len(values)
        declared = frame.frame_length if frame is not None else None
        if is_finite_number(declared) and declared > 0:
            length = min(length, int(math.floor(declared)))
        if length < 2:
            self._placeholder(context, track_id, MSG_WAVEFORM_TOO_SHORT)
            return OscilloscopeResult(message=MSG_WAVEFORM_TOO_SHORT)

        cycle = np.clip(sanitize(values[:length]), -1.0, 1.0)
        self._ready(context, track_id, length)
        return OscilloscopeResult(values=cycle, channel_index=channel_index)
