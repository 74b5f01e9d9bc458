from __future__ import annotations

from ..config import ParamSpec
from ..context import SamplingContext
from ..frequency import FrequencyScale, resolve_spectrogram_sample_rate
from ..models import FeatureDescriptor, SpectrumResult
from ..pipeline import prepare_spectrum_bins
from ..sampler import MSG_SELECT_TRACK, FeatureSampler

MSG_NO_SPECTRUM = "No spectrum data"
MAX_FREQUENCY_LIMIT = 48000.0


class SpectrumSampler(FeatureSampler):
    """Bar spectrum of the spectrogram frame under the playhead."""
    id = "spectrum"
    name = "Audio Spectrum"
    feature_key = "spectrogram"

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        return super().config_params() + [
            ParamSpec(
                key="min_frequency", type=(int, float), default=20.0,
                min=0.0, max=MAX_FREQUENCY_LIMIT,
                label="Min frequency (Hz)",
            ),
            ParamSpec(
                key="max_frequency", type=(int, float), default=20000.0,
                min=0.0, max=MAX_FREQUENCY_LIMIT,
                label="Max frequency (Hz)",
                description="Clamped to Nyquist. An empty range is widened "
                            "automatically.",
            ),
            ParamSpec(
                key="bar_count", type=int, default=64, min=1,
                label="Bars",
            ),
            ParamSpec(
                key="scale", type=str, default="linear",
                choices=[s.value for s in FrequencyScale],
                label="Frequency scale",
            ),
            ParamSpec(
                key="min_decibels", type=(int, float), default=-100.0,
                label="Floor (dB)",
            ),
            ParamSpec(
                key="max_decibels", type=(int, float), default=-10.0,
                label="Ceiling (dB)",
            ),
            ParamSpec(
                key="tilt", type=(int, float), default=0.0, min=-1.0, max=1.0,
                label="Tilt",
                description="Positive values lift high frequencies.",
            ),
            ParamSpec(
                key="spectrum_gain", type=(int, float), default=1.0,
                min=0.0, max=4.0,
                label="Gain",
            ),
            ParamSpec(
                key="spectrum_smoothing", type=(int, float), default=0, min=0, max=64,
                label="Smoothing",
                description="Average this many frames either side of the playhead.",
            ),
        ]

    def configure(self, config):
        super().configure(config)
        self.min_frequency = float(self.param(config, "min_frequency"))
        self.max_frequency = float(self.param(config, "max_frequency"))
        self.bar_count = int(self.param(config, "bar_count"))
        self.scale = FrequencyScale.parse(self.param(config, "scale"))
        self.min_decibels = float(self.param(config, "min_decibels"))
        self.max_decibels = float(self.param(config, "max_decibels"))
        self.tilt = float(self.param(config, "tilt"))
        self.gain = float(self.param(config, "spectrum_gain"))
        self.smoothing = int(self.param(config, "spectrum_smoothing"))

    def descriptor(self) -> FeatureDescriptor:
        return FeatureDescriptor(
            feature_key=self.feature_key,
            analysis_profile_id=self._profile_id,
        )

    def sample(self, context: SamplingContext, track_id, time_seconds) -> SpectrumResult:
        if not track_id:
            self._placeholder(context, track_id, MSG_SELECT_TRACK)
            return SpectrumResult(message=MSG_SELECT_TRACK)

        frame = context.source.sample_frame(track_id, self.descriptor(), time_seconds,
                                            self.smoothing)
        if frame is None or frame.values is None or len(frame.values) == 0:
            self._placeholder(context, track_id, MSG_NO_SPECTRUM)
            return SpectrumResult(message=MSG_NO_SPECTRUM)

        sample_rate = resolve_spectrogram_sample_rate(
            frame, fallback=self._fallback_sample_rate,
        )
        bins = prepare_spectrum_bins(
            frame.values, sample_rate,
            min_frequency=self.min_frequency,
            max_frequency=self.max_frequency,
            bar_count=self.bar_count,
            scale=self.scale,
            tilt=self.tilt,
            gain=self.gain,
            min_decibels=self.min_decibels,
            max_decibels=self.max_decibels,
        )
        self._ready(context, track_id, len(bins))
        return SpectrumResult(bins=bins, sample_rate=sample_rate)
