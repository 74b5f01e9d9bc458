from ._version import __version__
from .models import (
    ChannelSelector,
    FeatureDescriptor,
    FeatureFrameSample,
    FeatureRangeSample,
    MeterResult,
    OscilloscopeResult,
    PaddingPlan,
    SelectorKind,
    SpectrumResult,
    WaveformChannel,
    WaveformFormat,
    WaveformResult,
    WaveformSide,
)
from .channels import (
    extract_waveform_channels,
    normalize_channel_selector_input,
    parse_channel_selector,
    resolve_channel_selection,
    select_channel_sample,
)
from .timeline import apply_padding, build_padding_plan, compute_tick_window
from .resample import resample
from .smoothing import damp
from .amplitude import (
    apply_gain,
    apply_side_selection,
    apply_transfer_function,
    normalize_decibels,
)
from .frequency import FrequencyScale, remap_frequency_bins
from .source import FeatureSource, FeatureTrackData, InMemoryFeatureSource
from .timing import ConstantTempoTiming, TimingContext
from .context import SamplingContext
from .config import (
    default_config,
    merge_configs,
    validate_config,
    validate_config_fields,
    validate_param_values,
    validate_structured_config,
    build_structured_defaults,
    flatten_structured_config,
    load_preset,
    save_preset,
    ConfigError,
    ConfigFieldError,
    ParamSpec,
    SAMPLING_PARAMS,
)
from .events import EventBus
from .sampler import FeatureSampler
from .samplers import default_samplers
from .pipeline import (
    SamplingPipeline,
    prepare_spectrum_bins,
    prepare_values_for_display,
    sample_waveform_range,
)

__all__ = [
    "__version__",
    "ChannelSelector",
    "FeatureDescriptor",
    "FeatureFrameSample",
    "FeatureRangeSample",
    "MeterResult",
    "OscilloscopeResult",
    "PaddingPlan",
    "SelectorKind",
    "SpectrumResult",
    "WaveformChannel",
    "WaveformFormat",
    "WaveformResult",
    "WaveformSide",
    "extract_waveform_channels",
    "normalize_channel_selector_input",
    "parse_channel_selector",
    "resolve_channel_selection",
    "select_channel_sample",
    "apply_padding",
    "build_padding_plan",
    "compute_tick_window",
    "resample",
    "damp",
    "apply_gain",
    "apply_side_selection",
    "apply_transfer_function",
    "normalize_decibels",
    "FrequencyScale",
    "remap_frequency_bins",
    "FeatureSource",
    "FeatureTrackData",
    "InMemoryFeatureSource",
    "ConstantTempoTiming",
    "TimingContext",
    "SamplingContext",
    "default_config",
    "merge_configs",
    "validate_config",
    "validate_config_fields",
    "validate_param_values",
    "validate_structured_config",
    "build_structured_defaults",
    "flatten_structured_config",
    "load_preset",
    "save_preset",
    "ConfigError",
    "ConfigFieldError",
    "ParamSpec",
    "SAMPLING_PARAMS",
    "EventBus",
    "FeatureSampler",
    "default_samplers",
    "SamplingPipeline",
    "prepare_spectrum_bins",
    "prepare_values_for_display",
    "sample_waveform_range",
]
