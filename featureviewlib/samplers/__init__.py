from .waveform import WaveformSampler
from .spectrum import SpectrumSampler
from .volume_meter import VolumeMeterSampler
from .locked_oscilloscope import LockedOscilloscopeSampler


def default_samplers():
    """Returns all built-in samplers."""
    return [
        WaveformSampler(),
        SpectrumSampler(),
        VolumeMeterSampler(),
        LockedOscilloscopeSampler(),
    ]


__all__ = [
    "default_samplers",
    "WaveformSampler",
    "SpectrumSampler",
    "VolumeMeterSampler",
    "LockedOscilloscopeSampler",
]
