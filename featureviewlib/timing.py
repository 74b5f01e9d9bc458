from __future__ import annotations

from abc import ABC, abstractmethod


class TimingContext(ABC):
    """Converts between seconds and musical timeline ticks.

    The tempo map itself lives outside this package; samplers only need
    the two conversions.
    """

    @abstractmethod
    def seconds_to_ticks(self, seconds: float) -> float:
        ...

    @abstractmethod
    def ticks_to_seconds(self, ticks: float) -> float:
        ...


class ConstantTempoTiming(TimingContext):
    """Fixed-tempo tick mapping (``ppq`` ticks per quarter note)."""

    def __init__(self, bpm: float = 120.0, ppq: int = 960):
        if bpm <= 0 or ppq <= 0:
            raise ValueError(f"bpm and ppq must be positive, got {bpm}, {ppq}")
        self.bpm = float(bpm)
        self.ppq = int(ppq)

    @property
    def ticks_per_second(self) -> float:
        return self.bpm / 60.0 * self.ppq

    def seconds_to_ticks(self, seconds: float) -> float:
        return seconds * self.ticks_per_second

    def ticks_to_seconds(self, ticks: float) -> float:
        return ticks / self.ticks_per_second
