from __future__ import annotations

from dataclasses import dataclass, field

from .events import EventBus
from .source import FeatureSource
from .timing import ConstantTempoTiming, TimingContext


@dataclass(frozen=True)
class SamplingContext:
    """Read-only collaborators handed to every sampler call.

    Replaces ambient registries: the feature cache and the tempo map are
    passed in explicitly, so calls for different displays can run in
    parallel without shared state.
    """
    source: FeatureSource
    timing: TimingContext = field(default_factory=ConstantTempoTiming)
    event_bus: EventBus | None = None

    def emit(self, event_type: str, **data) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(event_type, **data)
