from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from .config import ParamSpec
from .context import SamplingContext
from .events import SAMPLE_PLACEHOLDER, SAMPLE_READY

log = logging.getLogger(__name__)

MSG_SELECT_TRACK = "Select an audio track"


class FeatureSampler(ABC):
    """Samples one kind of analysed feature for one display element.

    A sampler is configured once from a flat config dict and is then called
    per render pass with an explicit :class:`SamplingContext`.  It holds no
    state between calls besides its configuration.
    """
    id: str = ""
    name: str = ""
    feature_key: str = ""

    @classmethod
    def config_params(cls) -> list[ParamSpec]:
        """Return parameter specifications for this sampler.

        Each :class:`ParamSpec` describes one configuration key read in
        :meth:`configure`.  Used for validation and preset generation.
        """
        return []

    def configure(self, config: dict[str, Any]) -> None:
        """Pull relevant keys from *config*, falling back to the defaults
        declared by :meth:`config_params`."""
        self._profile_id: str | None = config.get("analysis_profile")
        self._fallback_sample_rate: float = config.get("fallback_sample_rate", 44100.0)

    def param(self, config: dict[str, Any], key: str) -> Any:
        """Value of *key* in *config*, or its declared default."""
        if key in config:
            return config[key]
        for spec in self.config_params():
            if spec.key == key:
                return spec.default
        raise KeyError(f"{self.id}: unknown parameter {key!r}")

    @abstractmethod
    def sample(self, context: SamplingContext, track_id: str | None,
               time_seconds: float):
        """Sample the feature at *time_seconds*.  Never raises for missing
        or malformed data; returns a result carrying a placeholder message
        instead."""
        ...

    # -- diagnostics ---------------------------------------------------------

    def _placeholder(self, context: SamplingContext, track_id: str | None,
                     message: str) -> None:
        log.debug("%s: %s (track=%s)", self.id, message, track_id)
        context.emit(SAMPLE_PLACEHOLDER, sampler_id=self.id,
                     track_id=track_id, message=message)

    def _ready(self, context: SamplingContext, track_id: str, length: int) -> None:
        context.emit(SAMPLE_READY, sampler_id=self.id,
                     track_id=track_id, length=length)
