from __future__ import annotations

import threading
from typing import Any, Callable

SAMPLE_READY = "sample.ready"
SAMPLE_PLACEHOLDER = "sample.placeholder"

Handler = Callable[..., Any]


class EventBus:
    """Publish/subscribe hub for sampling diagnostics.

    Samplers report when a display received data (``sample.ready``) or had
    to fall back to a placeholder message (``sample.placeholder``).  A bus
    can be shared by samplers running on different threads; handler lists
    are guarded by a lock and handlers run outside it.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, handler: Handler) -> None:
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: str, handler: Handler) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type)
            if handlers and handler in handlers:
                handlers.remove(handler)

    def has_subscribers(self, event_type: str) -> bool:
        with self._lock:
            return bool(self._handlers.get(event_type))

    def emit(self, event_type: str, **data: Any) -> None:
        """Call every handler registered for *event_type* with ``**data``."""
        with self._lock:
            handlers = tuple(self._handlers.get(event_type, ()))
        for handler in handlers:
            handler(**data)
