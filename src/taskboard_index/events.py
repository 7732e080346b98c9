"""
Index change notifications.

Presentation layers subscribe to a topic on an EventNotifier that is handed
to the scanner. Emission is fire-and-forget: a failing subscriber is logged
and never interrupts a scan.
"""

import logging
import threading
from collections import defaultdict
from typing import Callable, DefaultDict, List

log = logging.getLogger(__name__)

FULL_REFRESH = "full-refresh"
COLUMN_REFRESH = "column-refresh"

TOPICS = frozenset({FULL_REFRESH, COLUMN_REFRESH})

Listener = Callable[[str], None]


class EventNotifier:
    """Topic → listeners registry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)
        self._emitted: DefaultDict[str, int] = defaultdict(int)

    def subscribe(self, topic: str, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        if topic not in TOPICS:
            raise ValueError(f"Unknown topic '{topic}'")
        with self._lock:
            self._listeners[topic].append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners[topic]:
                    self._listeners[topic].remove(listener)

        return unsubscribe

    def emit(self, topic: str) -> None:
        with self._lock:
            listeners = list(self._listeners[topic])
            self._emitted[topic] += 1
        log.debug("Emitting %s to %d listener(s)", topic, len(listeners))
        for listener in listeners:
            try:
                listener(topic)
            except Exception:
                log.exception("Listener for %s failed", topic)

    def emitted(self, topic: str) -> int:
        """How many times a topic has been emitted."""
        with self._lock:
            return self._emitted[topic]
