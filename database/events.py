"""
Connection lifecycle events for the MongoDB handle

The driver reports server heartbeats from its monitor threads. The listener
below folds those per-server heartbeats into three connection-level events:

- ``error``: a server that was reachable failed its heartbeat
- ``disconnected``: the last reachable server was lost
- ``reconnected``: a server became reachable again after a disconnect
"""

import threading
from typing import Any, Callable, Dict, List, Set, Tuple

from pymongo import monitoring

from core.utils import get_logger

logger = get_logger(__name__)

ERROR = "error"
DISCONNECTED = "disconnected"
RECONNECTED = "reconnected"

EVENT_NAMES = (ERROR, DISCONNECTED, RECONNECTED)

Observer = Callable[..., Any]


class ConnectionEvents:
    """Subscribable hub for connection lifecycle events"""

    def __init__(self):
        self._observers: Dict[str, List[Observer]] = {name: [] for name in EVENT_NAMES}
        self._lock = threading.Lock()

    def on(self, event: str, observer: Observer) -> None:
        """Subscribe an observer to an event"""
        self._check_event(event)
        with self._lock:
            self._observers[event].append(observer)

    def off(self, event: str, observer: Observer) -> None:
        """Unsubscribe an observer, ignoring unknown observers"""
        self._check_event(event)
        with self._lock:
            try:
                self._observers[event].remove(observer)
            except ValueError:
                pass

    def observers(self, event: str) -> List[Observer]:
        self._check_event(event)
        with self._lock:
            return list(self._observers[event])

    def emit(self, event: str, *args: Any) -> int:
        """Call every observer of an event, returns how many were called"""
        called = 0
        for observer in self.observers(event):
            try:
                observer(*args)
            except Exception:
                # Observers run on driver threads; never let one break the monitor
                logger.exception(f"Connection event observer failed for '{event}'")
            called += 1
        return called

    @staticmethod
    def _check_event(event: str) -> None:
        if event not in EVENT_NAMES:
            raise ValueError(f"Unknown connection event: {event}")


class HeartbeatListener(monitoring.ServerHeartbeatListener):
    """Translate server heartbeats into connection events"""

    def __init__(self, events: ConnectionEvents):
        self.events = events
        self._reachable: Set[Tuple[str, int]] = set()
        self._lost = False
        self._lock = threading.Lock()

    @property
    def is_reachable(self) -> bool:
        with self._lock:
            return bool(self._reachable)

    def started(self, event: monitoring.ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: monitoring.ServerHeartbeatSucceededEvent) -> None:
        with self._lock:
            was_unreachable = not self._reachable
            self._reachable.add(event.connection_id)
            recovered = was_unreachable and self._lost
            if recovered:
                self._lost = False

        if recovered:
            self.events.emit(RECONNECTED)

    def failed(self, event: monitoring.ServerHeartbeatFailedEvent) -> None:
        with self._lock:
            if event.connection_id not in self._reachable:
                # Still down, or never came up
                return
            self._reachable.discard(event.connection_id)
            lost_all = not self._reachable
            if lost_all:
                self._lost = True

        self.events.emit(ERROR, event.reply)
        if lost_all:
            self.events.emit(DISCONNECTED)


def attach_logging_observers(events: ConnectionEvents) -> None:
    """Log every connection event"""

    def on_error(error: Exception) -> None:
        logger.error(f"❌ MongoDB connection error: {error}")

    def on_disconnected() -> None:
        logger.warning("⚠️ MongoDB disconnected")

    def on_reconnected() -> None:
        logger.info("✅ MongoDB reconnected")

    events.on(ERROR, on_error)
    events.on(DISCONNECTED, on_disconnected)
    events.on(RECONNECTED, on_reconnected)
