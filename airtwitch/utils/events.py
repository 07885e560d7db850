"""
Minimal synchronous observer channel.

Producers call ``emit`` from whatever thread they run on; every subscriber
is invoked on that same thread.
"""

import logging
import threading
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventChannel(Generic[T]):
    """Fan-out of events of one type to registered callbacks."""

    def __init__(self, name: str = "events"):
        self.name = name
        self._subscribers: list[Callable[[T], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[T], None]) -> None:
        """
        Subscribe to events.

        Subscribing the same callback twice has no effect.
        """
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[T], None]) -> None:
        """Unsubscribe from events. Unknown callbacks are ignored."""
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def emit(self, event: T) -> None:
        """
        Deliver an event to every subscriber.

        A failing subscriber is logged and does not prevent delivery to the
        others.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"{self.name} subscriber error: {e}", exc_info=True)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
