# EventBus for monitoring events
"""
Minimal, thread-safe, in-process pub/sub for MonitoringEvents.

Publishers include the DataManager startup steps and the background opcode
refresh thread; subscribers are the JSONL logger and the status dashboard.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, List

from .events import MonitoringEvent

log = logging.getLogger(__name__)


# ============================================================
# Type aliases
# ============================================================

SubscriberFn = Callable[[MonitoringEvent], None]


# ============================================================
# Event Bus
# ============================================================

class EventBus:
    """
    Simple in-process event bus.

    - Subscribers list protected by a Lock.
    - Each publish iterates over a snapshot of subscribers, so subscribers can
      (un)subscribe from inside a callback without deadlocking.
    """

    def __init__(self) -> None:
        self._subscribers: List[SubscriberFn] = []
        self._lock = Lock()

    def subscribe(self, fn: SubscriberFn) -> None:
        with self._lock:
            self._subscribers.append(fn)

    def unsubscribe(self, fn: SubscriberFn) -> None:
        """Safe to call even if `fn` is not subscribed."""
        with self._lock:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

    def publish(self, event: MonitoringEvent) -> None:
        """
        Deliver `event` to every subscriber.

        A failing subscriber is logged and skipped; it never stops delivery to
        the others or propagates into the publisher.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        for fn in subscribers:
            try:
                fn(event)
            except Exception:
                log.exception("Monitoring subscriber %r failed", fn)

    def clear(self) -> None:
        """Drop all subscribers. Mostly useful for tests."""
        with self._lock:
            self._subscribers.clear()


# Process-wide bus for callers that do not manage their own.
default_bus = EventBus()
