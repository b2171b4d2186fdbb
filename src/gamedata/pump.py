# Background drain for the catalog's pending file loads
# src/gamedata/pump.py
"""
PendingLoadPump: a dedicated thread that keeps the catalog's file-load queue
empty.

Each iteration either drains the queue (when the catalog reports pending
loads) or waits on a wake event for at most `idle_interval` seconds. Catalogs
exposing `add_pending_listener()` wake the pump as soon as a load is queued;
for the others the bounded wait degrades to plain polling.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from catalog.base import AssetCatalog

log = logging.getLogger(__name__)

DEFAULT_IDLE_INTERVAL = 0.005


class PendingLoadPump:
    def __init__(
        self,
        catalog: AssetCatalog,
        idle_interval: float = DEFAULT_IDLE_INTERVAL,
        name: str = "PendingLoadPumpThread",
    ) -> None:
        self._catalog = catalog
        self._idle_interval = max(0.0, idle_interval)
        self._name = name
        self._stop = threading.Event()
        self._wake = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._listening = False
        self.drain_count = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def notify(self) -> None:
        """Wake the pump early; safe to call from any thread."""
        self._wake.set()

    def start(self) -> None:
        if self.is_running:
            return

        add_listener = getattr(self._catalog, "add_pending_listener", None)
        if callable(add_listener):
            add_listener(self.notify)
            self._listening = True

        self._stop.clear()
        t = threading.Thread(target=self._run, name=self._name)
        t.daemon = True
        self._thread = t
        t.start()
        log.debug("%s started (idle interval %.3fs)", self._name, self._idle_interval)

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        """
        Request cancellation and wait up to `timeout` for the thread to exit.

        The current iteration is allowed to finish; queued loads that were not
        drained yet stay queued.
        """
        self._stop.set()
        self._wake.set()

        if self._listening:
            remove_listener = getattr(self._catalog, "remove_pending_listener", None)
            if callable(remove_listener):
                remove_listener(self.notify)
            self._listening = False

        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout)
            if t.is_alive():
                log.warning("%s did not stop within %.1fs", self._name, timeout or 0.0)
        self._thread = None

    def _run(self) -> None:
        while not self._stop.is_set():
            # Clear before checking so a notify() racing with the check is not lost.
            self._wake.clear()
            if self._catalog.has_pending_file_loads:
                try:
                    self._catalog.process_file_handle_queue()
                    self.drain_count += 1
                except Exception:
                    log.exception("Processing pending file loads failed")
                    self._stop.wait(self._idle_interval)
                continue
            self._wake.wait(self._idle_interval)
