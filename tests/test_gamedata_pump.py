# tests/test_gamedata_pump.py
"""
Tests for gamedata.pump.PendingLoadPump.

Covers:
- queued loads are drained in the background (listener and polling catalogs)
- a failing drain does not kill the thread
- stop() terminates promptly and is idempotent
"""

from __future__ import annotations

import time

from catalog.memory import InMemoryCatalog
from gamedata.pump import PendingLoadPump

from fakes.fake_catalog import PollingOnlyCatalog


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.001)
    return predicate()


def test_pump_fills_requested_file_handles():
    catalog = InMemoryCatalog()
    catalog.add_file("ui/icon/000000/000001.tex", b"icon")
    pump = PendingLoadPump(catalog, idle_interval=1.0)  # long idle: only notify can wake it
    pump.start()
    try:
        handle = catalog.request_file("ui/icon/000000/000001.tex")
        missing = catalog.request_file("does/not/exist.tex")

        assert handle.wait(timeout=2.0) is True
        assert missing.wait(timeout=2.0) is True
        assert handle.resource is not None
        assert handle.resource.data == b"icon"
        assert missing.resource is None
        assert catalog.has_pending_file_loads is False
    finally:
        pump.stop()


def test_pump_polls_catalogs_without_listeners():
    catalog = PollingOnlyCatalog()
    pump = PendingLoadPump(catalog, idle_interval=0.005)
    pump.start()
    try:
        catalog.enqueue(3)
        assert _wait_until(lambda: catalog.drained == 3)
        assert pump.drain_count >= 1
    finally:
        pump.stop()


def test_pump_survives_failing_drain():
    catalog = PollingOnlyCatalog()
    catalog.fail_next = True
    catalog.enqueue(1)

    pump = PendingLoadPump(catalog, idle_interval=0.005)
    pump.start()
    try:
        assert _wait_until(lambda: catalog.drained == 1)
        assert pump.is_running
    finally:
        pump.stop()


def test_stop_is_prompt_and_idempotent():
    catalog = InMemoryCatalog()
    pump = PendingLoadPump(catalog, idle_interval=5.0)
    pump.start()
    assert pump.is_running

    started = time.monotonic()
    pump.stop(timeout=2.0)
    elapsed = time.monotonic() - started

    assert not pump.is_running
    assert elapsed < 1.0
    pump.stop()  # second call is a no-op


def test_stop_unregisters_listener():
    catalog = InMemoryCatalog()
    pump = PendingLoadPump(catalog, idle_interval=0.005)
    pump.start()
    pump.stop()

    handle = catalog.request_file("x.tex")

    time.sleep(0.05)
    assert handle.loaded is False
    assert catalog.has_pending_file_loads is True
