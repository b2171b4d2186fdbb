#tests/test_monitoring_logger.py
"""
Tests for monitoring.logger.JsonFileLogger and log_event.
"""

from __future__ import annotations

import json
from pathlib import Path

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import JsonFileLogger, log_event


def test_json_file_logger_writes_valid_json(tmp_path: Path):
    bus = EventBus()
    log_path = tmp_path / "nested" / "logs" / "events.log"

    logger = JsonFileLogger(log_path, bus)
    log_event(
        bus=bus,
        module="gamedata.manager",
        event_type=EventType.REGION_PATCHED,
        message="Region overrides applied",
        payload={"patched_data_centers": [101], "name": "陆行鸟"},
        correlation_id="abc",
    )
    logger.close()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 1

    data = json.loads(lines[0])
    assert data["module"] == "gamedata.manager"
    assert data["event_type"] == "REGION_PATCHED"
    assert data["payload"] == {"patched_data_centers": [101], "name": "陆行鸟"}
    assert data["correlation_id"] == "abc"
    assert isinstance(data["ts"], (int, float))
    assert "陆行鸟" in lines[0]  # not ascii-escaped


def test_close_unsubscribes(tmp_path: Path):
    bus = EventBus()
    log_path = tmp_path / "events.log"
    logger = JsonFileLogger(log_path, bus)
    logger.close()

    log_event(bus=bus, module="m", event_type=EventType.LOG, message="after close")

    assert log_path.read_text(encoding="utf-8") == ""


def test_log_event_without_bus_is_noop():
    log_event(bus=None, module="m", event_type=EventType.LOG, message="nothing")
