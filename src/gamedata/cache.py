# src/gamedata/cache.py
"""
Process-local DataManager singleton.

Usage:

    from gamedata.cache import get_data_manager

    data = get_data_manager()
    world = data.get_row("World", 1042)

The first call loads config/data_service.yaml and constructs the manager;
later calls return the same instance. Hosts that manage their own lifecycle
should construct DataManager directly instead.
"""

from __future__ import annotations

import threading
from typing import Optional

from env.loader import load_data_profile
from monitoring.bus import default_bus

from .manager import DataManager


_data_manager: Optional[DataManager] = None
_lock = threading.Lock()


def get_data_manager() -> DataManager:
    """
    Return the process-local DataManager, creating it on first use.

    Tests can monkeypatch gamedata.cache.DataManager / load_data_profile to
    verify call counts.
    """
    global _data_manager
    with _lock:
        if _data_manager is None:
            _data_manager = DataManager(load_data_profile(), bus=default_bus)
        return _data_manager


def _reset_caches_for_tests() -> None:
    """
    Internal helper used by tests to drop the singleton (closing it first).

    Do not use this in normal code; it's only meant for test isolation.
    """
    global _data_manager
    with _lock:
        if _data_manager is not None and hasattr(_data_manager, "close"):
            _data_manager.close()
        _data_manager = None
