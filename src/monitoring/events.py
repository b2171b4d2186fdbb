# path: src/monitoring/events.py
"""
Event schema for data-service monitoring.

MonitoringEvent instances are published on monitoring.bus.EventBus and can be
written as JSON lines by monitoring.logger.JsonFileLogger. All payloads must
be JSON-safe; `.to_dict()` stores the event type by name.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Lifecycle events emitted by the data service."""

    # Catalog opened and the facade is serving data
    DATA_READY = auto()

    # Datacenter/world rows rewritten for a region
    REGION_PATCHED = auto()

    # Local opcode tables loaded from UIRes/
    OPCODES_LOADED = auto()

    # Remote opcode refresh finished (payload says whether anything merged)
    OPCODES_REFRESHED = auto()

    # A startup step failed and was skipped
    LOAD_FAILED = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the data service.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module ("gamedata.manager", ...)
    event_type: EventType
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data (counts, ids, error repr)
    correlation_id: Optional[str] = None  # Groups events of one facade instance

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name
        return data
