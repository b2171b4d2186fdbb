# path: src/runtime/error_handling.py

"""
Error handling helpers for the data service.

Every independent startup step (opcode bootstrap, catalog open, region patch,
...) runs through `guarded_step`, so one failing step is logged and reported
on the monitoring bus without keeping the others from running.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple, TypeVar

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event

log = logging.getLogger(__name__)

T = TypeVar("T")


def guarded_step(
    step: str,
    fn: Callable[[], T],
    bus: Optional[EventBus] = None,
    correlation_id: Optional[str] = None,
    level: int = logging.ERROR,
) -> Tuple[bool, Optional[T]]:
    """
    Call `fn()` and return (True, result), or (False, None) if it raised.

    On failure we:
    - log the exception (with traceback) at `level`
    - emit a LOAD_FAILED event carrying the step name and exception repr

    Only Exception subclasses are caught; KeyboardInterrupt/SystemExit pass.
    """
    try:
        return True, fn()
    except Exception as exc:
        log.log(level, "Step %r failed", step, exc_info=True)
        log_event(
            bus=bus,
            module="runtime.guarded_step",
            event_type=EventType.LOAD_FAILED,
            message=f"{step} failed",
            payload={
                "step": step,
                "exception_type": type(exc).__name__,
                "exception_repr": repr(exc),
            },
            correlation_id=correlation_id,
        )
        return False, None
