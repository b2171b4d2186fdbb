# src/runtime/logging_config.py
"""
Central logging configuration for the data service.

Call configure_logging() once from the entrypoint:

    from runtime.logging_config import configure_logging
    configure_logging(logging.DEBUG, log_file=Path("logs/data_service.log"))

Library modules only create module-level loggers; they never install handlers.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> None:
    """
    Attach a stdout handler (and optionally a file handler) to the root logger.

    Does nothing if the root logger already has handlers, so embedding hosts
    keep their own setup.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT)

    stream_handler = logging.StreamHandler(stream=sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(level)
