# path: src/runtime/main.py

"""
Command-line entrypoint for the data service.

Builds a DataManager from config/data_service.yaml, optionally waits for the
remote opcode refresh, prints a status summary (or keeps a live view open
for --watch seconds), and shuts down.

    python -m runtime.main --profile cn --wait-opcodes 15
    python -m runtime.main --config my.yaml --events-log logs/events.log --dump-opcodes
    python -m runtime.main --profile cn --watch 30
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from env.loader import load_data_profile
from gamedata.manager import DataManager
from monitoring.bus import EventBus
from monitoring.dashboard import DataStatusDashboard
from monitoring.logger import JsonFileLogger
from runtime.logging_config import configure_logging

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gamedata-service",
        description="Load game data, apply region overrides and refresh opcode tables.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to data_service.yaml.")
    parser.add_argument("--profile", default=None, help="Profile name (overrides 'profile' in the config).")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--wait-opcodes",
        type=float,
        default=0.0,
        metavar="SECONDS",
        help="Wait up to SECONDS for the remote opcode refresh before reporting.",
    )
    parser.add_argument(
        "--watch",
        type=float,
        default=0.0,
        metavar="SECONDS",
        help="Keep a live status view open for SECONDS instead of printing it once.",
    )
    parser.add_argument("--events-log", type=Path, default=None, help="Write monitoring events as JSONL.")
    parser.add_argument("--dump-opcodes", action="store_true", help="Print the final opcode tables as JSON.")
    return parser


def _watch(dashboard: DataStatusDashboard, seconds: float) -> None:
    """Render the live view until `seconds` elapse or Ctrl+C."""
    timer = threading.Timer(seconds, dashboard.stop)
    timer.daemon = True
    timer.start()
    try:
        dashboard.run()
    except KeyboardInterrupt:
        log.info("Live view interrupted")
    finally:
        timer.cancel()


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.INFO)
    console = console or Console()

    try:
        profile = load_data_profile(args.config, profile=args.profile)
    except (FileNotFoundError, KeyError, ValueError) as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {exc}")
        return 2

    bus = EventBus()
    events_logger = JsonFileLogger(args.events_log, bus) if args.events_log else None
    dashboard = DataStatusDashboard(bus, console=console)

    try:
        with DataManager(profile, bus=bus) as data:
            if args.wait_opcodes > 0 and not data.wait_for_opcodes(args.wait_opcodes):
                log.warning("Remote opcode refresh still running after %.1fs", args.wait_opcodes)

            if args.watch > 0:
                _watch(dashboard, args.watch)
            else:
                dashboard.print_once()

            if args.dump_opcodes:
                console.print_json(json.dumps({
                    "server": dict(data.server_opcodes),
                    "client": dict(data.client_opcodes),
                }))

            return 0 if data.is_data_ready else 1
    finally:
        dashboard.close()
        if events_logger is not None:
            events_logger.close()


if __name__ == "__main__":
    sys.exit(main())
