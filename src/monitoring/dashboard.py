# rich-based status dashboard
# src/monitoring/dashboard.py
"""
Terminal status view for the data service (using `rich`).

DataStatusDashboard subscribes to an EventBus and keeps a small state
snapshot:

- Data: ready flag, catalog path, language, modified-files flag
- Region patch: patched datacenters/worlds, skipped codes, missing rows
- Opcodes: local table sizes, remote refresh outcome
- Failures: the last few LOAD_FAILED events

`render()` returns a renderable for one-off printing (the CLI uses this);
`run()` keeps a Live view refreshing until `stop()` is called.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bus import EventBus
from .events import EventType, MonitoringEvent

MAX_FAILURES = 5


class DataStatusDashboard:
    def __init__(self, bus: EventBus, console: Optional[Console] = None) -> None:
        self._bus = bus
        self._console = console or Console()
        self._lock = threading.Lock()
        self._stop = threading.Event()

        self._state: Dict[str, Any] = {
            "data_ready": False,
            "data_path": None,
            "language": None,
            "modified_files": False,
            "region": None,             # REGION_PATCHED payload
            "opcodes_local": None,      # OPCODES_LOADED payload
            "opcodes_remote": None,     # OPCODES_REFRESHED payload
            "failures": [],             # [{step, exception_repr}]
        }

        self._bus.subscribe(self._on_event)

    # --------------------------------------------------------
    # Event handler
    # --------------------------------------------------------

    def _on_event(self, event: MonitoringEvent) -> None:
        et = event.event_type
        payload = event.payload or {}

        with self._lock:
            if et == EventType.DATA_READY:
                self._state["data_ready"] = True
                self._state["data_path"] = payload.get("data_path")
                self._state["language"] = payload.get("language")
                self._state["modified_files"] = bool(payload.get("has_modified_game_data_files"))

            elif et == EventType.REGION_PATCHED:
                self._state["region"] = dict(payload)

            elif et == EventType.OPCODES_LOADED:
                self._state["opcodes_local"] = dict(payload)

            elif et == EventType.OPCODES_REFRESHED:
                self._state["opcodes_remote"] = dict(payload)

            elif et == EventType.LOAD_FAILED:
                failures: List[Dict[str, Any]] = self._state["failures"]
                failures.append({
                    "step": payload.get("step", "?"),
                    "error": payload.get("exception_repr", ""),
                })
                del failures[:-MAX_FAILURES]

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the current state (for tests and JSON dumps)."""
        with self._lock:
            state = dict(self._state)
            state["failures"] = list(self._state["failures"])
            return state

    # --------------------------------------------------------
    # Rendering helpers
    # --------------------------------------------------------

    def _render_data_panel(self, state: Dict[str, Any]) -> Panel:
        txt = Text()
        txt.append("Ready: ", style="bold")
        txt.append("yes\n" if state["data_ready"] else "no\n", style="green" if state["data_ready"] else "red")
        txt.append("Path: ", style="bold")
        txt.append(f"{state['data_path'] or '<none>'}\n")
        txt.append("Language: ", style="bold")
        txt.append(f"{state['language'] or '<unknown>'}\n")
        txt.append("Modified game files: ", style="bold")
        txt.append("yes" if state["modified_files"] else "no")
        return Panel(txt, title="Game Data", border_style="cyan")

    def _render_region_panel(self, state: Dict[str, Any]) -> Panel:
        region = state["region"]
        table = Table.grid(pad_edge=False)
        table.add_column(justify="left")
        if not region:
            table.add_row("<not patched>")
        else:
            table.add_row(f"[bold]Datacenters:[/bold] {len(region.get('patched_data_centers', []))}")
            table.add_row(f"[bold]Worlds:[/bold] {len(region.get('patched_worlds', []))}")
            skipped = region.get("skipped_dc_codes") or []
            missing = (region.get("missing_data_centers") or []) + (region.get("missing_worlds") or [])
            table.add_row(f"[bold]Unmapped codes:[/bold] {', '.join(map(str, skipped)) or '-'}")
            table.add_row(f"[bold]Missing rows:[/bold] {', '.join(map(str, missing[:8])) or '-'}")
        return Panel(table, title="Region Patch", border_style="green")

    def _render_opcode_panel(self, state: Dict[str, Any]) -> Panel:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Source", style="bold")
        table.add_column("Server", justify="right")
        table.add_column("Client", justify="right")
        table.add_column("Status")

        local = state["opcodes_local"]
        if local:
            table.add_row(
                "local",
                str(local.get("server_count", 0)),
                str(local.get("client_count", 0)),
                "ok" if local.get("complete") else "incomplete",
            )
        remote = state["opcodes_remote"]
        if remote:
            table.add_row(
                f"remote ({remote.get('region', '?')})",
                str(remote.get("server_count", 0)),
                str(remote.get("client_count", 0)),
                "merged" if remote.get("applied") else "unchanged",
            )
        else:
            table.add_row("remote", "-", "-", "pending")
        return Panel(table, title="Opcodes", border_style="magenta")

    def _render_failure_panel(self, state: Dict[str, Any]) -> Panel:
        failures = state["failures"]
        table = Table.grid()
        table.add_column(justify="left")
        if failures:
            for f in failures:
                table.add_row(f"[bold red]{f['step']}[/bold red]: {f['error']}")
        else:
            table.add_row("[bold green]No failures recorded.[/bold green]")
        return Panel(table, title="Failures", border_style="yellow")

    def render(self) -> Group:
        state = self.snapshot()
        return Group(
            self._render_data_panel(state),
            self._render_region_panel(state),
            self._render_opcode_panel(state),
            self._render_failure_panel(state),
        )

    def print_once(self) -> None:
        self._console.print(self.render())

    # --------------------------------------------------------
    # Live loop
    # --------------------------------------------------------

    def run(self, refresh_per_second: float = 4.0) -> None:
        """Block rendering a live view until stop() is called."""
        refresh_delay = 1.0 / max(refresh_per_second, 0.1)
        with Live(self.render(), console=self._console, refresh_per_second=refresh_per_second) as live:
            while not self._stop.wait(refresh_delay):
                live.update(self.render())

    def stop(self) -> None:
        self._stop.set()

    def close(self) -> None:
        self.stop()
        self._bus.unsubscribe(self._on_event)
