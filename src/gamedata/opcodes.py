# Client/server opcode tables
# src/gamedata/opcodes.py
"""
Opcode store.

Responsibility:
  - Load the local client/server opcode tables shipped in UIRes/.
  - Refresh them from the remote manifest in a background thread.
  - Publish each table as an immutable snapshot (OpcodeTable); a refresh
    builds a new snapshot and swaps the reference, so readers always see
    either the old or the new table and never a half-merged one.

Only a fixed set of names is taken from the remote manifest; each alias pair
maps the local name to the name used by the remote lists.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

from .errors import OpcodeFileError
from .remote import (
    CLIENT_LIST_NAME,
    MAX_OPCODE,
    SERVER_LIST_NAME,
    RemoteOpcodeManifest,
    find_region_entry,
)

log = logging.getLogger(__name__)

# Read-only name -> opcode mapping.
OpcodeTable = Mapping[str, int]

# (local name, remote name)
AliasPairs = Tuple[Tuple[str, str], ...]

SERVER_OPCODE_ALIASES: AliasPairs = (
    ("ActorControlSelf", "ActorControlSelf"),
    ("ContainerInfo", "ContainerInfo"),
    ("MarketBoardItemRequestStart", "MarketBoardItemListingCount"),
    ("MarketBoardHistory", "MarketBoardItemListingHistory"),
    ("MarketBoardOfferings", "MarketBoardItemListing"),
    ("MarketBoardPurchase", "MarketBoardPurchase"),
    ("InventoryActionAck", "InventoryActionAck"),
    ("MarketTaxRates", "ResultDialog"),
    ("RetainerInformation", "RetainerInformation"),
    ("ItemMarketBoardInfo", "ItemMarketBoardInfo"),
    ("CfNotifyPop", "CFNotify"),
)

CLIENT_OPCODE_ALIASES: AliasPairs = (
    ("MarketBoardPurchaseHandler", "MarketBoardPurchaseHandler"),
)

SERVER_OPCODE_FILE = "serveropcode.json"
CLIENT_OPCODE_FILE = "clientopcode.json"

ManifestFetcher = Callable[[], RemoteOpcodeManifest]


def freeze_table(values: Mapping[str, int]) -> OpcodeTable:
    """Copy `values` into a new read-only snapshot."""
    return MappingProxyType(dict(values))


EMPTY_TABLE: OpcodeTable = freeze_table({})


# ---------------------------------------------------------------------------
# Local files
# ---------------------------------------------------------------------------

def load_opcode_file(path: Path | str) -> OpcodeTable:
    """
    Load a JSON object of name -> opcode.

    Raises OpcodeFileError if the file is missing, not JSON, or contains
    anything other than 16-bit integer values.
    """
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except FileNotFoundError as exc:
        raise OpcodeFileError(f"Opcode file not found: {p}") from exc
    except (OSError, ValueError) as exc:
        raise OpcodeFileError(f"Couldn't read opcode file {p}: {exc}") from exc

    if not isinstance(data, dict):
        raise OpcodeFileError(f"Opcode file {p} must be a JSON object.")

    table: Dict[str, int] = {}
    for name, value in data.items():
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_OPCODE:
            raise OpcodeFileError(f"Opcode {name!r} in {p} is not a 16-bit integer: {value!r}")
        table[name] = value
    return freeze_table(table)


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def merge_opcodes(
    table: OpcodeTable,
    remote: Mapping[str, int],
    aliases: Iterable[Tuple[str, str]],
) -> OpcodeTable:
    """
    Return a new table: `table` plus every aliased remote opcode.

    For each (local, remote_name) pair found in `remote`, the local name is
    inserted or overwritten. Pairs whose remote name is absent leave the
    local entry alone. The input table is not modified.
    """
    merged = dict(table)
    for local_name, remote_name in aliases:
        opcode = remote.get(remote_name)
        if opcode is None:
            continue
        log.debug("Setting %s to %d per remote manifest.", local_name, opcode)
        merged[local_name] = opcode
    return freeze_table(merged)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class OpcodeStore:
    """
    Owner of the current client/server opcode snapshots.

    Tables start empty so lookups work (and miss) before anything loaded.
    `bootstrap()` reads the local files; `refresh()` / `start_background_refresh()`
    merge in the remote manifest.
    """

    def __init__(
        self,
        opcode_dir: Path | str | None = None,
        server_aliases: AliasPairs = SERVER_OPCODE_ALIASES,
        client_aliases: AliasPairs = CLIENT_OPCODE_ALIASES,
    ) -> None:
        self._opcode_dir = Path(opcode_dir) if opcode_dir is not None else None
        self._server_aliases = server_aliases
        self._client_aliases = client_aliases

        self._server: OpcodeTable = EMPTY_TABLE
        self._client: OpcodeTable = EMPTY_TABLE

        # Single writer at a time; readers never take this lock.
        self._write_lock = threading.Lock()
        self._ready = threading.Event()
        self._refreshed = False
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def server_opcodes(self) -> OpcodeTable:
        return self._server

    @property
    def client_opcodes(self) -> OpcodeTable:
        return self._client

    @property
    def ready(self) -> bool:
        """True once a remote refresh attempt has finished, successful or not."""
        return self._ready.is_set()

    @property
    def refreshed(self) -> bool:
        """True if remote data was actually merged in."""
        return self._refreshed

    def wait_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout)

    # ------------------------------------------------------------------
    # Local bootstrap
    # ------------------------------------------------------------------

    def bootstrap(self) -> bool:
        """
        Load serveropcode.json and clientopcode.json.

        Each file is loaded independently; a failure is logged and leaves that
        table empty. Returns True only if both loaded.
        """
        if self._opcode_dir is None:
            log.warning("No opcode directory configured; opcode tables stay empty.")
            return False

        ok = True
        try:
            self._server = load_opcode_file(self._opcode_dir / SERVER_OPCODE_FILE)
            log.debug("Loaded %d ServerOpCodes.", len(self._server))
        except OpcodeFileError:
            log.exception("Could not load server opcodes.")
            ok = False

        try:
            self._client = load_opcode_file(self._opcode_dir / CLIENT_OPCODE_FILE)
            log.debug("Loaded %d ClientOpCodes.", len(self._client))
        except OpcodeFileError:
            log.exception("Could not load client opcodes.")
            ok = False

        return ok

    # ------------------------------------------------------------------
    # Remote refresh
    # ------------------------------------------------------------------

    def apply_remote(self, manifest: RemoteOpcodeManifest, region: str) -> bool:
        """
        Merge the entry for `region` into both tables.

        Returns False (tables untouched) if no entry matches the region.
        """
        entry = find_region_entry(manifest, region)
        if entry is None:
            log.warning("Failed loading region %s from remote opcode manifest.", region)
            return False

        server_remote = entry.lists.get(SERVER_LIST_NAME, {})
        client_remote = entry.lists.get(CLIENT_LIST_NAME, {})

        with self._write_lock:
            server = merge_opcodes(self._server, server_remote, self._server_aliases)
            client = merge_opcodes(self._client, client_remote, self._client_aliases)
            self._server = server
            self._client = client

        log.info(
            "Merged remote opcodes for %s (version %s): %d server, %d client entries available.",
            region,
            entry.version or "?",
            len(server_remote),
            len(client_remote),
        )
        return True

    def refresh(self, fetch: ManifestFetcher, region: str) -> bool:
        """
        Fetch the manifest and merge it. Never raises.

        Any failure is logged and leaves both tables as they were. The ready
        flag is set when the attempt ends, whatever the outcome.
        """
        try:
            manifest = fetch()
            applied = self.apply_remote(manifest, region)
            if applied:
                self._refreshed = True
            return applied
        except Exception:
            log.exception("Could not load remote opcodes.")
            return False
        finally:
            self._ready.set()

    def start_background_refresh(
        self,
        fetch: ManifestFetcher,
        region: str,
        on_done: Optional[Callable[[bool], None]] = None,
    ) -> threading.Thread:
        """
        Run refresh() on a daemon thread and return immediately.

        `on_done` receives refresh()'s result on that thread.
        """
        def _run() -> None:
            applied = self.refresh(fetch, region)
            if on_done is not None:
                try:
                    on_done(applied)
                except Exception:
                    log.exception("Opcode refresh callback failed.")

        t = threading.Thread(
            target=_run,
            name="OpcodeRefreshThread",
        )
        t.daemon = True
        self._thread = t
        t.start()
        return t
