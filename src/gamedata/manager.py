# Data service facade
# src/gamedata/manager.py
"""
DataManager: the single object plugins talk to for game data.

Startup (each step guarded; a failing step is logged and skipped):

  1. load local opcode tables                 (degraded on failure)
  2. open the game-data catalog               (fatal: facade stays not-ready)
  3. read the launcher troubleshooting blob   (ignored on failure)
  4. mark data ready, start the pending-load pump
  5. apply region overrides per `patch_mode`  (degraded on failure)
  6. start the remote opcode refresh          (background, soft failure)

Read accessors never raise for missing data: unknown sheets, rows and files
come back as None, and opcode tables are empty until something loaded.
"""

from __future__ import annotations

import logging
import threading
import uuid
from pathlib import Path
from typing import Any, Callable, Optional

from catalog.base import AssetCatalog, Sheet
from catalog.loader import load_catalog
from catalog.memory import FileHandle
from catalog.schema import ClientLanguage, FileResource
from env.schema import DataServiceProfile
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from runtime.error_handling import guarded_step

from .icons import HQ_ICON_TYPE, icon_path, language_icon_type, normalize_icon_type
from .opcodes import ManifestFetcher, OpcodeStore, OpcodeTable
from .pump import PendingLoadPump
from .regions import (
    RegionPatchResult,
    apply_builtin_region_overrides,
    apply_region_overrides_from_file,
)
from .remote import RemoteOpcodeClient
from .troubleshooting import has_modified_game_data

log = logging.getLogger(__name__)

CatalogFactory = Callable[[Path], AssetCatalog]

MODULE = "gamedata.manager"


class DataManager:
    """
    Facade over the catalog, the opcode store, and the pending-load pump.

    Pass `catalog` to serve an already-open catalog, or leave it None to open
    `profile.game_data_path` through `catalog_factory`. `opcode_fetcher`
    replaces the HTTP client (tests use plain callables).
    """

    def __init__(
        self,
        profile: DataServiceProfile,
        catalog: Optional[AssetCatalog] = None,
        catalog_factory: CatalogFactory = load_catalog,
        opcode_fetcher: Optional[ManifestFetcher] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._profile = profile
        self._bus = bus
        self._correlation_id = uuid.uuid4().hex
        self._closed = False

        self.language: ClientLanguage = profile.language
        self.is_data_ready = False
        self.has_modified_game_data_files = False
        self.region_patch_result: Optional[RegionPatchResult] = None

        self._catalog: Optional[AssetCatalog] = None
        self._pump: Optional[PendingLoadPump] = None
        self._opcodes = OpcodeStore(profile.uires_dir)
        self._opcodes_ready = threading.Event()

        self._step("opcode_bootstrap", self._bootstrap_opcodes, logging.WARNING)

        if catalog is not None:
            self._catalog = catalog
        else:
            ok, opened = self._step(
                "catalog_open",
                lambda: catalog_factory(profile.game_data_path),
                logging.ERROR,
            )
            self._catalog = opened if ok else None

        if self._catalog is not None:
            log.info("Game data is ready: %s", self._catalog.data_path)
            self.has_modified_game_data_files = has_modified_game_data(profile.troubleshooting_pack)
            self.is_data_ready = True
            self._emit(
                EventType.DATA_READY,
                "Game data is ready",
                {
                    "data_path": str(self._catalog.data_path),
                    "language": self.language.value,
                    "has_modified_game_data_files": self.has_modified_game_data_files,
                },
            )

            self._pump = PendingLoadPump(
                self._catalog,
                idle_interval=profile.pump_idle_interval_ms / 1000.0,
            )
            self._pump.start()

            self._step("region_patch", self._apply_region_patch, logging.WARNING)
        else:
            log.error("Game data could not be located; data accessors will return nothing.")

        self._start_opcode_refresh(opcode_fetcher)

    # ------------------------------------------------------------------
    # Startup steps
    # ------------------------------------------------------------------

    def _step(self, name: str, fn: Callable[[], Any], level: int) -> tuple[bool, Any]:
        return guarded_step(name, fn, bus=self._bus, correlation_id=self._correlation_id, level=level)

    def _bootstrap_opcodes(self) -> None:
        loaded = self._opcodes.bootstrap()
        self._emit(
            EventType.OPCODES_LOADED,
            "Local opcode tables loaded" if loaded else "Local opcode tables incomplete",
            {
                "complete": loaded,
                "server_count": len(self._opcodes.server_opcodes),
                "client_count": len(self._opcodes.client_opcodes),
            },
        )

    def _apply_region_patch(self) -> None:
        mode = self._profile.patch_mode
        if mode == "off":
            return
        if mode == "manifest":
            result = apply_region_overrides_from_file(
                self._profile.server_manifest_path, self._catalog, self.language
            )
        else:
            result = apply_builtin_region_overrides(self._catalog, self.language)
        self.region_patch_result = result
        self._emit(EventType.REGION_PATCHED, f"Region overrides applied ({mode})", result.to_dict())

    def _start_opcode_refresh(self, fetcher: Optional[ManifestFetcher]) -> None:
        remote = self._profile.remote
        if not remote.enabled:
            self._opcodes_ready.set()
            return

        if fetcher is None:
            fetcher = RemoteOpcodeClient(
                url=remote.url,
                timeout=remote.timeout_seconds,
                retries=remote.retries,
                backoff=remote.backoff_seconds,
            )
        self._opcodes.start_background_refresh(fetcher, remote.region, on_done=self._on_opcodes_refreshed)

    def _on_opcodes_refreshed(self, applied: bool) -> None:
        self._emit(
            EventType.OPCODES_REFRESHED,
            "Remote opcodes merged" if applied else "Remote opcodes unavailable; keeping local tables",
            {
                "applied": applied,
                "region": self._profile.remote.region,
                "server_count": len(self._opcodes.server_opcodes),
                "client_count": len(self._opcodes.client_opcodes),
            },
        )
        self._opcodes_ready.set()

    def _emit(self, event_type: EventType, message: str, payload: dict) -> None:
        log_event(
            bus=self._bus,
            module=MODULE,
            event_type=event_type,
            message=message,
            payload=payload,
            correlation_id=self._correlation_id,
        )

    # ------------------------------------------------------------------
    # Opcodes
    # ------------------------------------------------------------------

    @property
    def server_opcodes(self) -> OpcodeTable:
        return self._opcodes.server_opcodes

    @property
    def client_opcodes(self) -> OpcodeTable:
        return self._opcodes.client_opcodes

    @property
    def opcodes_ready(self) -> bool:
        """True once the remote refresh finished (or was disabled)."""
        return self._opcodes_ready.is_set()

    @property
    def opcodes_refreshed(self) -> bool:
        return self._opcodes.refreshed

    def wait_for_opcodes(self, timeout: Optional[float] = None) -> bool:
        return self._opcodes_ready.wait(timeout)

    @property
    def opcode_store(self) -> OpcodeStore:
        return self._opcodes

    # ------------------------------------------------------------------
    # Catalog wrappers
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> Optional[AssetCatalog]:
        return self._catalog

    def get_sheet(self, sheet: str | type, language: ClientLanguage | str | None = None) -> Optional[Sheet]:
        """
        Sheet by name or by row type (anything with a `sheet_name`).

        Without a language the service language is used.
        """
        if self._catalog is None:
            return None
        name = sheet if isinstance(sheet, str) else getattr(sheet, "sheet_name", None)
        if not name:
            raise ValueError(f"Cannot derive a sheet name from {sheet!r}")
        lang = ClientLanguage.parse(language) if language is not None else self.language
        return self._catalog.get_sheet(name, lang)

    def get_row(
        self,
        sheet: str | type,
        row_id: int,
        language: ClientLanguage | str | None = None,
    ) -> Optional[Any]:
        table = self.get_sheet(sheet, language)
        if table is None:
            return None
        return table.get_row(row_id)

    def get_file(self, path: str) -> Optional[FileResource]:
        if self._catalog is None:
            return None
        return self._catalog.get_file(path)

    def file_exists(self, path: str) -> bool:
        if self._catalog is None:
            return False
        return self._catalog.file_exists(path)

    def request_file(self, path: str) -> Optional[FileHandle]:
        """
        Queue a deferred load; the pump fills the handle in the background.

        Returns None if the catalog has no load queue.
        """
        request = getattr(self._catalog, "request_file", None)
        if not callable(request):
            return None
        return request(path)

    # ------------------------------------------------------------------
    # Icons
    # ------------------------------------------------------------------

    def get_icon(self, icon_id: int, high_resolution: bool = False) -> Optional[FileResource]:
        """Icon in the service language, falling back to the generic icon."""
        return self.get_icon_for_language(self.language, icon_id, high_resolution)

    def get_icon_for_language(
        self,
        language: ClientLanguage | str,
        icon_id: int,
        high_resolution: bool = False,
    ) -> Optional[FileResource]:
        return self.get_icon_by_type(language_icon_type(language), icon_id, high_resolution)

    def get_icon_by_type(
        self,
        icon_type: Optional[str],
        icon_id: int,
        high_resolution: bool = False,
    ) -> Optional[FileResource]:
        """
        Icon of a given type ("hq", "en", ...); if that variant does not exist,
        the untyped icon is returned instead.
        """
        icon_type = normalize_icon_type(icon_type)
        file = self.get_file(icon_path(icon_id, icon_type, high_resolution))
        if icon_type == "" or file is not None:
            return file
        return self.get_file(icon_path(icon_id, "", high_resolution))

    def get_hq_icon(self, icon_id: int, high_resolution: bool = False) -> Optional[FileResource]:
        return self.get_icon_by_type(HQ_ICON_TYPE, icon_id, high_resolution)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop the pump thread. The refresh thread is a daemon and is not joined."""
        if self._closed:
            return
        self._closed = True
        if self._pump is not None:
            self._pump.stop()
            self._pump = None

    def __enter__(self) -> "DataManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
