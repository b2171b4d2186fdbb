# In-memory asset catalog
# src/catalog/memory.py
"""
Reference AssetCatalog implementation holding everything in memory.

Responsibility:
  - Keep sheets (per language) and raw files in plain dicts.
  - Provide a pending file-load queue: `request_file()` returns a FileHandle
    immediately, and the handle is filled once somebody calls
    `process_file_handle_queue()` (normally the PendingLoadPump thread).
  - Notify registered listeners when a load is queued so the pump does not
    have to poll blindly.

The real game-data repository is an external library; this class is what the
service and the tests run against when no such library is wired in.
"""

from __future__ import annotations

import logging
from collections import deque
from threading import Event, Lock
from typing import Any, Callable, Deque, Dict, Iterable, Iterator, List, Optional

from .base import PendingListener
from .schema import ClientLanguage, FileResource

log = logging.getLogger(__name__)

FileSource = Callable[[str], Optional[bytes]]


# ---------------------------------------------------------------------------
# Sheets
# ---------------------------------------------------------------------------

class SheetTable:
    """Rows of one sheet indexed by row_id. Rows are stored by reference."""

    def __init__(self, name: str, rows: Iterable[Any] = ()) -> None:
        self.name = name
        self._rows: Dict[int, Any] = {}
        for row in rows:
            self.add_row(row)

    def add_row(self, row: Any) -> None:
        self._rows[int(row.row_id)] = row

    def get_row(self, row_id: int) -> Optional[Any]:
        return self._rows.get(int(row_id))

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._rows.values()))

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"SheetTable(name={self.name!r}, rows={len(self._rows)})"


# ---------------------------------------------------------------------------
# Pending file loads
# ---------------------------------------------------------------------------

class FileHandle:
    """
    Placeholder for a file whose bytes are loaded later by the queue drain.

    `wait(timeout)` blocks until the load happened; `resource` is None when
    the file does not exist.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.resource: Optional[FileResource] = None
        self._done = Event()

    @property
    def loaded(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)

    def _complete(self, resource: Optional[FileResource]) -> None:
        self.resource = resource
        self._done.set()


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class InMemoryCatalog:
    """
    AssetCatalog backed by dicts.

    Sheets registered without a language are the default and serve every
    language that has no dedicated copy. Files can be provided up front or
    through a `file_source` callable (used by the directory loader to read
    lazily from disk); loaded files are cached.
    """

    def __init__(
        self,
        data_path: str = "<memory>",
        file_source: Optional[FileSource] = None,
    ) -> None:
        self._data_path = data_path
        self._file_source = file_source
        self._sheets: Dict[Optional[ClientLanguage], Dict[str, SheetTable]] = {None: {}}
        self._files: Dict[str, bytes] = {}

        self._queue: Deque[FileHandle] = deque()
        self._queue_lock = Lock()
        self._listeners: List[PendingListener] = []

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def add_sheet(
        self,
        name: str,
        rows: Iterable[Any] = (),
        language: Optional[ClientLanguage] = None,
    ) -> SheetTable:
        sheet = SheetTable(name, rows)
        self._sheets.setdefault(language, {})[name] = sheet
        return sheet

    def add_file(self, path: str, data: bytes) -> None:
        self._files[_normalize_path(path)] = bytes(data)

    # ------------------------------------------------------------------
    # AssetCatalog protocol
    # ------------------------------------------------------------------

    @property
    def data_path(self) -> str:
        return self._data_path

    def get_sheet(self, name: str, language: Optional[ClientLanguage] = None) -> Optional[SheetTable]:
        if language is not None:
            localized = self._sheets.get(language, {}).get(name)
            if localized is not None:
                return localized
        return self._sheets[None].get(name)

    def get_file(self, path: str) -> Optional[FileResource]:
        key = _normalize_path(path)
        data = self._files.get(key)
        if data is None and self._file_source is not None:
            data = self._file_source(key)
            if data is not None:
                self._files[key] = data
        if data is None:
            return None
        return FileResource(path=key, data=data)

    def file_exists(self, path: str) -> bool:
        return self.get_file(path) is not None

    @property
    def has_pending_file_loads(self) -> bool:
        with self._queue_lock:
            return bool(self._queue)

    def process_file_handle_queue(self) -> None:
        while True:
            with self._queue_lock:
                if not self._queue:
                    return
                handle = self._queue.popleft()
            try:
                handle._complete(self.get_file(handle.path))
            except Exception:
                log.exception("Failed to load queued file %s", handle.path)
                handle._complete(None)

    # ------------------------------------------------------------------
    # Deferred loading
    # ------------------------------------------------------------------

    def request_file(self, path: str) -> FileHandle:
        """Queue a file load and return its handle without blocking."""
        handle = FileHandle(_normalize_path(path))
        with self._queue_lock:
            self._queue.append(handle)
            listeners = list(self._listeners)
        for fn in listeners:
            fn()
        return handle

    def add_pending_listener(self, fn: PendingListener) -> None:
        """Register a callable invoked every time a file load is queued."""
        with self._queue_lock:
            self._listeners.append(fn)

    def remove_pending_listener(self, fn: PendingListener) -> None:
        with self._queue_lock:
            if fn in self._listeners:
                self._listeners.remove(fn)


def _normalize_path(path: str) -> str:
    return path.strip().replace("\\", "/").lower()
