# AssetCatalog interface definition
# src/catalog/base.py

from __future__ import annotations

from typing import Any, Callable, Iterator, Optional, Protocol

from .schema import ClientLanguage, FileResource


PendingListener = Callable[[], None]


class Sheet(Protocol):
    """A single tabular sheet: rows addressed by integer id."""

    name: str

    def get_row(self, row_id: int) -> Optional[Any]:
        """Return the row object, or None if the id is unknown."""
        ...

    def __iter__(self) -> Iterator[Any]:
        ...

    def __len__(self) -> int:
        ...


class AssetCatalog(Protocol):
    """Abstract interface for the game-data repository the service wraps.

    The catalog owns the rows and files; callers mutate rows in place
    (region patches) and read them back through the same objects.
    """

    @property
    def data_path(self) -> str:
        """Location the catalog was opened from (for logging)."""
        ...

    def get_sheet(self, name: str, language: Optional[ClientLanguage] = None) -> Optional[Sheet]:
        """Return the named sheet in the given language, or None."""
        ...

    def get_file(self, path: str) -> Optional[FileResource]:
        """Return the raw file at `path`, or None if it does not exist."""
        ...

    def file_exists(self, path: str) -> bool:
        ...

    @property
    def has_pending_file_loads(self) -> bool:
        """True while queued file loads are waiting to be processed."""
        ...

    def process_file_handle_queue(self) -> None:
        """Drain the queue of pending file loads."""
        ...
