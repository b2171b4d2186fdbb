# catalog package
# src/catalog/__init__.py

"""
Asset catalog: the game-data repository the data service wraps.

- AssetCatalog / Sheet   -> protocol the service depends on
- InMemoryCatalog        -> dict-backed implementation with a pending-load queue
- load_catalog(path)     -> open a game-data directory as an InMemoryCatalog
"""

from __future__ import annotations

from .base import AssetCatalog, Sheet
from .loader import CatalogNotFoundError, load_catalog
from .memory import FileHandle, InMemoryCatalog, SheetTable
from .schema import (
    ClientLanguage,
    DataCenterRecord,
    ExcelRow,
    FileResource,
    RowRef,
    WorldRecord,
)

__all__ = [
    "AssetCatalog",
    "Sheet",
    "CatalogNotFoundError",
    "load_catalog",
    "FileHandle",
    "InMemoryCatalog",
    "SheetTable",
    "ClientLanguage",
    "DataCenterRecord",
    "ExcelRow",
    "FileResource",
    "RowRef",
    "WorldRecord",
]
