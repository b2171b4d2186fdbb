# Directory-backed catalog loader
# src/catalog/loader.py
"""
Open a game-data directory as an InMemoryCatalog.

Expected layout under `data_path`:

    sheets/
      World.json                 # default-language rows
      World.chs.json             # optional per-language copy
      WorldDCGroupType.json
      <AnySheet>.json            # loaded as generic ExcelRow
    files/
      ui/icon/000000/000001.tex  # raw files, addressed by relative path

Each sheet file is a JSON array of objects carrying an integer "id".
Sheets are parsed eagerly; files are read lazily on first access.

This is deliberately boring plumbing: the real repository format belongs to
the external game-data library.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .memory import InMemoryCatalog
from .schema import ClientLanguage, DataCenterRecord, ExcelRow, RowRef, WorldRecord

log = logging.getLogger(__name__)


class CatalogNotFoundError(FileNotFoundError):
    """Raised when the main game-data directory cannot be located."""


# ---------------------------------------------------------------------------
# Row parsers
# ---------------------------------------------------------------------------

def _parse_world(raw: Dict[str, Any]) -> WorldRecord:
    dc = raw.get("data_center")
    return WorldRecord(
        row_id=int(raw["id"]),
        name=str(raw.get("name", "")),
        is_public=bool(raw.get("is_public", False)),
        data_center=RowRef(DataCenterRecord.sheet_name, int(dc)) if dc is not None else None,
    )


def _parse_data_center(raw: Dict[str, Any]) -> DataCenterRecord:
    return DataCenterRecord(
        row_id=int(raw["id"]),
        name=str(raw.get("name", "")),
        region=int(raw.get("region", 0)),
    )


def _parse_generic(raw: Dict[str, Any]) -> ExcelRow:
    fields = {k: v for k, v in raw.items() if k != "id"}
    return ExcelRow(row_id=int(raw["id"]), fields=fields)


ROW_PARSERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    WorldRecord.sheet_name: _parse_world,
    DataCenterRecord.sheet_name: _parse_data_center,
}


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _split_sheet_filename(path: Path) -> tuple[str, Optional[ClientLanguage]]:
    """
    "World.json" -> ("World", None); "World.chs.json" -> ("World", CHINESE_SIMPLIFIED).
    """
    stem = path.stem
    if "." in stem:
        name, lang = stem.rsplit(".", 1)
        return name, ClientLanguage.parse(lang)
    return stem, None


def _load_sheet_rows(path: Path, sheet_name: str) -> List[Any]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Sheet file {path} must contain a JSON array of rows.")
    parser = ROW_PARSERS.get(sheet_name, _parse_generic)
    return [parser(raw) for raw in data]


def _make_file_source(files_root: Path) -> Callable[[str], Optional[bytes]]:
    # Index on open so lookups are case-insensitive like the game repository.
    index: Dict[str, Path] = {}
    if files_root.is_dir():
        for p in files_root.rglob("*"):
            if p.is_file():
                index[p.relative_to(files_root).as_posix().lower()] = p

    def _read(key: str) -> Optional[bytes]:
        p = index.get(key)
        if p is None:
            return None
        return p.read_bytes()

    return _read


def load_catalog(data_path: Path | str) -> InMemoryCatalog:
    """
    Open `data_path` and return a populated catalog.

    Raises CatalogNotFoundError if the directory (or its sheets/ folder) is
    missing. Malformed sheet files propagate their ValueError/JSONDecodeError.
    """
    root = Path(data_path)
    sheets_dir = root / "sheets"
    if not root.is_dir() or not sheets_dir.is_dir():
        raise CatalogNotFoundError(f"Game data not found at {root}")

    catalog = InMemoryCatalog(
        data_path=str(root),
        file_source=_make_file_source(root / "files"),
    )

    for path in sorted(sheets_dir.glob("*.json")):
        sheet_name, language = _split_sheet_filename(path)
        rows = _load_sheet_rows(path, sheet_name)
        catalog.add_sheet(sheet_name, rows, language=language)
        log.debug("Loaded sheet %s (%s): %d rows", sheet_name, language, len(rows))

    return catalog
