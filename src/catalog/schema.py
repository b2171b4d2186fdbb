# Row, reference, and file types served by an asset catalog
# src/catalog/schema.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional


# ---------------------------------------------------------------------------
# Languages
# ---------------------------------------------------------------------------

class ClientLanguage(Enum):
    """Client languages that sheets and icons can be requested in."""

    JAPANESE = "ja"
    ENGLISH = "en"
    GERMAN = "de"
    FRENCH = "fr"
    CHINESE_SIMPLIFIED = "chs"

    @property
    def icon_prefix(self) -> str:
        """Sub-directory prefix used by localized icon paths ("en/", "chs/")."""
        return f"{self.value}/"

    @classmethod
    def parse(cls, value: "ClientLanguage | str") -> "ClientLanguage":
        """
        Accept either an enum member, its name ("ENGLISH") or its code ("en").
        """
        if isinstance(value, ClientLanguage):
            return value
        text = str(value).strip()
        for member in cls:
            if text.lower() in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown client language: {value!r}")


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------

@dataclass
class RowRef:
    """
    Deferred reference to a row in another sheet.

    - sheet: sheet name the row lives in ("WorldDCGroupType")
    - row_id: id of the referenced row
    - language: language the row should be resolved in
    """
    sheet: str
    row_id: int
    language: Optional[ClientLanguage] = None

    def resolve(self, catalog: Any) -> Any:
        """Look the referenced row up in `catalog`; None if it is missing."""
        sheet = catalog.get_sheet(self.sheet, self.language)
        if sheet is None:
            return None
        return sheet.get_row(self.row_id)


@dataclass
class ExcelRow:
    """Generic sheet row: id plus the raw column values."""
    row_id: int
    fields: Dict[str, Any] = field(default_factory=dict)

    sheet_name: ClassVar[Optional[str]] = None


@dataclass
class DataCenterRecord:
    """
    One datacenter group (sheet WorldDCGroupType).

    - row_id: internal datacenter id (101, 102, ...)
    - name: display name
    - region: region code; custom regions use a sentinel value
    """
    row_id: int
    name: str = ""
    region: int = 0

    sheet_name: ClassVar[str] = "WorldDCGroupType"


@dataclass
class WorldRecord:
    """
    One game world (sheet World).

    - row_id: world id (1042, ...)
    - name: display name
    - is_public: whether the world is listed to players
    - data_center: reference to the owning DataCenterRecord
    """
    row_id: int
    name: str = ""
    is_public: bool = False
    data_center: Optional[RowRef] = None

    sheet_name: ClassVar[str] = "World"


@dataclass(frozen=True)
class FileResource:
    """Raw file blob as stored in the catalog."""
    path: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)
