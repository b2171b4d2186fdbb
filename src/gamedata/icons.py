# Icon path resolution
# src/gamedata/icons.py

from __future__ import annotations

from typing import Optional

from catalog.schema import ClientLanguage

ICON_FILE_FORMAT = "ui/icon/{folder:03d}000/{type}{icon_id:06d}.tex"
HIGH_RESOLUTION_ICON_FILE_FORMAT = "ui/icon/{folder:03d}000/{type}{icon_id:06d}_hr1.tex"

HQ_ICON_TYPE = "hq/"


def normalize_icon_type(icon_type: Optional[str]) -> str:
    """None -> ""; "hq" -> "hq/"; "hq/" stays."""
    icon_type = icon_type or ""
    if icon_type and not icon_type.endswith("/"):
        icon_type += "/"
    return icon_type


def icon_path(icon_id: int, icon_type: Optional[str] = None, high_resolution: bool = False) -> str:
    """
    Build the repository path of an icon.

    >>> icon_path(65001)
    'ui/icon/065000/065001.tex'
    >>> icon_path(20650, "hq", high_resolution=True)
    'ui/icon/020000/hq/020650_hr1.tex'
    """
    if icon_id < 0:
        raise ValueError(f"Icon id must be non-negative, got {icon_id}")
    fmt = HIGH_RESOLUTION_ICON_FILE_FORMAT if high_resolution else ICON_FILE_FORMAT
    return fmt.format(folder=icon_id // 1000, type=normalize_icon_type(icon_type), icon_id=icon_id)


def language_icon_type(language: ClientLanguage | str) -> str:
    """Icon type prefix for a language; raises ValueError for unknown languages."""
    return ClientLanguage.parse(language).icon_prefix
