# Region corrections for datacenter/world rows
# src/gamedata/regions.py
"""
Region patcher.

The shipped World / WorldDCGroupType sheets describe the global deployment.
Regional clients need some of those rows rewritten in memory:

  - the datacenter row gets the regional name and a custom region code
  - each world listed under it becomes public and points at that datacenter

The list of datacenters/worlds comes either from `UIRes/server.json` next to
the assets (`apply_region_overrides_from_file`) or from the table embedded
below (`apply_builtin_region_overrides`). Both run the same transform.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from catalog.base import AssetCatalog
from catalog.schema import ClientLanguage, DataCenterRecord, RowRef, WorldRecord

from .errors import RegionManifestError

log = logging.getLogger(__name__)


# External datacenter code (server.json "dc") -> internal WorldDCGroupType id.
DATA_CENTER_ID_MAP: Dict[int, int] = {
    1: 101,
    6: 102,
    7: 103,
    8: 201,
}

# Region code written to every patched datacenter row.
CUSTOM_REGION = 5


# ---------------------------------------------------------------------------
# Manifest types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WorldEntry:
    world_id: int
    name: str


@dataclass(frozen=True)
class DataCenterEntry:
    """
    One datacenter block of the region manifest.

    - name: regional display name
    - dc: external datacenter code, translated through DATA_CENTER_ID_MAP
    - worlds: worlds that belong to it
    """
    name: str
    dc: int
    worlds: Tuple[WorldEntry, ...] = ()


RegionManifest = Tuple[DataCenterEntry, ...]


@dataclass
class RegionPatchResult:
    """What a patch run touched; used for logging and monitoring payloads."""
    patched_data_centers: List[int] = field(default_factory=list)
    patched_worlds: List[int] = field(default_factory=list)
    skipped_dc_codes: List[int] = field(default_factory=list)
    missing_data_centers: List[int] = field(default_factory=list)
    missing_worlds: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patched_data_centers": list(self.patched_data_centers),
            "patched_worlds": list(self.patched_worlds),
            "skipped_dc_codes": list(self.skipped_dc_codes),
            "missing_data_centers": list(self.missing_data_centers),
            "missing_worlds": list(self.missing_worlds),
        }


# ---------------------------------------------------------------------------
# Manifest parsing
# ---------------------------------------------------------------------------

def parse_region_manifest(data: Any) -> RegionManifest:
    """
    Convert decoded server.json content into a RegionManifest.

    Expected shape:
        [{"name_chs": "...", "dc": 1, "worlds": [{"name_chs": "...", "id": 1042}]}]
    """
    if data is None:
        raise RegionManifestError("Couldn't deserialize servers manifest.")
    if not isinstance(data, list):
        raise RegionManifestError("Servers manifest must be a JSON array.")

    entries: List[DataCenterEntry] = []
    try:
        for raw in data:
            worlds = tuple(
                WorldEntry(world_id=int(w["id"]), name=str(w.get("name_chs", "")))
                for w in raw.get("worlds") or []
            )
            entries.append(
                DataCenterEntry(
                    name=str(raw["name_chs"]),
                    dc=int(raw["dc"]),
                    worlds=worlds,
                )
            )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise RegionManifestError(f"Malformed servers manifest entry: {exc!r}") from exc

    return tuple(entries)


def load_region_manifest(path: Path | str) -> RegionManifest:
    """Read and parse server.json. Raises RegionManifestError on any failure."""
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except FileNotFoundError as exc:
        raise RegionManifestError(f"Servers manifest not found: {p}") from exc
    except (OSError, ValueError) as exc:
        raise RegionManifestError(f"Couldn't read servers manifest {p}: {exc}") from exc
    return parse_region_manifest(data)


# ---------------------------------------------------------------------------
# Patching
# ---------------------------------------------------------------------------

def apply_region_overrides(
    manifest: RegionManifest,
    catalog: AssetCatalog,
    language: ClientLanguage = ClientLanguage.CHINESE_SIMPLIFIED,
) -> RegionPatchResult:
    """
    Rewrite datacenter and world rows in `catalog` according to `manifest`.

    Entries whose dc code has no mapping are skipped without touching
    anything. A mapped datacenter missing from the catalog is skipped along
    with its worlds; a missing world is skipped on its own. Both are logged.
    """
    result = RegionPatchResult()

    dc_sheet = catalog.get_sheet(DataCenterRecord.sheet_name, language)
    world_sheet = catalog.get_sheet(WorldRecord.sheet_name, language)
    if dc_sheet is None or world_sheet is None:
        raise RegionManifestError(
            "Catalog is missing the World/WorldDCGroupType sheets needed for region patching."
        )

    for entry in manifest:
        dc_id = DATA_CENTER_ID_MAP.get(entry.dc)
        if dc_id is None:
            result.skipped_dc_codes.append(entry.dc)
            continue

        dc_row = dc_sheet.get_row(dc_id)
        if dc_row is None:
            log.warning("Datacenter %d (code %d) not in catalog; skipping %s", dc_id, entry.dc, entry.name)
            result.missing_data_centers.append(dc_id)
            continue

        dc_row.name = entry.name
        dc_row.region = CUSTOM_REGION
        result.patched_data_centers.append(dc_id)

        for world in entry.worlds:
            world_row = world_sheet.get_row(world.world_id)
            if world_row is None:
                log.warning("World %d (%s) not in catalog; skipping", world.world_id, world.name)
                result.missing_worlds.append(world.world_id)
                continue
            world_row.is_public = True
            world_row.data_center = RowRef(DataCenterRecord.sheet_name, dc_id, language)
            result.patched_worlds.append(world.world_id)

    log.info(
        "Region overrides applied: %d datacenters, %d worlds",
        len(result.patched_data_centers),
        len(result.patched_worlds),
    )
    return result


def apply_region_overrides_from_file(
    path: Path | str,
    catalog: AssetCatalog,
    language: ClientLanguage = ClientLanguage.CHINESE_SIMPLIFIED,
) -> RegionPatchResult:
    """Load server.json from `path` and apply it."""
    return apply_region_overrides(load_region_manifest(path), catalog, language)


# ---------------------------------------------------------------------------
# Embedded table
# ---------------------------------------------------------------------------

def _dc(name: str, dc: int, worlds: List[Tuple[int, str]]) -> DataCenterEntry:
    return DataCenterEntry(
        name=name,
        dc=dc,
        worlds=tuple(WorldEntry(world_id=wid, name=wname) for wid, wname in worlds),
    )


BUILTIN_REGION_MANIFEST: RegionManifest = (
    _dc("陆行鸟", 1, [
        (1175, "晨曦王座"),
        (1174, "沃仙曦染"),
        (1173, "宇宙和音"),
        (1167, "红玉海"),
        (1060, "萌芽池"),
        (1081, "神意之地"),
        (1044, "幻影群岛"),
        (1042, "拉诺西亚"),
    ]),
    _dc("莫古力", 6, [
        (1121, "拂晓之间"),
        (1166, "龙巢神殿"),
        (1113, "旅人栈桥"),
        (1076, "白金幻象"),
        (1176, "梦羽宝境"),
        (1171, "神拳痕"),
        (1170, "潮风亭"),
        (1172, "白银乡"),
    ]),
    _dc("猫小胖", 7, [
        (1179, "琥珀原"),
        (1178, "柔风海湾"),
        (1177, "海猫茶屋"),
        (1169, "延夏"),
        (1106, "静语庄园"),
        (1045, "摩杜纳"),
        (1043, "紫水栈桥"),
    ]),
    _dc("豆豆柴", 8, [
        (1201, "红茶川"),
        (1186, "伊修加德"),
        (1180, "太阳海岸"),
        (1183, "银泪湖"),
        (1192, "水晶塔"),
        (1202, "萨雷安"),
        (1203, "加雷马"),
        (1200, "亚马乌罗提"),
    ]),
)


def apply_builtin_region_overrides(
    catalog: AssetCatalog,
    language: ClientLanguage = ClientLanguage.CHINESE_SIMPLIFIED,
) -> RegionPatchResult:
    """Apply the embedded CN datacenter table; used when no server.json is shipped."""
    return apply_region_overrides(BUILTIN_REGION_MANIFEST, catalog, language)
