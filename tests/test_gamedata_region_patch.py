# tests/test_gamedata_region_patch.py
"""
Tests for gamedata.regions.

Covers:
- manifest parsing (file and error paths)
- datacenter/world rewrites for mapped codes
- unmapped codes and missing rows leave everything else untouched
- the embedded CN table
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from catalog.schema import ClientLanguage, DataCenterRecord, WorldRecord
from gamedata.errors import RegionManifestError
from gamedata.regions import (
    BUILTIN_REGION_MANIFEST,
    CUSTOM_REGION,
    DATA_CENTER_ID_MAP,
    DataCenterEntry,
    WorldEntry,
    apply_builtin_region_overrides,
    apply_region_overrides,
    apply_region_overrides_from_file,
    load_region_manifest,
    parse_region_manifest,
)

from fakes.fake_catalog import build_world_catalog, snapshot_rows


def _dc_row(catalog, dc_id):
    return catalog.get_sheet(DataCenterRecord.sheet_name).get_row(dc_id)


def _world_row(catalog, world_id):
    return catalog.get_sheet(WorldRecord.sheet_name).get_row(world_id)


def test_example_manifest_patches_datacenter_and_world(tmp_path: Path, write_json):
    path = write_json(
        tmp_path / "server.json",
        [{"dc": 1, "name_chs": "测试", "worlds": [{"id": 1042, "name_chs": "拉诺西亚"}]}],
    )
    catalog = build_world_catalog(world_ids=[1042])

    result = apply_region_overrides_from_file(path, catalog)

    dc = _dc_row(catalog, 101)
    assert dc.name == "测试"
    assert dc.region == 5

    world = _world_row(catalog, 1042)
    assert world.is_public is True
    assert world.data_center.row_id == 101
    assert world.data_center.sheet == "WorldDCGroupType"
    assert world.data_center.language is ClientLanguage.CHINESE_SIMPLIFIED
    assert world.data_center.resolve(catalog) is dc

    assert result.patched_data_centers == [101]
    assert result.patched_worlds == [1042]


@pytest.mark.parametrize("dc_code,dc_id", sorted(DATA_CENTER_ID_MAP.items()))
def test_every_mapped_code_renames_and_relinks(dc_code: int, dc_id: int):
    catalog = build_world_catalog(world_ids=[2000, 2001])
    manifest = (
        DataCenterEntry(
            name=f"name-{dc_code}",
            dc=dc_code,
            worlds=(WorldEntry(2000, "a"), WorldEntry(2001, "b")),
        ),
    )

    apply_region_overrides(manifest, catalog)

    dc = _dc_row(catalog, dc_id)
    assert dc.name == f"name-{dc_code}"
    assert dc.region == CUSTOM_REGION
    for wid in (2000, 2001):
        world = _world_row(catalog, wid)
        assert world.is_public is True
        assert world.data_center.row_id == dc_id


def test_unmapped_code_mutates_nothing():
    catalog = build_world_catalog(world_ids=[1042, 1043])
    before = snapshot_rows(catalog)

    result = apply_region_overrides(
        (DataCenterEntry(name="nope", dc=99, worlds=(WorldEntry(1042, "x"),)),),
        catalog,
    )

    assert snapshot_rows(catalog) == before
    assert result.skipped_dc_codes == [99]
    assert result.patched_worlds == []


def test_missing_world_is_skipped_and_others_still_patched(caplog):
    catalog = build_world_catalog(world_ids=[1042])
    manifest = (
        DataCenterEntry(
            name="陆行鸟",
            dc=1,
            worlds=(WorldEntry(9999, "ghost"), WorldEntry(1042, "拉诺西亚")),
        ),
    )

    with caplog.at_level("WARNING"):
        result = apply_region_overrides(manifest, catalog)

    assert result.missing_worlds == [9999]
    assert result.patched_worlds == [1042]
    assert _world_row(catalog, 1042).is_public is True
    assert any("9999" in rec.getMessage() for rec in caplog.records)


def test_missing_datacenter_row_skips_its_worlds():
    catalog = build_world_catalog(dc_ids=[102], world_ids=[1042])
    before = snapshot_rows(catalog)

    result = apply_region_overrides(
        (DataCenterEntry(name="陆行鸟", dc=1, worlds=(WorldEntry(1042, "拉诺西亚"),)),),
        catalog,
    )

    assert result.missing_data_centers == [101]
    assert snapshot_rows(catalog) == before


def test_catalog_without_world_sheets_raises():
    from catalog.memory import InMemoryCatalog

    with pytest.raises(RegionManifestError):
        apply_region_overrides(BUILTIN_REGION_MANIFEST, InMemoryCatalog())


def test_builtin_manifest_matches_file_variant(tmp_path: Path, write_json):
    world_ids = [w.world_id for dc in BUILTIN_REGION_MANIFEST for w in dc.worlds]
    payload = [
        {
            "name_chs": dc.name,
            "dc": dc.dc,
            "worlds": [{"name_chs": w.name, "id": w.world_id} for w in dc.worlds],
        }
        for dc in BUILTIN_REGION_MANIFEST
    ]
    path = write_json(tmp_path / "server.json", payload)

    from_file = build_world_catalog(world_ids=world_ids)
    builtin = build_world_catalog(world_ids=world_ids)

    apply_region_overrides_from_file(path, from_file)
    result = apply_builtin_region_overrides(builtin)

    assert snapshot_rows(from_file) == snapshot_rows(builtin)
    assert len(result.patched_worlds) == len(world_ids) == 31
    assert sorted(result.patched_data_centers) == [101, 102, 103, 201]


def test_load_region_manifest_missing_file(tmp_path: Path):
    with pytest.raises(RegionManifestError):
        load_region_manifest(tmp_path / "server.json")


def test_load_region_manifest_invalid_json(tmp_path: Path):
    path = tmp_path / "server.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(RegionManifestError):
        load_region_manifest(path)


def test_load_region_manifest_undecodable_file(tmp_path: Path):
    path = tmp_path / "server.json"
    path.write_bytes(b'[{"name_chs": "\xff", "dc": 1, "worlds": []}]')
    with pytest.raises(RegionManifestError):
        load_region_manifest(path)


def test_load_region_manifest_accepts_utf8_bom(tmp_path: Path):
    path = tmp_path / "server.json"
    path.write_bytes(b"\xef\xbb\xbf" + json.dumps([{"name_chs": "x", "dc": 1, "worlds": []}]).encode("utf-8"))

    manifest = load_region_manifest(path)
    assert [e.dc for e in manifest] == [1]


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {"dc": 1},
        [{"dc": 1}],                                  # no name_chs
        [{"name_chs": "x", "dc": "one"}],             # non-numeric dc
        [{"name_chs": "x", "dc": 1, "worlds": [{}]}],  # world without id
    ],
)
def test_parse_region_manifest_rejects_bad_shapes(payload):
    with pytest.raises(RegionManifestError):
        parse_region_manifest(payload)


def test_parse_region_manifest_keeps_order_and_allows_no_worlds():
    manifest = parse_region_manifest([
        {"name_chs": "b", "dc": 6},
        {"name_chs": "a", "dc": 1, "worlds": [{"id": 1042, "name_chs": "w"}]},
    ])

    assert [e.dc for e in manifest] == [6, 1]
    assert manifest[0].worlds == ()
    assert manifest[1].worlds == (WorldEntry(1042, "w"),)
