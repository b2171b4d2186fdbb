# tests/fakes/fake_catalog.py

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from catalog.memory import InMemoryCatalog
from catalog.schema import DataCenterRecord, RowRef, WorldRecord


def build_world_catalog(
    dc_ids: Iterable[int] = (101, 102, 103, 201),
    world_ids: Iterable[int] = (),
    world_dc: int = 0,
) -> InMemoryCatalog:
    """
    Catalog with a WorldDCGroupType row per dc id and a non-public World row
    per world id, all pointing at `world_dc`.
    """
    catalog = InMemoryCatalog()
    catalog.add_sheet(
        DataCenterRecord.sheet_name,
        [DataCenterRecord(row_id=i, name=f"dc-{i}", region=1) for i in dc_ids],
    )
    catalog.add_sheet(
        WorldRecord.sheet_name,
        [
            WorldRecord(
                row_id=i,
                name=f"world-{i}",
                is_public=False,
                data_center=RowRef(DataCenterRecord.sheet_name, world_dc),
            )
            for i in world_ids
        ],
    )
    return catalog


def snapshot_rows(catalog: InMemoryCatalog) -> Tuple[List[tuple], List[tuple]]:
    """Comparable copy of every datacenter/world row."""
    dcs = [
        (r.row_id, r.name, r.region)
        for r in catalog.get_sheet(DataCenterRecord.sheet_name)
    ]
    worlds = [
        (r.row_id, r.name, r.is_public, r.data_center.row_id if r.data_center else None)
        for r in catalog.get_sheet(WorldRecord.sheet_name)
    ]
    return dcs, worlds


class PollingOnlyCatalog:
    """
    Minimal AssetCatalog without listener support, so the pump has to poll.

    Loads are just counters: `enqueue()` adds one, a drain clears them all.
    """

    def __init__(self) -> None:
        self.pending = 0
        self.drained = 0
        self.fail_next = False

    @property
    def data_path(self) -> str:
        return "<polling>"

    def get_sheet(self, name, language=None):
        return None

    def get_file(self, path):
        return None

    def file_exists(self, path) -> bool:
        return False

    @property
    def has_pending_file_loads(self) -> bool:
        return self.pending > 0

    def enqueue(self, n: int = 1) -> None:
        self.pending += n

    def process_file_handle_queue(self) -> None:
        if self.fail_next:
            self.fail_next = False
            raise RuntimeError("drain exploded")
        self.drained += self.pending
        self.pending = 0
