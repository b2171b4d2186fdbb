# gamedata package
# src/gamedata/__init__.py

"""
Game data service façade.

Consumers normally need only:

- DataManager            -> sheets, files, icons, opcode tables, ready flags
- get_data_manager()     -> process-wide DataManager built from config
- OpcodeStore / merge_opcodes, apply_region_overrides -> the pieces it composes
"""

from __future__ import annotations

from .cache import get_data_manager
from .errors import (
    CatalogNotFoundError,
    GameDataError,
    OpcodeFileError,
    RegionManifestError,
    RemoteManifestError,
)
from .manager import DataManager
from .opcodes import (
    CLIENT_OPCODE_ALIASES,
    SERVER_OPCODE_ALIASES,
    OpcodeStore,
    OpcodeTable,
    load_opcode_file,
    merge_opcodes,
)
from .pump import PendingLoadPump
from .regions import (
    BUILTIN_REGION_MANIFEST,
    CUSTOM_REGION,
    DATA_CENTER_ID_MAP,
    RegionPatchResult,
    apply_builtin_region_overrides,
    apply_region_overrides,
    apply_region_overrides_from_file,
    load_region_manifest,
)
from .remote import RemoteOpcodeClient, parse_remote_manifest

__all__ = [
    "DataManager",
    "get_data_manager",
    "CatalogNotFoundError",
    "GameDataError",
    "OpcodeFileError",
    "RegionManifestError",
    "RemoteManifestError",
    "CLIENT_OPCODE_ALIASES",
    "SERVER_OPCODE_ALIASES",
    "OpcodeStore",
    "OpcodeTable",
    "load_opcode_file",
    "merge_opcodes",
    "PendingLoadPump",
    "BUILTIN_REGION_MANIFEST",
    "CUSTOM_REGION",
    "DATA_CENTER_ID_MAP",
    "RegionPatchResult",
    "apply_builtin_region_overrides",
    "apply_region_overrides",
    "apply_region_overrides_from_file",
    "load_region_manifest",
    "RemoteOpcodeClient",
    "parse_remote_manifest",
]
