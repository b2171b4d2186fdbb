# Exception types for the data service
# src/gamedata/errors.py
"""
Error taxonomy:

- fatal-at-construction: CatalogNotFoundError (the main game data is missing)
- degraded-load:         RegionManifestError, OpcodeFileError
- soft-network:          RemoteManifestError (and urllib's own URLError)

The DataManager catches all of these at the boundary of each startup step.
"""

from __future__ import annotations

from catalog.loader import CatalogNotFoundError


class GameDataError(Exception):
    """Base class for data-service failures."""


class RegionManifestError(GameDataError):
    """Region manifest (server.json) is missing or malformed."""


class OpcodeFileError(GameDataError):
    """A local opcode table file is missing or malformed."""


class RemoteManifestError(GameDataError):
    """The remote opcode manifest could not be fetched or parsed."""


__all__ = [
    "CatalogNotFoundError",
    "GameDataError",
    "RegionManifestError",
    "OpcodeFileError",
    "RemoteManifestError",
]
