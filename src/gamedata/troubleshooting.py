# Launcher troubleshooting blob
# src/gamedata/troubleshooting.py

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Optional

log = logging.getLogger(__name__)


class IndexIntegrityResult(Enum):
    """Outcome of the launcher's game-file index check (serialized by name or ordinal)."""
    FAILED = "Failed"
    EXCEPTION = "Exception"
    NO_GAME = "NoGame"
    REFERENCE_NOT_FOUND = "ReferenceNotFound"
    REFERENCE_FETCH_FAILURE = "ReferenceFetchFailure"
    SUCCESS = "Success"


_ORDINALS = list(IndexIntegrityResult)


def parse_index_integrity(value: Any) -> Optional[IndexIntegrityResult]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return _ORDINALS[value] if 0 <= value < len(_ORDINALS) else None
    if isinstance(value, str):
        for member in IndexIntegrityResult:
            if value.lower() == member.value.lower():
                return member
    return None


def has_modified_game_data(troubleshooting_pack: Optional[str]) -> bool:
    """
    True if the launcher reported a failed (or crashed) index integrity check.

    Missing or unparsable data counts as unmodified.
    """
    if not troubleshooting_pack:
        return False
    try:
        info = json.loads(troubleshooting_pack)
    except (TypeError, ValueError):
        log.debug("Ignoring unparsable troubleshooting pack")
        return False
    if not isinstance(info, dict):
        return False
    result = parse_index_integrity(info.get("IndexIntegrity"))
    return result in (IndexIntegrityResult.FAILED, IndexIntegrityResult.EXCEPTION)
