# Remote opcode manifest client
# src/gamedata/remote.py
"""
Fetch and parse the community-maintained opcode manifest.

Payload shape (JSON array):

    [
      {
        "version": "2023.05.01.0000.0000",
        "region": "CN",
        "lists": {
          "ServerZoneIpcType": [{"name": "ActorControlSelf", "opcode": 418}, ...],
          "ClientZoneIpcType": [{"name": "...", "opcode": ...}, ...]
        }
      },
      ...
    ]

The transport is plain urllib with an explicit timeout and a bounded number of
retries with exponential backoff. Parse errors and 4xx responses are never
retried.
"""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .errors import RemoteManifestError

log = logging.getLogger(__name__)

DEFAULT_OPCODES_URL = "https://raw.githubusercontent.com/karashiiro/FFXIVOpcodes/master/opcodes.min.json"

SERVER_LIST_NAME = "ServerZoneIpcType"
CLIENT_LIST_NAME = "ClientZoneIpcType"

MAX_OPCODE = 0xFFFF


@dataclass(frozen=True)
class RemoteOpcodeEntry:
    """
    One region block of the remote manifest.

    - version: game version string the opcodes belong to
    - region: region tag ("Global", "CN", "KR")
    - lists: list name -> {message name: opcode}
    """
    version: str
    region: str
    lists: Mapping[str, Mapping[str, int]] = field(default_factory=dict)


RemoteOpcodeManifest = Tuple[RemoteOpcodeEntry, ...]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _parse_opcode_list(list_name: str, items: Any) -> Dict[str, int]:
    if not isinstance(items, list):
        raise RemoteManifestError(f"Opcode list {list_name!r} must be an array.")
    out: Dict[str, int] = {}
    for item in items:
        if not isinstance(item, dict):
            raise RemoteManifestError(f"Opcode list {list_name!r} contains a non-object item.")
        name = item.get("name")
        opcode = item.get("opcode")
        if not isinstance(name, str) or isinstance(opcode, bool) or not isinstance(opcode, int):
            raise RemoteManifestError(f"Malformed opcode item in {list_name!r}: {item!r}")
        if not 0 <= opcode <= MAX_OPCODE:
            log.warning("Dropping %s.%s: opcode %d out of range", list_name, name, opcode)
            continue
        out[name] = opcode
    return out


def parse_remote_manifest(data: Any) -> RemoteOpcodeManifest:
    """Validate decoded JSON and convert it to a RemoteOpcodeManifest."""
    if not isinstance(data, list):
        raise RemoteManifestError("Remote opcode manifest must be a JSON array.")

    entries: List[RemoteOpcodeEntry] = []
    for row in data:
        if not isinstance(row, dict):
            raise RemoteManifestError("Remote opcode manifest rows must be objects.")
        region = row.get("region")
        if not isinstance(region, str):
            raise RemoteManifestError(f"Remote opcode row without a region: {row!r}")
        lists_raw = row.get("lists", {})
        if not isinstance(lists_raw, dict):
            raise RemoteManifestError(f"Remote opcode row for {region} has non-object lists.")
        lists = {name: _parse_opcode_list(name, items) for name, items in lists_raw.items()}
        entries.append(
            RemoteOpcodeEntry(
                version=str(row.get("version", "")),
                region=region,
                lists=lists,
            )
        )
    return tuple(entries)


def find_region_entry(manifest: RemoteOpcodeManifest, region: str) -> Optional[RemoteOpcodeEntry]:
    """First entry whose region tag equals `region`, else None."""
    for entry in manifest:
        if entry.region == region:
            return entry
    return None


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class RemoteOpcodeClient:
    """
    HTTP client for the opcode manifest.

    Calling the instance fetches and parses the manifest, so it can be handed
    straight to OpcodeStore.refresh() as its `fetch` callable.
    """

    def __init__(
        self,
        url: str = DEFAULT_OPCODES_URL,
        timeout: float = 10.0,
        retries: int = 2,
        backoff: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.retries = max(0, int(retries))
        self.backoff = max(0.0, float(backoff))
        self._sleep = sleep

    def __call__(self) -> RemoteOpcodeManifest:
        return self.fetch()

    def fetch(self) -> RemoteOpcodeManifest:
        """
        GET the manifest, retrying transport errors and 5xx responses.

        Raises RemoteManifestError once all attempts failed or the payload is
        malformed.
        """
        raw = self._get_with_retries()
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RemoteManifestError(f"Remote opcode manifest is not valid JSON: {exc}") from exc
        return parse_remote_manifest(data)

    def _get_with_retries(self) -> bytes:
        attempts = self.retries + 1
        last_exc: Optional[BaseException] = None
        for attempt in range(attempts):
            try:
                return self._get()
            except urllib.error.HTTPError as exc:
                # only server-side errors are worth another attempt
                if exc.code < 500:
                    raise RemoteManifestError(f"Could not fetch {self.url}: HTTP {exc.code}") from exc
                last_exc = exc
            except (urllib.error.URLError, TimeoutError, OSError) as exc:
                last_exc = exc

            log.warning(
                "Opcode manifest fetch failed (attempt %d/%d): %r",
                attempt + 1,
                attempts,
                last_exc,
            )
            if attempt + 1 < attempts and self.backoff > 0:
                self._sleep(self.backoff * (2 ** attempt))
        raise RemoteManifestError(f"Could not fetch {self.url}: {last_exc!r}") from last_exc

    def _get(self) -> bytes:
        req = urllib.request.Request(
            self.url,
            headers={"User-Agent": "gamedata-service", "Accept": "application/json"},
        )
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            return resp.read()
