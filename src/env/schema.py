# DataServiceProfile and related dataclasses
# src/env/schema.py

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from catalog.schema import ClientLanguage


PATCH_MODES = ("builtin", "manifest", "off")
KNOWN_REGIONS = ("Global", "CN", "KR")


@dataclass
class RemoteOpcodeConfig:
    """Where and how to fetch the remote opcode manifest."""
    enabled: bool = True
    url: str = "https://raw.githubusercontent.com/karashiiro/FFXIVOpcodes/master/opcodes.min.json"
    region: str = "CN"              # region tag selected from the manifest
    timeout_seconds: float = 10.0
    retries: int = 2
    backoff_seconds: float = 0.5


@dataclass
class DataServiceProfile:
    """Resolved configuration for one data service profile."""
    name: str
    asset_dir: Path                 # contains UIRes/ (opcode tables, server.json)
    game_data_path: Path            # catalog directory (sheets/, files/)
    language: ClientLanguage = ClientLanguage.CHINESE_SIMPLIFIED
    patch_mode: str = "builtin"     # "builtin", "manifest" or "off"
    pump_idle_interval_ms: float = 5.0
    troubleshooting_pack: Optional[str] = None  # launcher JSON blob, if any
    remote: RemoteOpcodeConfig = field(default_factory=RemoteOpcodeConfig)

    @property
    def uires_dir(self) -> Path:
        return self.asset_dir / "UIRes"

    @property
    def server_manifest_path(self) -> Path:
        return self.uires_dir / "server.json"
