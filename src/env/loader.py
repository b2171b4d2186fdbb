from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from catalog.schema import ClientLanguage

from .schema import KNOWN_REGIONS, PATCH_MODES, DataServiceProfile, RemoteOpcodeConfig


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_NAME = "data_service.yaml"


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML config file and require a mapping at the top."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _select_profile(cfg: Dict[str, Any], override: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
    """Return (active_profile_name, active_profile_mapping)."""
    profile_name = override or cfg.get("profile")
    if not profile_name:
        raise ValueError("data_service.yaml must define a 'profile' key.")
    profiles = cfg.get("profiles")
    if not isinstance(profiles, dict):
        raise ValueError("data_service.yaml must define a 'profiles' mapping.")
    if profile_name not in profiles:
        raise KeyError(f"Profile '{profile_name}' not found in data_service.yaml profiles.")
    return profile_name, profiles[profile_name] or {}


def _resolve_path(value: Any, base_dir: Path) -> Path:
    p = Path(str(value)).expanduser()
    if not p.is_absolute():
        p = base_dir / p
    return p


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def profile_from_mapping(
    cfg: Dict[str, Any],
    profile: Optional[str] = None,
    base_dir: Path = PROJECT_ROOT,
) -> DataServiceProfile:
    """Resolve a DataServiceProfile from an already-parsed config mapping."""
    name, raw = _select_profile(cfg, profile)

    for key in ("asset_dir", "game_data_path"):
        if key not in raw:
            raise KeyError(f"Profile '{name}' is missing required key '{key}'.")

    remote_raw = raw.get("remote") or {}
    defaults = RemoteOpcodeConfig()
    remote = RemoteOpcodeConfig(
        enabled=bool(remote_raw.get("enabled", defaults.enabled)),
        url=str(remote_raw.get("url", defaults.url)),
        region=str(remote_raw.get("region", defaults.region)),
        timeout_seconds=float(remote_raw.get("timeout_seconds", defaults.timeout_seconds)),
        retries=int(remote_raw.get("retries", defaults.retries)),
        backoff_seconds=float(remote_raw.get("backoff_seconds", defaults.backoff_seconds)),
    )

    profile_obj = DataServiceProfile(
        name=name,
        asset_dir=_resolve_path(raw["asset_dir"], base_dir),
        game_data_path=_resolve_path(raw["game_data_path"], base_dir),
        language=ClientLanguage.parse(raw.get("language", "chs")),
        patch_mode=str(raw.get("patch_mode", "builtin")),
        pump_idle_interval_ms=float(raw.get("pump_idle_interval_ms", 5.0)),
        troubleshooting_pack=raw.get("troubleshooting_pack"),
        remote=remote,
    )

    _validate_profile(profile_obj)
    return profile_obj


def load_data_profile(
    path: Path | str | None = None,
    profile: Optional[str] = None,
) -> DataServiceProfile:
    """Main entry point: returns the active, fully resolved DataServiceProfile."""
    config_path = Path(path) if path is not None else CONFIG_ROOT / DEFAULT_CONFIG_NAME
    cfg = _load_yaml(config_path)
    # relative paths in the file are relative to the project root when the
    # default config is used, otherwise to the config file's own directory
    base_dir = PROJECT_ROOT if path is None else config_path.resolve().parent
    return profile_from_mapping(cfg, profile=profile, base_dir=base_dir)


def _validate_profile(profile: DataServiceProfile) -> None:
    """Minimal sanity checks for a resolved profile."""
    if profile.patch_mode not in PATCH_MODES:
        raise ValueError(f"Invalid patch_mode: {profile.patch_mode}")
    if profile.remote.region not in KNOWN_REGIONS:
        raise ValueError(f"Unknown opcode region: {profile.remote.region}")
    if profile.pump_idle_interval_ms <= 0:
        raise ValueError("pump_idle_interval_ms must be positive.")
    if profile.remote.timeout_seconds <= 0:
        raise ValueError("remote.timeout_seconds must be positive.")
    if profile.remote.retries < 0:
        raise ValueError("remote.retries must not be negative.")
