# tests/test_env_data_profile.py
"""
Tests for env.loader: YAML profile selection, defaults, path resolution and
validation.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from catalog.schema import ClientLanguage
from env.loader import load_data_profile, profile_from_mapping


def _write_config(tmp_path: Path, cfg: dict) -> Path:
    path = tmp_path / "data_service.yaml"
    path.write_text(yaml.safe_dump(cfg, allow_unicode=True), encoding="utf-8")
    return path


BASE = {
    "profile": "cn",
    "profiles": {
        "cn": {
            "asset_dir": "assets",
            "game_data_path": "/abs/game",
            "language": "chs",
            "patch_mode": "manifest",
            "remote": {"region": "CN", "timeout_seconds": 3, "retries": 4},
        },
        "global": {
            "asset_dir": "assets",
            "game_data_path": "game",
            "language": "en",
            "patch_mode": "off",
            "remote": {"enabled": False, "region": "Global"},
        },
    },
}


def test_load_active_profile_resolves_relative_paths(tmp_path: Path):
    path = _write_config(tmp_path, BASE)

    profile = load_data_profile(path)

    assert profile.name == "cn"
    assert profile.asset_dir == tmp_path / "assets"
    assert profile.game_data_path == Path("/abs/game")
    assert profile.uires_dir == tmp_path / "assets" / "UIRes"
    assert profile.server_manifest_path == tmp_path / "assets" / "UIRes" / "server.json"
    assert profile.language is ClientLanguage.CHINESE_SIMPLIFIED
    assert profile.patch_mode == "manifest"
    assert profile.remote.enabled is True
    assert profile.remote.timeout_seconds == 3.0
    assert profile.remote.retries == 4
    assert profile.remote.backoff_seconds == 0.5  # default
    assert profile.pump_idle_interval_ms == 5.0


def test_profile_override(tmp_path: Path):
    profile = load_data_profile(_write_config(tmp_path, BASE), profile="global")

    assert profile.name == "global"
    assert profile.language is ClientLanguage.ENGLISH
    assert profile.remote.enabled is False
    assert profile.game_data_path == tmp_path / "game"


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_data_profile(tmp_path / "nope.yaml")


def test_unknown_profile():
    with pytest.raises(KeyError):
        profile_from_mapping(BASE, profile="kr")


@pytest.mark.parametrize(
    "patch",
    [
        {"patch_mode": "sometimes"},
        {"remote": {"region": "EU"}},
        {"pump_idle_interval_ms": 0},
        {"remote": {"region": "CN", "timeout_seconds": 0}},
        {"remote": {"region": "CN", "retries": -1}},
        {"language": "tlh"},
    ],
)
def test_invalid_values_rejected(patch):
    cfg = {"profile": "p", "profiles": {"p": {"asset_dir": "a", "game_data_path": "g", **patch}}}
    with pytest.raises(ValueError):
        profile_from_mapping(cfg)


def test_required_keys():
    with pytest.raises(KeyError):
        profile_from_mapping({"profile": "p", "profiles": {"p": {"asset_dir": "a"}}})
    with pytest.raises(ValueError):
        profile_from_mapping({"profiles": {}})


def test_shipped_config_is_valid():
    """config/data_service.yaml in the repo must load for every profile."""
    for name in ("cn", "cn_manifest", "offline"):
        profile = load_data_profile(profile=name)
        assert profile.name == name
