# tests/test_gamedata_icons_and_integrity.py
"""
Small pure helpers: icon path formatting and the launcher integrity flag.
"""

from __future__ import annotations

import json

import pytest

from catalog.schema import ClientLanguage
from gamedata.icons import icon_path, language_icon_type, normalize_icon_type
from gamedata.troubleshooting import IndexIntegrityResult, has_modified_game_data, parse_index_integrity


@pytest.mark.parametrize(
    "icon_id,icon_type,hr,expected",
    [
        (1, None, False, "ui/icon/000000/000001.tex"),
        (65001, "", False, "ui/icon/065000/065001.tex"),
        (20650, "hq", False, "ui/icon/020000/hq/020650.tex"),
        (20650, "hq/", True, "ui/icon/020000/hq/020650_hr1.tex"),
        (123456, "chs/", False, "ui/icon/123000/chs/123456.tex"),
    ],
)
def test_icon_path(icon_id, icon_type, hr, expected):
    assert icon_path(icon_id, icon_type, hr) == expected


def test_icon_path_rejects_negative_ids():
    with pytest.raises(ValueError):
        icon_path(-1)


def test_icon_type_helpers():
    assert normalize_icon_type(None) == ""
    assert normalize_icon_type("en") == "en/"
    assert language_icon_type(ClientLanguage.GERMAN) == "de/"
    assert language_icon_type("French") == "fr/"
    with pytest.raises(ValueError):
        language_icon_type("xx")


@pytest.mark.parametrize(
    "blob,expected",
    [
        (None, False),
        ("", False),
        ("garbage", False),
        (json.dumps([1]), False),
        (json.dumps({}), False),
        (json.dumps({"IndexIntegrity": "Failed"}), True),
        (json.dumps({"IndexIntegrity": "exception"}), True),
        (json.dumps({"IndexIntegrity": "Success"}), False),
        (json.dumps({"IndexIntegrity": 0}), True),   # serialized as ordinal
        (json.dumps({"IndexIntegrity": 1}), True),
        (json.dumps({"IndexIntegrity": 5}), False),
        (json.dumps({"IndexIntegrity": 42}), False),
    ],
)
def test_has_modified_game_data(blob, expected):
    assert has_modified_game_data(blob) is expected


def test_parse_index_integrity_ignores_bools():
    assert parse_index_integrity(True) is None
    assert parse_index_integrity("NoGame") is IndexIntegrityResult.NO_GAME
