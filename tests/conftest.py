# tests/conftest.py

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

# Ensure src/ is on sys.path for test imports like `import gamedata`, `import catalog`,
# and tests/ for the shared fakes.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
TESTS_ROOT = PROJECT_ROOT / "tests"

for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


@pytest.fixture
def uires_dir(tmp_path: Path) -> Path:
    """Empty UIRes/ directory inside a temporary asset dir."""
    d = tmp_path / "assets" / "UIRes"
    d.mkdir(parents=True)
    return d


@pytest.fixture
def write_json():
    """Write a JSON document to a path and return the path."""
    def _write(path: Path, data) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        return path

    return _write
