from __future__ import annotations

import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def store(tmp_path):
    from api.db.store import StateStore

    state_store = StateStore(str(tmp_path / "appData.json"))
    state_store.load()
    return state_store
