from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

import pytest
import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from brutalytics import state_persistence  # noqa: E402


@pytest.fixture()
def session_state(monkeypatch: pytest.MonkeyPatch) -> Dict[str, object]:
    state: Dict[str, object] = {}
    monkeypatch.setattr(st, "session_state", state, raising=False)
    state_persistence.configure_storage(None)
    return state


@pytest.fixture()
def now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
