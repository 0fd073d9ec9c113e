"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from affect_engine.config import EngineConfig
from affect_engine.state.engine_state import build_empty_state
from affect_engine.state.manager import StateManager

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for deterministic decay and timestamps."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, hours: float) -> datetime:
        self.now = self.now + timedelta(hours=hours)
        return self.now


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def empty_state(now):
    """Neutral-personality default state stamped at FIXED_NOW."""
    return build_empty_state(now=now)


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "agents" / "main" / "affect.json"


@pytest.fixture
def manager(state_path, clock):
    return StateManager(state_path, EngineConfig(), clock=clock)
