"""Engine state aggregate, durable store and orchestrator."""

from affect_engine.state.engine_state import EngineState, build_empty_state
from affect_engine.state.store import (
    LockStatus,
    StateLockedError,
    acquire_lock,
    held_lock,
    load_state,
    lock_path_for,
    release_lock,
    save_state,
    write_state,
)
from affect_engine.state.manager import IdentityKind, StateManager, dominant_label

__all__ = [
    "EngineState",
    "build_empty_state",
    "LockStatus",
    "StateLockedError",
    "acquire_lock",
    "held_lock",
    "load_state",
    "lock_path_for",
    "release_lock",
    "save_state",
    "write_state",
    "IdentityKind",
    "StateManager",
    "dominant_label",
]
