"""Tests for the durable state store and advisory locking."""
import dataclasses
import json
import logging
import os
import stat
import time
from datetime import timedelta

import pytest

from affect_engine.model.values import DimensionalState
from affect_engine.state.engine_state import build_empty_state
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


def _age_file(path, seconds):
    old = time.time() - seconds
    os.utime(path, (old, old))


class TestLoadState:
    """Test loading with graceful fallback."""

    def test_missing_file_gives_default(self, tmp_path):
        state = load_state(tmp_path / "nope.json")
        assert state.total_updates == 0
        assert state.dimensions == DimensionalState.neutral()

    def test_invalid_json_gives_default(self, tmp_path, caplog):
        path = tmp_path / "state.json"
        path.write_text("{not json at all")
        with caplog.at_level(logging.WARNING):
            state = load_state(path)
        assert state.total_updates == 0
        assert "using default state" in caplog.text

    def test_schema_mismatch_gives_default(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"dimensions": "sideways", "meta": {"total_updates": -4}}))
        assert load_state(path).total_updates == 0

    def test_unsupported_version_gives_default(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text(json.dumps({"version": 1, "meta": {"total_updates": 9}}))
        assert load_state(path).total_updates == 0

    def test_unknown_top_level_keys_ignored(self, tmp_path, now):
        path = tmp_path / "state.json"
        write_state(path, dataclasses.replace(build_empty_state(now=now), total_updates=3))
        payload = json.loads(path.read_text())
        payload["cachedAnalysis"] = {"text": "stale"}
        path.write_text(json.dumps(payload))
        assert load_state(path).total_updates == 3

    def test_naive_timestamps_read_as_utc(self, manager, state_path, empty_state, now):
        state = manager.apply_stimulus(empty_state, "angry", 0.9, "", now=now - timedelta(hours=1))
        write_state(state_path, state)
        payload = json.loads(state_path.read_text())
        payload["recent_stimuli"][0]["timestamp"] = "2025-03-01T11:00:00"
        for entry in payload["rumination"]["active"]:
            entry["last_stage_timestamp"] = "2025-03-01T11:00:00"
        payload["meta"]["created_at"] = "2025-02-01T00:00:00"
        state_path.write_text(json.dumps(payload))

        loaded = load_state(state_path)
        assert loaded.recent_stimuli[0].timestamp == now - timedelta(hours=1)
        assert loaded.created_at.tzinfo is not None
        assert all(e.last_stage_timestamp.tzinfo is not None for e in loaded.rumination)
        assert manager.dominant_label(loaded, now) == "angry"


class TestWriteState:
    """Test atomic writes."""

    def test_round_trip(self, tmp_path, now):
        path = tmp_path / "state.json"
        state = dataclasses.replace(
            build_empty_state(now=now),
            dimensions=DimensionalState(pleasure=-0.4),
            total_updates=12,
        )
        write_state(path, state)
        assert load_state(path) == state

    def test_creates_parent_directories(self, tmp_path, now):
        path = tmp_path / "deep" / "nested" / "state.json"
        write_state(path, build_empty_state(now=now))
        assert path.exists()

    def test_document_layout(self, tmp_path, now):
        path = tmp_path / "state.json"
        write_state(path, build_empty_state(now=now))
        payload = json.loads(path.read_text())
        assert payload["version"] == 2
        assert payload["rumination"] == {"active": []}
        assert payload["meta"]["total_updates"] == 0
        assert set(payload["dimensions"]) == {
            "pleasure", "arousal", "dominance", "connection", "curiosity", "energy", "trust"
        }

    def test_no_temp_files_left_behind(self, tmp_path, now):
        path = tmp_path / "state.json"
        write_state(path, build_empty_state(now=now))
        write_state(path, build_empty_state(now=now))
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    def test_new_document_not_owner_only(self, tmp_path, now):
        path = tmp_path / "state.json"
        write_state(path, build_empty_state(now=now))
        assert stat.S_IMODE(path.stat().st_mode) == 0o644

    def test_keeps_existing_mode(self, tmp_path, now):
        path = tmp_path / "state.json"
        write_state(path, build_empty_state(now=now))
        os.chmod(path, 0o640)
        write_state(path, build_empty_state(now=now))
        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_failed_write_keeps_old_document(self, tmp_path, now, monkeypatch):
        path = tmp_path / "state.json"
        original = dataclasses.replace(build_empty_state(now=now), total_updates=1)
        write_state(path, original)

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", boom)
        with pytest.raises(OSError):
            write_state(path, dataclasses.replace(original, total_updates=2))
        monkeypatch.undo()

        assert load_state(path).total_updates == 1
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


class TestLocking:
    """Test advisory lock semantics."""

    def test_acquire_busy_release_sequence(self, tmp_path):
        lock = tmp_path / "state.json.lock"
        assert acquire_lock(lock) is LockStatus.ACQUIRED
        assert acquire_lock(lock) is LockStatus.BUSY
        release_lock(lock)
        assert acquire_lock(lock) is LockStatus.ACQUIRED

    def test_status_truthiness(self):
        assert LockStatus.ACQUIRED
        assert not LockStatus.BUSY

    def test_stale_lock_taken_over(self, tmp_path, caplog):
        lock = tmp_path / "state.json.lock"
        assert acquire_lock(lock)
        _age_file(lock, 60)
        with caplog.at_level(logging.WARNING):
            assert acquire_lock(lock, stale_ms=10_000) is LockStatus.ACQUIRED
        assert "stale lock" in caplog.text

    def test_fresh_lock_not_taken_over(self, tmp_path):
        lock = tmp_path / "state.json.lock"
        assert acquire_lock(lock)
        _age_file(lock, 5)
        assert acquire_lock(lock, stale_ms=10_000) is LockStatus.BUSY

    def test_lock_file_records_owner(self, tmp_path):
        lock = tmp_path / "state.json.lock"
        acquire_lock(lock)
        assert json.loads(lock.read_text())["pid"] == os.getpid()

    def test_release_is_idempotent(self, tmp_path):
        lock = tmp_path / "state.json.lock"
        release_lock(lock)
        acquire_lock(lock)
        release_lock(lock)
        release_lock(lock)
        assert not lock.exists()

    def test_lock_path_for(self, tmp_path):
        assert lock_path_for(tmp_path / "affect.json") == tmp_path / "affect.json.lock"


class TestHeldLock:
    """Test the scoped lock context manager."""

    def test_released_on_normal_exit(self, tmp_path):
        lock = tmp_path / "x.lock"
        with held_lock(lock) as status:
            assert status
            assert lock.exists()
        assert not lock.exists()

    def test_released_on_exception(self, tmp_path):
        lock = tmp_path / "x.lock"
        with pytest.raises(RuntimeError):
            with held_lock(lock):
                raise RuntimeError("boom")
        assert not lock.exists()

    def test_busy_lock_left_alone(self, tmp_path):
        """A block that did not acquire the lock must not release someone else's."""
        lock = tmp_path / "x.lock"
        acquire_lock(lock)
        with held_lock(lock) as status:
            assert status is LockStatus.BUSY
        assert lock.exists()


class TestSaveState:
    """Test locked saves."""

    def test_save_writes_and_releases(self, tmp_path, now):
        path = tmp_path / "state.json"
        save_state(path, build_empty_state(now=now))
        assert path.exists()
        assert not lock_path_for(path).exists()

    def test_save_raises_when_locked(self, tmp_path, now):
        path = tmp_path / "state.json"
        acquire_lock(lock_path_for(path))
        with pytest.raises(StateLockedError) as exc_info:
            save_state(path, build_empty_state(now=now))
        assert exc_info.value.lock_path == lock_path_for(path)
        assert not path.exists()
        assert lock_path_for(path).exists()

    def test_save_over_stale_lock(self, tmp_path, now):
        path = tmp_path / "state.json"
        lock = lock_path_for(path)
        acquire_lock(lock)
        _age_file(lock, 30)
        save_state(path, build_empty_state(now=now), stale_ms=10_000)
        assert path.exists()
        assert not lock.exists()
