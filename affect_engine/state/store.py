"""Durable file store for engine state.

State lives in one JSON document per agent. Writes go to a temp file in the
same directory and are swapped in with os.replace(), so a reader sees either
the old document or the new one, never a torn write.

Writers coordinate through an advisory lock file next to the document
(``<state>.lock``). The lock is created with O_EXCL; a lock whose mtime is
older than the stale window is assumed to belong to a crashed writer and is
taken over. Nothing here blocks or retries: a busy lock is reported and the
caller decides what to do.

Readers never take the lock.
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
import time
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Union

from pydantic import ValidationError

from affect_engine.schemas import StateDocument, utc_now
from affect_engine.state.engine_state import EngineState, build_empty_state

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

DEFAULT_LOCK_STALE_MS = 10_000
LOCK_SUFFIX = ".lock"
DEFAULT_FILE_MODE = 0o644


class LockStatus(Enum):
    """Outcome of a lock attempt. Truthy only when the lock was acquired."""
    ACQUIRED = "acquired"
    BUSY = "busy"

    def __bool__(self) -> bool:
        return self is LockStatus.ACQUIRED


class StateLockedError(Exception):
    """Raised when a save finds the state lock held by another writer."""

    def __init__(self, lock_path: PathLike):
        self.lock_path = Path(lock_path)
        super().__init__(f"State lock is held by another writer: {self.lock_path}")


def lock_path_for(path: PathLike) -> Path:
    path = Path(path)
    return path.with_name(path.name + LOCK_SUFFIX)


# ─────────────────────────────────────────────────────────────────────────────
# Documents
# ─────────────────────────────────────────────────────────────────────────────

def load_state(path: PathLike) -> EngineState:
    """Load state from disk.

    A missing file gives the default state. So does an unreadable or invalid
    one: the fault is logged and never raised, since a broken document must
    not take the host down.
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No state document at {path}, starting from default state")
        return build_empty_state()

    try:
        doc = StateDocument.model_validate_json(path.read_bytes())
    except (OSError, ValidationError) as e:
        logger.warning(f"Could not load state from {path}, using default state: {e}")
        return build_empty_state()

    return EngineState.from_document(doc)


def write_state(path: PathLike, state: EngineState) -> None:
    """Atomically write state to disk, creating parent directories.

    Does not take the lock; use save_state() for a locked write.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = state.to_document().model_dump_json(indent=2)

    # mkstemp files are owner-only; keep the mode of the document being replaced
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        mode = DEFAULT_FILE_MODE

    # Atomic write - temp file in the same directory, then replace
    temp_fd, temp_path = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", text=True
    )
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as temp_file:
            temp_file.write(payload)
            temp_file.write("\n")
        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise

    logger.info(f"Saved state to {path} (total_updates={state.total_updates})")


# ─────────────────────────────────────────────────────────────────────────────
# Locking
# ─────────────────────────────────────────────────────────────────────────────

def _create_lock(lock_path: Path) -> bool:
    try:
        fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, DEFAULT_FILE_MODE)
    except FileExistsError:
        return False
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(json.dumps({"pid": os.getpid(), "acquired_at": utc_now().isoformat()}))
    return True


def _lock_age_ms(lock_path: Path) -> Optional[float]:
    """Age of the lock marker, or None if it vanished meanwhile."""
    try:
        mtime = lock_path.stat().st_mtime
    except FileNotFoundError:
        return None
    return (time.time() - mtime) * 1000.0


def acquire_lock(lock_path: PathLike, stale_ms: int = DEFAULT_LOCK_STALE_MS) -> LockStatus:
    """Try once to take the advisory lock.

    Args:
        lock_path: Lock file path
        stale_ms: A marker older than this is treated as abandoned

    Returns:
        LockStatus.ACQUIRED, or LockStatus.BUSY if another live writer holds it
    """
    lock_path = Path(lock_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    if _create_lock(lock_path):
        return LockStatus.ACQUIRED

    age_ms = _lock_age_ms(lock_path)
    if age_ms is None:
        # Released between our attempts
        return LockStatus.ACQUIRED if _create_lock(lock_path) else LockStatus.BUSY
    if age_ms <= stale_ms:
        return LockStatus.BUSY

    logger.warning(f"Taking over stale lock {lock_path} ({age_ms:.0f}ms old)")
    try:
        lock_path.unlink()
    except FileNotFoundError:
        pass
    if _create_lock(lock_path):
        return LockStatus.ACQUIRED
    # Another writer won the takeover race
    return LockStatus.BUSY


def release_lock(lock_path: PathLike) -> None:
    """Remove the lock file. Releasing a lock that isn't there is fine."""
    try:
        Path(lock_path).unlink()
    except FileNotFoundError:
        return


@contextmanager
def held_lock(lock_path: PathLike, stale_ms: int = DEFAULT_LOCK_STALE_MS) -> Iterator[LockStatus]:
    """Context manager around acquire_lock()/release_lock().

    Yields the LockStatus. The lock is released on every exit path, but only
    if this block acquired it.
    """
    status = acquire_lock(lock_path, stale_ms)
    try:
        yield status
    finally:
        if status:
            release_lock(lock_path)


def save_state(path: PathLike, state: EngineState, stale_ms: int = DEFAULT_LOCK_STALE_MS) -> None:
    """Write state under the advisory lock.

    Raises:
        StateLockedError: Another writer holds a fresh lock
    """
    lock_path = lock_path_for(path)
    with held_lock(lock_path, stale_ms) as status:
        if not status:
            raise StateLockedError(lock_path)
        write_state(path, state)
