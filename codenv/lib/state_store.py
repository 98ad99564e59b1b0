"""Named hook state shared between hook invocations.

Each state key maps to one small JSON file in a fixed directory:

    /tmp/claude_hooks_state/
    ├── pending_question.json
    ├── initial_scope.json
    └── active_agents.json

Files are written as an envelope carrying the write time taken from the
store's clock:

    {"key": "pending_question", "written_at": 1732550400.0, "payload": {...}}

Expiry is decided per read against a caller-supplied TTL. Files written by
other tools without the envelope are accepted as a bare payload; their age
falls back to the file modification time.

Every operation is best-effort. I/O and decode failures are logged and
reported as "no state" so a broken state directory never blocks a tool call.

Usage:
    from codenv.lib.state_store import FileStateStore

    store = FileStateStore(Path("/tmp/claude_hooks_state"))
    store.write("pending_question", {"type": "SPEC_FOLDER", "question": "..."})
    if store.exists_unexpired("pending_question", 300):
        ...
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

DEFAULT_STATE_DIR = Path("/tmp/claude_hooks_state")

STATE_SUFFIX = ".json"

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class StateRecord(BaseModel):
    """One stored state entry."""

    key: str
    written_at: float
    payload: dict[str, Any] = Field(default_factory=dict)

    def age(self, now: float) -> float:
        return now - self.written_at

    def is_active(self, now: float, ttl_seconds: float) -> bool:
        return self.age(now) <= ttl_seconds


class StateStore(Protocol):
    """Key-value store with per-read expiry, as used by all hooks."""

    def write(self, key: str, payload: dict[str, Any]) -> bool: ...

    def exists_unexpired(self, key: str, ttl_seconds: float) -> bool: ...

    def read(self, key: str, ttl_seconds: float) -> dict[str, Any] | None: ...

    def clear(self, key: str) -> bool: ...


def validate_key(key: str) -> str:
    """Reject keys that are not plain file-name tokens.

    Raises:
        ValueError: key is empty or contains path separators or other symbols
    """
    if not key or not _KEY_RE.match(key) or key in (".", ".."):
        raise ValueError(f"Invalid state key: {key!r}")
    return key


class FileStateStore:
    """State store backed by one JSON file per key."""

    def __init__(self, state_dir: Path = DEFAULT_STATE_DIR, clock: Clock = time.time):
        self.state_dir = Path(state_dir)
        self.clock = clock

    def path_for(self, key: str) -> Path:
        return self.state_dir / f"{validate_key(key)}{STATE_SUFFIX}"

    def write(self, key: str, payload: dict[str, Any]) -> bool:
        """Atomically replace the state for `key`. Returns False on any I/O error."""
        path = self.path_for(key)
        record = StateRecord(key=key, written_at=self.clock(), payload=payload)
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_path_str = tempfile.mkstemp(
                prefix=f".{key}-", suffix=".tmp", dir=str(self.state_dir)
            )
        except OSError as e:
            logger.warning("State write failed for %s: %s", key, e)
            return False

        temp_path = Path(temp_path_str)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(record.model_dump_json())
            temp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            temp_path.unlink(missing_ok=True)
            logger.warning("State write failed for %s: %s", key, e)
            return False
        return True

    def load_record(self, key: str) -> StateRecord | None:
        """Load the raw record for `key`, ignoring expiry."""
        path = self.path_for(key)
        try:
            text = path.read_text(encoding="utf-8")
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("State read failed for %s: %s", key, e)
            return None
        except UnicodeDecodeError as e:
            logger.warning("State file %s is not UTF-8 text: %s", path, e)
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("State file %s is not valid JSON: %s", path, e)
            return None

        if not isinstance(data, dict):
            return None

        if "written_at" in data and "payload" in data:
            try:
                return StateRecord.model_validate(data)
            except ValidationError as e:
                logger.warning("State file %s has an invalid envelope: %s", path, e)
                return None

        # Bare payload written by another tool: age comes from the file itself
        return StateRecord(key=key, written_at=mtime, payload=data)

    def exists_unexpired(self, key: str, ttl_seconds: float) -> bool:
        record = self.load_record(key)
        return record is not None and record.is_active(self.clock(), ttl_seconds)

    def read(self, key: str, ttl_seconds: float) -> dict[str, Any] | None:
        record = self.load_record(key)
        if record is None or not record.is_active(self.clock(), ttl_seconds):
            return None
        return record.payload

    def clear(self, key: str) -> bool:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("State clear failed for %s: %s", key, e)
            return False
        return True

    def age(self, key: str) -> float | None:
        """Seconds since `key` was written, or None if absent."""
        record = self.load_record(key)
        return None if record is None else record.age(self.clock())

    def keys(self) -> list[str]:
        """All stored keys, expired or not."""
        try:
            return sorted(
                p.stem
                for p in self.state_dir.glob(f"*{STATE_SUFFIX}")
                if _KEY_RE.match(p.stem)
            )
        except OSError:
            return []


class NullStateStore:
    """No-op store for environments where state is disabled or unusable.

    Nothing is ever active, so every gate that depends on state allows.
    """

    def write(self, key: str, payload: dict[str, Any]) -> bool:
        validate_key(key)
        return False

    def exists_unexpired(self, key: str, ttl_seconds: float) -> bool:
        return False

    def read(self, key: str, ttl_seconds: float) -> dict[str, Any] | None:
        return None

    def clear(self, key: str) -> bool:
        return True

    def age(self, key: str) -> float | None:
        return None

    def keys(self) -> list[str]:
        return []
