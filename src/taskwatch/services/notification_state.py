"""Durable record of which tasks have already been announced as new.

The state is a set of task ids persisted as a JSON array of strings. It only
ever grows: ids of tasks later deleted upstream stay behind as harmless
residue.

Durability is at-least-once: `add` only changes memory and `flush` writes to
storage, so a crash between the two can announce a task a second time.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from taskwatch.config import settings
from taskwatch.errors import StorageError

logger = logging.getLogger(__name__)


class StateStorage(Protocol):
    """Where the notified-id list lives."""

    def read(self) -> list[str] | None:
        """Return the stored ids, or None if nothing has been stored yet."""
        ...

    def write(self, ids: list[str]) -> None: ...


def _decode(raw: str, source: str) -> list[str]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"{source}: invalid JSON ({e})") from e

    if not isinstance(data, list):
        raise StorageError(f"{source}: expected a JSON array, got {type(data).__name__}")
    if not all(isinstance(item, str) for item in data):
        raise StorageError(f"{source}: every entry must be a string")
    return data


class JsonFileStorage:
    """JSON array file, replaced atomically on every write."""

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def read(self) -> list[str] | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e
        return _decode(raw, str(self.path))

    def write(self, ids: list[str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(ids, f)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {self.path}: {e}") from e


class MemoryStorage:
    """In-process storage, mainly for tests.

    Holds the serialized document so malformed content can be simulated.
    """

    def __init__(self, document: str | None = None):
        self.document = document
        self.writes = 0

    def read(self) -> list[str] | None:
        if self.document is None:
            return None
        return _decode(self.document, "memory")

    def write(self, ids: list[str]) -> None:
        self.document = json.dumps(ids)
        self.writes += 1


class NotificationState:
    """Set of task ids already notified as new, mirrored to storage."""

    def __init__(self, storage: StateStorage):
        self._storage = storage
        self._ids: set[str] = set()
        self._dirty = False

    @property
    def dirty(self) -> bool:
        """True when there are adds not yet flushed."""
        return self._dirty

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._ids

    def load(self) -> None:
        """Read persisted state, creating an empty document if none exists.

        Raises:
            StorageError: if the stored document is unreadable or malformed
        """
        stored = self._storage.read()
        if stored is None:
            logger.info("No notification state found, starting empty")
            self._ids = set()
            self._storage.write([])
        else:
            self._ids = set(stored)
            logger.info(f"Loaded notification state: {len(self._ids)} task(s)")
        self._dirty = False

    def contains(self, task_id: str) -> bool:
        return task_id in self._ids

    def add(self, task_id: str) -> None:
        if task_id in self._ids:
            return
        self._ids.add(task_id)
        self._dirty = True

    def flush(self) -> None:
        """Persist the current set.

        The state stays dirty if the write fails, so the next flush retries.

        Raises:
            StorageError: if the write fails
        """
        self._storage.write(sorted(self._ids))
        self._dirty = False
        logger.debug(f"Flushed notification state: {len(self._ids)} task(s)")


def get_state_path() -> Path:
    """Path of the state file from settings."""
    return settings.resolved_state_path


def open_notification_state(path: Path | None = None) -> NotificationState:
    """Create and load the file-backed notification state.

    Raises:
        StorageError: if an existing state file is malformed or unreadable
    """
    state = NotificationState(JsonFileStorage(path or get_state_path()))
    state.load()
    return state
