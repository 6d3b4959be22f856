"""Persistence of the last fetched schedule.

The store keeps one record under one key. A backend is any object with
`get(key) -> str | None` and `set(key, text)` that raises StorageError on
failure.
"""

import json
import logging
import os
import tempfile

from jadwal.config import Config
from jadwal.errors import MalformedTimeError, StorageError
from jadwal.schedule import Snapshot

log = logging.getLogger(__name__)


class FileBackend:
    """Key-value text storage, one JSON file per key inside `directory`."""

    def __init__(self, directory: str = None):
        self.directory = directory or Config.DATA_DIR

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str):
        path = self._path(key)
        if not os.path.isfile(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as exc:
            raise StorageError(f"cannot read {path}: {exc}") from exc

    def set(self, key: str, text: str) -> None:
        path = self._path(key)
        try:
            os.makedirs(self.directory, exist_ok=True)
            # Write beside the target then swap, so readers never see half a record.
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as exc:
            raise StorageError(f"cannot write {path}: {exc}") from exc


class MemoryBackend:
    """In-process backend; nothing survives a restart."""

    def __init__(self):
        self.records = {}

    def get(self, key: str):
        return self.records.get(key)

    def set(self, key: str, text: str) -> None:
        self.records[key] = text


class ScheduleStore:
    """Loads and saves the single stored `Snapshot`."""

    def __init__(self, backend=None, key: str = None):
        self.backend = backend if backend is not None else FileBackend()
        self.key = key or Config.STORAGE_KEY

    def load(self):
        """Return the stored snapshot, or None if absent or unreadable."""
        try:
            text = self.backend.get(self.key)
        except StorageError:
            log.warning("Could not read stored schedule", exc_info=True)
            return None
        if text is None:
            log.info("No stored schedule under %r", self.key)
            return None
        try:
            snapshot = Snapshot.from_dict(json.loads(text))
        except (ValueError, KeyError, TypeError, MalformedTimeError) as exc:
            # ValueError covers JSONDecodeError
            log.warning("Ignoring corrupt stored schedule: %s", exc)
            return None
        log.info("Restored schedule for %s (%s)", snapshot.city, snapshot.date)
        return snapshot

    def save(self, snapshot: Snapshot) -> bool:
        """Replace the stored record with `snapshot`. Returns False on failure."""
        text = json.dumps(snapshot.to_dict(), ensure_ascii=False)
        try:
            self.backend.set(self.key, text)
        except StorageError:
            log.warning("Could not persist schedule for %s", snapshot.city, exc_info=True)
            return False
        log.info("Persisted schedule for %s (%s)", snapshot.city, snapshot.date)
        return True
