"""
Persistence for the task index.

Provides an abstract interface for storing the Pending/Completed index, with
a JSON file implementation (``tasks.json``) and an in-memory one. The engine
reads the prior snapshot through load() before every incremental merge and
hands each finished index to save().
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from taskboard_index.models.task import TaskIndex

log = logging.getLogger(__name__)


class IndexStoreInterface(ABC):
    """
    Abstract interface for index persistence.

    Allows swapping the storage backend without touching the scanner.
    """

    @abstractmethod
    def load(self) -> TaskIndex:
        """
        Load the last saved index.

        Returns:
            The stored TaskIndex, or an empty one if nothing is stored yet
        """
        pass

    @abstractmethod
    def save(self, index: TaskIndex) -> None:
        """
        Replace the stored index.

        Args:
            index: The complete index to persist
        """
        pass


class JSONIndexStore(IndexStoreInterface):
    """
    JSON-file index store.

    On disk: ``{"Pending": {path: [task, ...]}, "Completed": {...}}``.
    Writes go to a temp file in the same directory and are moved into place,
    so a crash mid-write never leaves a truncated index.
    """

    def __init__(self, index_file: Path) -> None:
        self.index_file = index_file
        self._lock = threading.Lock()

    def load(self) -> TaskIndex:
        if not self.index_file.exists():
            return TaskIndex.empty()

        try:
            with open(self.index_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            log.warning("Could not load index %s, starting empty: %s", self.index_file, exc)
            return TaskIndex.empty()

        if not isinstance(data, dict):
            log.warning("Index %s is not a JSON object, starting empty", self.index_file)
            return TaskIndex.empty()

        return TaskIndex.from_dict(data)

    def save(self, index: TaskIndex) -> None:
        self.index_file.parent.mkdir(parents=True, exist_ok=True)
        # YAML frontmatter may hold dates; store them as their ISO strings
        payload = json.dumps(index.to_dict(), indent=2, ensure_ascii=False, default=str)

        with self._lock:
            fd, tmp_name = tempfile.mkstemp(
                prefix=".tasks-", suffix=".json", dir=str(self.index_file.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.index_file)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        counts = index.task_count()
        log.debug(
            "Saved index %s: %d pending, %d completed",
            self.index_file,
            counts["Pending"],
            counts["Completed"],
        )


class MemoryIndexStore(IndexStoreInterface):
    """In-memory store. Keeps round-tripped copies so callers cannot alias it."""

    def __init__(self, initial: Optional[TaskIndex] = None) -> None:
        self._data = (initial or TaskIndex.empty()).to_dict()
        self.saves = 0

    def load(self) -> TaskIndex:
        return TaskIndex.from_dict(self._data)

    def save(self, index: TaskIndex) -> None:
        self._data = json.loads(json.dumps(index.to_dict(), default=str))
        self.saves += 1


def create_store(index_file: Optional[Path]) -> IndexStoreInterface:
    """
    Factory function to create an index store.

    Returns a JSONIndexStore for a path, or a MemoryIndexStore when no path
    is configured.
    """
    if index_file is None:
        return MemoryIndexStore()
    return JSONIndexStore(index_file)
