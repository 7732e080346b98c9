"""
Core task index data models.

A TaskRecord is one checklist item found in one document. The TaskIndex holds
every record in the vault, split into two partitions (Pending / Completed),
each keyed by document path. Conversion to/from the persisted JSON shape only
happens at the disk boundary (see cache.index_store).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

PENDING = "Pending"
COMPLETED = "Completed"


@dataclass
class TaskRecord:
    """
    A single checklist item extracted from a markdown document.

    ``title`` keeps any trailing metadata markers; the structured fields
    (due, time, priority, ...) are extracted separately from the raw line.
    """

    id: int
    status: str
    title: str
    file_path: str
    body: List[str] = field(default_factory=list)
    time: str = ""
    due: str = ""
    tags: List[str] = field(default_factory=list)
    frontmatter_tags: List[str] = field(default_factory=list)
    priority: int = 0
    completion: str = ""
    frontmatter: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted JSON shape (camelCase keys)."""
        return {
            "id": self.id,
            "status": self.status,
            "title": self.title,
            "body": list(self.body),
            "time": self.time,
            "due": self.due,
            "tags": list(self.tags),
            "frontmatterTags": list(self.frontmatter_tags),
            "priority": self.priority,
            "completion": self.completion,
            "filePath": self.file_path,
            "frontmatter": self.frontmatter,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TaskRecord:
        return cls(
            id=int(data.get("id", 0)),
            status=data.get("status", " "),
            title=data.get("title", ""),
            file_path=data.get("filePath", ""),
            body=list(data.get("body") or []),
            time=data.get("time") or "",
            due=data.get("due") or "",
            tags=list(data.get("tags") or []),
            frontmatter_tags=list(data.get("frontmatterTags") or []),
            priority=int(data.get("priority") or 0),
            completion=data.get("completion") or "",
            frontmatter=data.get("frontmatter"),
        )

    def without_id(self) -> Dict[str, Any]:
        """Dict form with the volatile id removed, for scan-to-scan comparison."""
        d = self.to_dict()
        d.pop("id")
        return d


@dataclass
class TaskIndex:
    """
    The two-partition task index.

    ``pending`` and ``completed`` map a document path to the tasks found in it,
    in line order. A record lives in exactly one partition.
    """

    pending: Dict[str, List[TaskRecord]] = field(default_factory=dict)
    completed: Dict[str, List[TaskRecord]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> TaskIndex:
        return cls()

    def copy(self) -> TaskIndex:
        """Shallow copy: new partition dicts and lists, shared records."""
        return TaskIndex(
            pending={path: list(tasks) for path, tasks in self.pending.items()},
            completed={path: list(tasks) for path, tasks in self.completed.items()},
        )

    def set_document(
        self,
        file_path: str,
        pending: List[TaskRecord],
        completed: List[TaskRecord],
    ) -> None:
        """Overwrite one document's entries in both partitions."""
        self.pending[file_path] = list(pending)
        self.completed[file_path] = list(completed)

    def remove_document(self, file_path: str) -> bool:
        """Drop a document from both partitions. Returns True if it was present."""
        had_pending = self.pending.pop(file_path, None) is not None
        had_completed = self.completed.pop(file_path, None) is not None
        return had_pending or had_completed

    def has_document(self, file_path: str) -> bool:
        return file_path in self.pending or file_path in self.completed

    def documents(self) -> List[str]:
        """Every document path present in either partition, sorted."""
        return sorted(set(self.pending) | set(self.completed))

    def all_tasks(self) -> Iterator[TaskRecord]:
        for tasks in self.pending.values():
            yield from tasks
        for tasks in self.completed.values():
            yield from tasks

    def task_ids(self) -> set:
        return {task.id for task in self.all_tasks()}

    def find_task(self, task_id: int) -> Optional[Tuple[str, TaskRecord]]:
        """Return (partition, TaskRecord) for an id, or None."""
        for name, documents in ((PENDING, self.pending), (COMPLETED, self.completed)):
            for tasks in documents.values():
                for task in tasks:
                    if task.id == task_id:
                        return name, task
        return None

    def task_count(self) -> Dict[str, int]:
        return {
            PENDING: sum(len(tasks) for tasks in self.pending.values()),
            COMPLETED: sum(len(tasks) for tasks in self.completed.values()),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            PENDING: {
                path: [task.to_dict() for task in tasks]
                for path, tasks in self.pending.items()
            },
            COMPLETED: {
                path: [task.to_dict() for task in tasks]
                for path, tasks in self.completed.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TaskIndex:
        return cls(
            pending={
                path: [TaskRecord.from_dict(t) for t in tasks]
                for path, tasks in (data.get(PENDING) or {}).items()
            },
            completed={
                path: [TaskRecord.from_dict(t) for t in tasks]
                for path, tasks in (data.get(COMPLETED) or {}).items()
            },
        )
