"""
Thread-safe index service shared by the watcher, the REST API and MCP tools.

Design:
    VaultScanner         : does the work; stateless between calls
    _index               : last index returned by the scanner (read model)
    _lock (RLock)        : serialises scans and updates (single writer)
    _update_queue        : watcher events, drained by a worker thread

The watcher calls enqueue_refresh() / enqueue_removal() so it never blocks on
a scan; API handlers call scan() / update() directly.
"""

import logging
import queue
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from taskboard_index.cache.scanner import ScanResult, VaultScanner
from taskboard_index.models.task import COMPLETED, PENDING, TaskIndex, TaskRecord

log = logging.getLogger(__name__)

_REFRESH = "refresh"
_REMOVE = "remove"


class IndexService:
    """
    Owns the scanner and the current read model of the index.

    Call initialize() once at startup, then start_worker() before starting
    the watcher.
    """

    def __init__(self, scanner: VaultScanner) -> None:
        self._scanner = scanner
        self._lock = threading.RLock()
        self._index: TaskIndex = TaskIndex.empty()
        self._update_queue: "queue.Queue[Optional[Tuple[str, str]]]" = queue.Queue()
        self._worker_thread: Optional[threading.Thread] = None
        self._last_full_scan: Optional[datetime] = None
        self._last_update: Optional[datetime] = None

    @property
    def scanner(self) -> VaultScanner:
        return self._scanner

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def initialize(self) -> ScanResult:
        """Full vault scan. Blocks until complete."""
        return self.scan()

    def load(self) -> TaskIndex:
        """Adopt the persisted index as the read model without scanning."""
        with self._lock:
            self._index = self._scanner.store.load()
            return self._index

    def start_worker(self) -> None:
        """Start the background queue-drain worker thread (daemon)."""
        self._worker_thread = threading.Thread(
            target=self._worker_loop, daemon=True, name="index-worker"
        )
        self._worker_thread.start()

    def stop_worker(self) -> None:
        """Signal the worker thread to stop and wait for it."""
        self._update_queue.put(None)  # sentinel
        if self._worker_thread:
            self._worker_thread.join(timeout=5)

    # ------------------------------------------------------------------
    # Background worker
    # ------------------------------------------------------------------

    def _worker_loop(self) -> None:
        """Drain the update queue, batching whatever arrived together."""
        while True:
            item = self._update_queue.get()
            if item is None:  # sentinel → stop
                break
            batch = [item]
            stop = False
            while True:
                try:
                    nxt = self._update_queue.get_nowait()
                except queue.Empty:
                    break
                if nxt is None:
                    stop = True
                    break
                batch.append(nxt)
            try:
                self._apply_batch(batch)
            except Exception:
                log.exception("Worker failed to apply %d queued change(s)", len(batch))
            if stop:
                break

    def _apply_batch(self, batch: List[Tuple[str, str]]) -> None:
        refresh: List[str] = []
        remove: List[str] = []
        for kind, doc_path in batch:
            target = refresh if kind == _REFRESH else remove
            if doc_path not in target:
                target.append(doc_path)
        remove = [p for p in remove if p not in refresh]
        if refresh:
            self.update(refresh)
        if remove:
            self.remove(remove)

    def enqueue_refresh(self, doc_path: str) -> None:
        """Schedule a document re-scan from a watcher callback (non-blocking)."""
        self._update_queue.put((_REFRESH, doc_path))

    def enqueue_removal(self, doc_path: str) -> None:
        """Schedule removal of a deleted document (non-blocking)."""
        self._update_queue.put((_REMOVE, doc_path))

    # ------------------------------------------------------------------
    # Index operations
    # ------------------------------------------------------------------

    def scan(self) -> ScanResult:
        with self._lock:
            result = self._scanner.scan_vault()
            self._index = result.index
            self._last_full_scan = datetime.now()
            return result

    def update(self, doc_paths: Sequence[Optional[str]]) -> ScanResult:
        with self._lock:
            result = self._scanner.update_documents(doc_paths)
            self._index = result.index
            self._last_update = datetime.now()
            return result

    def remove(self, doc_paths: Sequence[str]) -> ScanResult:
        with self._lock:
            result = self._scanner.remove_documents(doc_paths)
            self._index = result.index
            self._last_update = datetime.now()
            return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> TaskIndex:
        with self._lock:
            return self._index

    def query_tasks(
        self,
        *,
        partition: Optional[str] = None,
        file_path: Optional[str] = None,
        tag: Optional[str] = None,
        due_before: Optional[str] = None,
        min_priority: Optional[int] = None,
        limit: int = 500,
    ) -> List[Tuple[str, TaskRecord]]:
        """
        Filter indexed tasks.

        Args:
            partition: "Pending" or "Completed"; both when omitted
            file_path: Restrict to one document
            tag: Inline or frontmatter tag, with or without the leading #
            due_before: ISO date; only tasks with a YYYY-MM-DD due on or before it
            min_priority: Only tasks with priority >= this (0 excluded)
            limit: Max results

        Returns:
            (partition, TaskRecord) pairs in index order
        """
        if partition not in (None, PENDING, COMPLETED):
            raise ValueError(f"Unknown partition '{partition}'")
        wanted_tag = None
        if tag:
            wanted_tag = tag if tag.startswith("#") else f"#{tag}"

        with self._lock:
            sources = []
            if partition in (None, PENDING):
                sources.append((PENDING, self._index.pending))
            if partition in (None, COMPLETED):
                sources.append((COMPLETED, self._index.completed))

            results: List[Tuple[str, TaskRecord]] = []
            for name, documents in sources:
                for doc_path, tasks in documents.items():
                    if file_path and doc_path != file_path:
                        continue
                    for task in tasks:
                        if wanted_tag and wanted_tag not in task.tags and wanted_tag not in task.frontmatter_tags:
                            continue
                        if due_before and not (_is_iso_date(task.due) and task.due <= due_before):
                            continue
                        if min_priority is not None and not (task.priority and task.priority >= min_priority):
                            continue
                        results.append((name, task))
                        if len(results) >= limit:
                            return results
            return results

    def get_task(self, task_id: int) -> Optional[Tuple[str, TaskRecord]]:
        """Return (partition, TaskRecord) or None."""
        with self._lock:
            return self._index.find_task(task_id)

    def documents(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [
                {
                    "file_path": doc_path,
                    "pending": len(self._index.pending.get(doc_path, [])),
                    "completed": len(self._index.completed.get(doc_path, [])),
                }
                for doc_path in self._index.documents()
            ]

    # ------------------------------------------------------------------
    # Status / diagnostics
    # ------------------------------------------------------------------

    def status(self) -> dict:
        with self._lock:
            counts = self._index.task_count()
            return {
                "vault_root": str(self._scanner.vault.root),
                "documents_indexed": len(self._index.documents()),
                "pending_tasks": counts[PENDING],
                "completed_tasks": counts[COMPLETED],
                "last_full_scan": self._last_full_scan.isoformat() if self._last_full_scan else None,
                "last_update": self._last_update.isoformat() if self._last_update else None,
                "real_time_scanning": self._scanner.real_time_scanning,
                "exclude_dirs": sorted(self._scanner.vault.exclude_dirs),
            }


def _is_iso_date(value: str) -> bool:
    return len(value) == 10 and value[4] == "-" and value[7] == "-"
