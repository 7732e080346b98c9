"""
Vault scanning: full rebuilds and incremental per-document merges.

Design:
    scan_vault()         : discard everything, re-extract every document
    update_documents()   : load the persisted snapshot, re-extract only the
                            given documents, copy every other key forward
    remove_documents()   : drop deleted documents from the snapshot

Each call returns the new TaskIndex and hands it to the store; the scanner
keeps no index of its own between calls. Documents are processed one at a
time in enumeration order. A document that cannot be read or parsed is
logged and skipped, and whatever the previous snapshot held for it is kept.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from taskboard_index.cache.index_store import IndexStoreInterface
from taskboard_index.cache.vault import FileSystemVault
from taskboard_index.config import IndexerSettings
from taskboard_index.events import COLUMN_REFRESH, FULL_REFRESH, EventNotifier
from taskboard_index.exceptions import DocumentReadError
from taskboard_index.models.task import TaskIndex
from taskboard_index.parsers.checkbox import DEFAULT_VOCABULARY, StatusVocabulary
from taskboard_index.parsers.fields import DEFAULT_BODY_INDENT
from taskboard_index.parsers.task_parser import DocumentTasks, extract_document_tasks
from taskboard_index.utils.filters import (
    ScanFilters,
    scan_filter_for_files_and_folders,
    scan_filter_for_tags,
)
from taskboard_index.utils.ids import TaskIdSource

log = logging.getLogger(__name__)

FileFilter = Callable[[str, Any, ScanFilters], bool]
TagFilter = Callable[[Sequence[str], ScanFilters], bool]


@dataclass
class ScanResult:
    """Outcome of one scan, update or removal."""

    index: TaskIndex
    documents_scanned: int = 0
    documents_failed: List[str] = field(default_factory=list)
    documents_removed: List[str] = field(default_factory=list)
    tasks_detected: int = 0

    def to_dict(self) -> Dict[str, Any]:
        counts = self.index.task_count()
        return {
            "documents_scanned": self.documents_scanned,
            "documents_failed": list(self.documents_failed),
            "documents_removed": list(self.documents_removed),
            "tasks_detected": self.tasks_detected,
            "pending": counts["Pending"],
            "completed": counts["Completed"],
        }


class VaultScanner:
    """
    Builds and maintains the task index for one vault.

    All collaborators are injected: the document source, the persistence
    store, the notifier, the scan filters and the status vocabulary.
    """

    def __init__(
        self,
        vault: FileSystemVault,
        store: IndexStoreInterface,
        notifier: Optional[EventNotifier] = None,
        *,
        filters: Optional[ScanFilters] = None,
        file_filter: FileFilter = scan_filter_for_files_and_folders,
        tag_filter: TagFilter = scan_filter_for_tags,
        vocabulary: StatusVocabulary = DEFAULT_VOCABULARY,
        priority_emojis: Optional[Mapping[int, str]] = None,
        body_indent: int = DEFAULT_BODY_INDENT,
        real_time_scanning: bool = True,
        daily_note_format: Optional[str] = None,
    ) -> None:
        self.vault = vault
        self.store = store
        self.notifier = notifier or EventNotifier()
        self.filters = filters or ScanFilters()
        self.file_filter = file_filter
        self.tag_filter = tag_filter
        self.vocabulary = vocabulary
        self.priority_emojis = priority_emojis
        self.body_indent = body_indent
        self.real_time_scanning = real_time_scanning
        self.daily_note_format = daily_note_format

    @classmethod
    def from_settings(
        cls,
        settings: IndexerSettings,
        store: IndexStoreInterface,
        notifier: Optional[EventNotifier] = None,
    ) -> "VaultScanner":
        return cls(
            FileSystemVault(settings.vault_root, settings.exclude_dirs),
            store,
            notifier,
            filters=settings.scan_filters,
            vocabulary=settings.vocabulary,
            priority_emojis=settings.priority_emojis,
            body_indent=settings.body_indent_width,
            real_time_scanning=settings.real_time_scanning,
            daily_note_format=settings.daily_note_format,
        )

    # ------------------------------------------------------------------
    # Per-document extraction
    # ------------------------------------------------------------------

    def _accepts(self, doc_path: str, metadata: Any) -> bool:
        return self.file_filter(doc_path, metadata, self.filters)

    def _extract(
        self,
        doc_path: str,
        ids: TaskIdSource,
        *,
        synthesize_fallback: bool,
        daily_note_format: Optional[str],
    ) -> Optional[DocumentTasks]:
        """Read and extract one document. Returns None if it failed."""
        try:
            content = self.vault.read(doc_path)
        except DocumentReadError:
            log.exception("Failed to read %s", doc_path)
            return None

        try:
            return extract_document_tasks(
                content,
                doc_path,
                ids=ids,
                vocabulary=self.vocabulary,
                tag_filter=lambda tags: self.tag_filter(tags, self.filters),
                priority_emojis=self.priority_emojis,
                body_indent=self.body_indent,
                synthesize_fallback=synthesize_fallback,
                daily_note_format=daily_note_format,
            )
        except Exception:
            log.exception("Failed to extract tasks from %s", doc_path)
            return None

    # ------------------------------------------------------------------
    # Full scan
    # ------------------------------------------------------------------

    def scan_vault(self) -> ScanResult:
        """
        Rebuild the index from every document in the vault.

        Emits FULL_REFRESH when at least one checklist task was detected.
        """
        log.info("Starting full scan: %s", self.vault.root)
        prior: Optional[TaskIndex] = None
        index = TaskIndex.empty()
        ids = TaskIdSource()
        result = ScanResult(index=index)

        for doc in self.vault.list_documents():
            if not self._accepts(doc.path, doc):
                continue

            extracted = self._extract(
                doc.path, ids, synthesize_fallback=True, daily_note_format=None
            )
            if extracted is None:
                result.documents_failed.append(doc.path)
                if prior is None:
                    prior = self.store.load()
                if prior.has_document(doc.path):
                    index.set_document(
                        doc.path,
                        prior.pending.get(doc.path, []),
                        prior.completed.get(doc.path, []),
                    )
                continue

            index.set_document(doc.path, extracted.pending, extracted.completed)
            result.documents_scanned += 1
            result.tasks_detected += extracted.detected

        self.store.save(index)
        log.info(
            "Full scan complete: %d documents, %d tasks detected, %d failed",
            result.documents_scanned,
            result.tasks_detected,
            len(result.documents_failed),
        )

        if result.tasks_detected:
            self.notifier.emit(FULL_REFRESH)
        return result

    # ------------------------------------------------------------------
    # Incremental update
    # ------------------------------------------------------------------

    def update_documents(self, doc_paths: Sequence[Optional[str]]) -> ScanResult:
        """
        Re-extract the given documents and merge them into the stored index.

        Every other document's entries are copied forward unchanged. ``None``
        entries are skipped with a warning. Paths the full walk would not list
        (outside the vault, excluded directories, non-markdown) are never
        read, and any entries stored under them are dropped, as are those of
        documents rejected by the file filter. Emits COLUMN_REFRESH when a task
        was detected and real-time scanning is enabled.
        """
        prior = self.store.load()
        index = prior.copy()
        ids = TaskIdSource(prior.task_ids())
        result = ScanResult(index=index)

        for doc_path in doc_paths:
            if doc_path is None:
                log.warning("Skipping invalid document reference")
                continue

            doc_key = self.vault.document_key(doc_path)
            if doc_key is None:
                log.warning("Ignoring path outside the vault corpus: %s", doc_path)
                if index.remove_document(doc_path):
                    result.documents_removed.append(doc_path)
                continue
            doc_path = doc_key

            if not self._accepts(doc_path, self.vault.info(doc_path)):
                if index.remove_document(doc_path):
                    result.documents_removed.append(doc_path)
                continue

            extracted = self._extract(
                doc_path,
                ids,
                synthesize_fallback=False,
                daily_note_format=self.daily_note_format,
            )
            if extracted is None:
                result.documents_failed.append(doc_path)
                continue

            index.set_document(doc_path, extracted.pending, extracted.completed)
            result.documents_scanned += 1
            result.tasks_detected += extracted.detected

        self.store.save(index)
        log.debug(
            "Updated %d document(s), %d tasks detected",
            result.documents_scanned,
            result.tasks_detected,
        )

        if result.tasks_detected and self.real_time_scanning:
            self.notifier.emit(COLUMN_REFRESH)
        return result

    def remove_documents(self, doc_paths: Sequence[str]) -> ScanResult:
        """Drop deleted documents from the stored index."""
        index = self.store.load().copy()
        result = ScanResult(index=index)

        for doc_path in doc_paths:
            if index.remove_document(doc_path):
                result.documents_removed.append(doc_path)

        if result.documents_removed:
            self.store.save(index)
            log.debug("Removed %d document(s) from index", len(result.documents_removed))
            if self.real_time_scanning:
                self.notifier.emit(COLUMN_REFRESH)
        return result
