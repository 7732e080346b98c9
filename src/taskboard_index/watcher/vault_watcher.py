"""
Polling-based vault file system watcher.

Synced and container-mounted vaults do not reliably forward filesystem
events, so we use periodic mtime polling instead of an event-based observer.

The watcher runs a daemon thread that:
1. Lists the vault's markdown documents every poll interval
2. Compares their mtimes against the previous poll
3. Enqueues a refresh for new or modified documents
4. Enqueues a removal for documents that disappeared
"""

import logging
import threading
from typing import Dict, Optional

from taskboard_index.cache.vault import FileSystemVault

log = logging.getLogger(__name__)

_DEFAULT_POLL_INTERVAL = 5.0


class VaultWatcher:
    """
    Polling-based vault watcher.

    ``service`` is anything with enqueue_refresh(path) and
    enqueue_removal(path), normally the IndexService.

    Usage:
        watcher = VaultWatcher(service, vault)
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(
        self,
        service,
        vault: FileSystemVault,
        poll_interval: Optional[float] = None,
    ) -> None:
        self._service = service
        self._vault = vault
        self._poll_interval = poll_interval or _DEFAULT_POLL_INTERVAL
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        # Known documents and their mtimes from the last poll cycle
        self._known: Dict[str, float] = {}

    def start(self) -> None:
        """Start the polling thread (daemon)."""
        log.info("Starting vault watcher (polling every %.1fs)", self._poll_interval)
        # Seed known documents from the current state
        self._known = self._snapshot()

        self._thread = threading.Thread(
            target=self._poll_loop, daemon=True, name="vault-watcher"
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the poll thread to stop and wait for it."""
        log.info("Stopping vault watcher")
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self._poll_interval + 2)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _poll_loop(self) -> None:
        """Main polling loop, runs until stop_event is set."""
        while not self._stop_event.is_set():
            self._stop_event.wait(self._poll_interval)
            if self._stop_event.is_set():
                break
            try:
                self.check_for_changes()
            except Exception:
                log.exception("Error during poll cycle")

    def check_for_changes(self) -> int:
        """
        Single poll cycle: diff the current listing against the last one.

        Documents that appeared or whose mtime moved forward are queued for
        refresh; documents that vanished are queued for removal.

        Returns:
            Number of changes enqueued
        """
        current = self._snapshot()
        changed = sorted(
            doc_path
            for doc_path, mtime in current.items()
            if doc_path not in self._known or mtime > self._known[doc_path]
        )
        deleted = sorted(set(self._known) - set(current))

        for doc_path in changed:
            log.debug("Document changed: %s", doc_path)
            self._service.enqueue_refresh(doc_path)
        for doc_path in deleted:
            log.debug("Document deleted: %s", doc_path)
            self._service.enqueue_removal(doc_path)

        self._known = current
        return len(changed) + len(deleted)

    def _snapshot(self) -> Dict[str, float]:
        """Return {doc_path: mtime} for every markdown document."""
        try:
            return {doc.path: doc.mtime for doc in self._vault.list_documents()}
        except OSError:
            log.exception("Error walking vault for documents")
            return dict(self._known)
