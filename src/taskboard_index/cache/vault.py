"""
Document source for the scanner: a directory of markdown notes.

Documents are identified by their vault-relative POSIX path
(``projects/alpha.md``), which is also the index key.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Set

from taskboard_index.exceptions import DocumentReadError

log = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


@dataclass(frozen=True)
class DocumentInfo:
    """Metadata of one vault document, passed to the file/folder filter."""

    path: str
    mtime: float
    size: int

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def folder(self) -> str:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""


class FileSystemVault:
    """
    Markdown files under a root directory.

    Directory names in ``exclude_dirs`` are pruned during the walk.
    """

    def __init__(self, root: Path, exclude_dirs: Optional[Set[str]] = None) -> None:
        self.root = root
        self.exclude_dirs = set(exclude_dirs or ())

    def relative(self, path: Path) -> Optional[str]:
        """Vault-relative key for an absolute path, or None if outside the vault."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return None

    def absolute(self, doc_path: str) -> Path:
        return self.root / doc_path

    def is_excluded(self, doc_path: str) -> bool:
        parts = doc_path.split("/")[:-1]
        return any(part in self.exclude_dirs for part in parts)

    def is_document(self, doc_path: str) -> bool:
        return doc_path.endswith(MARKDOWN_SUFFIX) and not self.is_excluded(doc_path)

    def document_key(self, doc_path: str) -> Optional[str]:
        """
        Normalise a caller-supplied path to its index key.

        Returns None unless the path stays inside the vault and names a
        markdown document outside the excluded directories, i.e. one the
        full walk would also list.
        """
        normalised = Path(os.path.normpath(self.root / doc_path))
        key = self.relative(normalised)
        if key is None or not self.is_document(key):
            return None
        return key

    def list_documents(self) -> List[DocumentInfo]:
        """Every markdown document in the vault, sorted by path."""
        return sorted(self._walk(), key=lambda d: d.path)

    def _walk(self) -> Iterator[DocumentInfo]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            # Prune excluded directories in-place so os.walk doesn't descend
            dirnames[:] = [d for d in dirnames if d not in self.exclude_dirs]

            for name in filenames:
                if not name.endswith(MARKDOWN_SUFFIX):
                    continue
                full = Path(dirpath) / name
                try:
                    stat = full.stat()
                except OSError:
                    log.debug("Vanished during walk: %s", full)
                    continue
                yield DocumentInfo(
                    path=full.relative_to(self.root).as_posix(),
                    mtime=stat.st_mtime,
                    size=stat.st_size,
                )

    def info(self, doc_path: str) -> Optional[DocumentInfo]:
        """Metadata for one document, or None if it does not exist."""
        try:
            stat = self.absolute(doc_path).stat()
        except OSError:
            return None
        return DocumentInfo(path=doc_path, mtime=stat.st_mtime, size=stat.st_size)

    def read(self, doc_path: str) -> str:
        """
        Read a document as UTF-8 text.

        Raises:
            DocumentReadError: the file is missing, unreadable or not UTF-8
        """
        try:
            return self.absolute(doc_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentReadError(doc_path, str(exc)) from exc
