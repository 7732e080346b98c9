"""
Scan filters: which documents are scanned and which tasks are indexed.

Each filter list has a polarity:
    1: only scan the listed entries
    2: scan everything except the listed entries
    3: disabled (scan everything)
"""

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Sequence

POLARITY_ONLY = 1
POLARITY_EXCLUDE = 2
POLARITY_DISABLED = 3


@dataclass
class FilterList:
    polarity: int = POLARITY_DISABLED
    values: List[str] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return self.polarity in (POLARITY_ONLY, POLARITY_EXCLUDE) and bool(self.values)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FilterList":
        if not data:
            return cls()
        polarity = int(data.get("polarity", POLARITY_DISABLED))
        if polarity not in (POLARITY_ONLY, POLARITY_EXCLUDE, POLARITY_DISABLED):
            raise ValueError(f"Invalid filter polarity: {polarity}")
        return cls(polarity=polarity, values=[str(v) for v in data.get("values", [])])


@dataclass
class ScanFilters:
    files: FilterList = field(default_factory=FilterList)
    folders: FilterList = field(default_factory=FilterList)
    tags: FilterList = field(default_factory=FilterList)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScanFilters":
        data = data or {}
        return cls(
            files=FilterList.from_dict(data.get("files")),
            folders=FilterList.from_dict(data.get("folders")),
            tags=FilterList.from_dict(data.get("tags")),
        )


def _in_folder(path: str, folder: str) -> bool:
    folder = folder.strip("/")
    if not folder:
        return True
    return folder in [p.as_posix() for p in PurePosixPath(path).parents]


def scan_filter_for_files_and_folders(
    path: str, metadata: Any, filters: ScanFilters
) -> bool:
    """
    Decide whether a document belongs to the scanned corpus.

    An explicit file entry decides first, then the enclosing folder entries.
    A document matched by neither is excluded only when an "only these" list
    is active. ``metadata`` is accepted for custom filters and unused here.
    """
    files, folders = filters.files, filters.folders

    if files.active and path in files.values:
        return files.polarity == POLARITY_ONLY

    if folders.active and any(_in_folder(path, folder) for folder in folders.values):
        return folders.polarity == POLARITY_ONLY

    only_lists = [f for f in (files, folders) if f.active and f.polarity == POLARITY_ONLY]
    return not only_lists


def _normalise_tag(tag: str) -> str:
    tag = tag.strip().lower()
    return tag if tag.startswith("#") else f"#{tag}"


def scan_filter_for_tags(tags: Sequence[str], filters: ScanFilters) -> bool:
    """Decide whether a checklist line with these inline tags is indexed."""
    tag_filter = filters.tags
    if not tag_filter.active:
        return True

    wanted = {_normalise_tag(v) for v in tag_filter.values}
    hit = any(_normalise_tag(t) in wanted for t in tags)

    if tag_filter.polarity == POLARITY_ONLY:
        return hit
    return not hit
