"""
Indexer settings, read from environment variables.

    VAULT_ROOT            vault directory (required)
    EXCLUDE_DIRS          comma-separated directory names skipped during walks
    INDEX_FILE            persisted index (default <VAULT_ROOT>/.taskboard/tasks.json)
    REAL_TIME_SCANNING    watch the vault and emit column refreshes
    DAILY_NOTES_COMPAT    infer due dates from daily-note file names
    DUE_DATE_FORMAT       moment-style daily-note name format
    BODY_INDENT_WIDTH     spaces equal to one body indentation level
    SCAN_FILTERS          JSON object with files/folders/tags filter lists
    STATUS_VOCABULARY     JSON object with labels/complete/default_pending
    POLL_INTERVAL         watcher polling interval in seconds
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Set

from taskboard_index.exceptions import ConfigurationError
from taskboard_index.parsers.checkbox import StatusVocabulary
from taskboard_index.parsers.fields import DEFAULT_BODY_INDENT, PRIORITY_EMOJIS
from taskboard_index.utils.filters import ScanFilters

DEFAULT_EXCLUDE_DIRS = ".git,.obsidian,node_modules,.trash"
DEFAULT_DUE_DATE_FORMAT = "YYYY-MM-DD"
DEFAULT_POLL_INTERVAL = 5.0
INDEX_DIR_NAME = ".taskboard"
INDEX_FILE_NAME = "tasks.json"


def parse_exclude_dirs(raw: str) -> Set[str]:
    """Parse a comma-separated list of directory names to exclude."""
    return {part.strip() for part in raw.split(",") if part.strip()}


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def _parse_json(name: str, raw: Optional[str]) -> Optional[dict]:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{name} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{name} must be a JSON object")
    return data


@dataclass
class IndexerSettings:
    vault_root: Path
    exclude_dirs: Set[str] = field(default_factory=lambda: parse_exclude_dirs(DEFAULT_EXCLUDE_DIRS))
    index_file: Optional[Path] = None
    real_time_scanning: bool = True
    daily_notes_compat: bool = False
    due_date_format: str = DEFAULT_DUE_DATE_FORMAT
    body_indent_width: int = DEFAULT_BODY_INDENT
    scan_filters: ScanFilters = field(default_factory=ScanFilters)
    vocabulary: StatusVocabulary = field(default_factory=StatusVocabulary)
    priority_emojis: Dict[int, str] = field(default_factory=lambda: dict(PRIORITY_EMOJIS))
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        if self.body_indent_width < 1:
            raise ConfigurationError("BODY_INDENT_WIDTH must be at least 1")
        if self.index_file is None:
            self.index_file = self.vault_root / INDEX_DIR_NAME / INDEX_FILE_NAME

    @property
    def daily_note_format(self) -> Optional[str]:
        """The due-date format to apply, or None when compatibility is off."""
        return self.due_date_format if self.daily_notes_compat else None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "IndexerSettings":
        env = os.environ if env is None else env

        vault_root_env = env.get("VAULT_ROOT", "")
        if not vault_root_env:
            raise ConfigurationError("VAULT_ROOT environment variable is not set")
        vault_root = Path(vault_root_env)

        index_file = env.get("INDEX_FILE")

        try:
            body_indent = int(env.get("BODY_INDENT_WIDTH", DEFAULT_BODY_INDENT))
            poll_interval = float(env.get("POLL_INTERVAL", DEFAULT_POLL_INTERVAL))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        filters_data = _parse_json("SCAN_FILTERS", env.get("SCAN_FILTERS"))
        vocabulary_data = _parse_json("STATUS_VOCABULARY", env.get("STATUS_VOCABULARY"))

        try:
            scan_filters = ScanFilters.from_dict(filters_data)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        return cls(
            vault_root=vault_root,
            exclude_dirs=parse_exclude_dirs(env.get("EXCLUDE_DIRS", DEFAULT_EXCLUDE_DIRS)),
            index_file=Path(index_file) if index_file else None,
            real_time_scanning=_parse_bool(env.get("REAL_TIME_SCANNING"), True),
            daily_notes_compat=_parse_bool(env.get("DAILY_NOTES_COMPAT"), False),
            due_date_format=env.get("DUE_DATE_FORMAT", DEFAULT_DUE_DATE_FORMAT),
            body_indent_width=body_indent,
            scan_filters=scan_filters,
            vocabulary=StatusVocabulary.from_dict(vocabulary_data) if vocabulary_data else StatusVocabulary(),
            poll_interval=poll_interval,
        )
