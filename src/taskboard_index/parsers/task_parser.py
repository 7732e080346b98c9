"""
Task assembly for markdown documents.

Main API:
    build_task(...)              → TaskRecord for one checklist line
    extract_document_tasks(...)  → DocumentTasks for one document

extract_document_tasks runs the whole per-document pipeline: frontmatter,
line classification, tag filter, field extraction, body collection and
routing into pending / completed. It is shared by the full vault scan and the
incremental updater, which differ only in the options they pass.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from taskboard_index.models.task import TaskRecord
from taskboard_index.parsers.checkbox import DEFAULT_VOCABULARY, StatusVocabulary, classify_line
from taskboard_index.parsers.fields import (
    DEFAULT_BODY_INDENT,
    extract_body,
    extract_completion_date,
    extract_due_date,
    extract_priority,
    extract_tags,
    extract_time,
    extract_title,
)
from taskboard_index.parsers.frontmatter import (
    extract_frontmatter,
    extract_frontmatter_tags,
    frontmatter_body_start,
    has_fallback_marker,
)
from taskboard_index.utils.dates import matches_date_format
from taskboard_index.utils.ids import TaskIdSource

log = logging.getLogger(__name__)

TagFilter = Callable[[Sequence[str]], bool]


def _accept_all(tags: Sequence[str]) -> bool:
    return True


@dataclass
class DocumentTasks:
    """Tasks extracted from one document, already routed by status."""

    file_path: str
    pending: List[TaskRecord] = field(default_factory=list)
    completed: List[TaskRecord] = field(default_factory=list)
    detected: int = 0
    frontmatter: Optional[Dict[str, Any]] = None

    @property
    def has_fallback(self) -> bool:
        return self.detected == 0 and bool(self.pending)


def document_basename(file_path: str) -> str:
    """File name without its ``.md`` extension."""
    name = PurePosixPath(file_path).name
    return name[:-3] if name.endswith(".md") else name


def build_task(
    line: str,
    lines: Sequence[str],
    index: int,
    *,
    file_path: str,
    task_id: int,
    symbol: str,
    tags: List[str],
    frontmatter: Optional[Dict[str, Any]],
    frontmatter_tags: List[str],
    priority_emojis: Optional[Mapping[int, str]] = None,
    body_indent: int = DEFAULT_BODY_INDENT,
) -> TaskRecord:
    """Assemble the TaskRecord for the checklist line at ``lines[index]``."""
    return TaskRecord(
        id=task_id,
        status=symbol,
        title=extract_title(line),
        body=extract_body(lines, index + 1, body_indent),
        time=extract_time(line),
        due=extract_due_date(line),
        tags=tags,
        frontmatter_tags=list(frontmatter_tags),
        priority=extract_priority(line, priority_emojis),
        completion=extract_completion_date(line),
        file_path=file_path,
        frontmatter=frontmatter,
    )


def build_fallback_task(
    content: str,
    *,
    file_path: str,
    task_id: int,
    frontmatter: Optional[Dict[str, Any]],
    frontmatter_tags: List[str],
    status: str = " ",
) -> TaskRecord:
    """
    Synthesize the whole-document task for a marked document with no tasks.

    Title is the base name; body is every non-blank line after the frontmatter.
    """
    remainder = content[frontmatter_body_start(content):]
    body = [line for line in remainder.split("\n") if line.strip()]
    return TaskRecord(
        id=task_id,
        status=status,
        title=document_basename(file_path),
        body=body,
        tags=list(frontmatter_tags),
        frontmatter_tags=list(frontmatter_tags),
        file_path=file_path,
        frontmatter=frontmatter,
    )


def extract_document_tasks(
    content: str,
    file_path: str,
    *,
    ids: Optional[TaskIdSource] = None,
    vocabulary: StatusVocabulary = DEFAULT_VOCABULARY,
    tag_filter: TagFilter = _accept_all,
    priority_emojis: Optional[Mapping[int, str]] = None,
    body_indent: int = DEFAULT_BODY_INDENT,
    synthesize_fallback: bool = False,
    daily_note_format: Optional[str] = None,
) -> DocumentTasks:
    """
    Extract and route every checklist task of one document.

    Args:
        content: Full document text
        file_path: Document identifier stored on every task
        ids: Source of task IDs (a fresh one is used if omitted)
        vocabulary: Status table deciding which symbols mean completed
        tag_filter: Predicate over a line's inline tags; rejected lines are skipped
        priority_emojis: Emoji table for the last priority rule
        body_indent: Spaces equal to one level of body indentation
        synthesize_fallback: Create the whole-document task for marked documents
        daily_note_format: When set, tasks without a due date take the
            document base name as due date if it matches this format

    Returns:
        DocumentTasks with pending/completed in line order
    """
    ids = ids or TaskIdSource()
    lines = content.split("\n")
    frontmatter = extract_frontmatter(content)
    frontmatter_tags = extract_frontmatter_tags(frontmatter)
    result = DocumentTasks(file_path=file_path, frontmatter=frontmatter)

    daily_due = ""
    if daily_note_format:
        basename = document_basename(file_path)
        if matches_date_format(basename, daily_note_format):
            daily_due = basename

    for index, line in enumerate(lines):
        classified = classify_line(line, vocabulary)
        if classified is None:
            continue

        tags = extract_tags(line)
        if not tag_filter(tags):
            continue

        result.detected += 1
        task = build_task(
            line,
            lines,
            index,
            file_path=file_path,
            task_id=ids.next_id(),
            symbol=classified.symbol,
            tags=tags,
            frontmatter=frontmatter,
            frontmatter_tags=frontmatter_tags,
            priority_emojis=priority_emojis,
            body_indent=body_indent,
        )
        if not task.due and daily_due:
            task.due = daily_due

        if classified.is_completed:
            result.completed.append(task)
        else:
            result.pending.append(task)

    if synthesize_fallback and not result.pending and has_fallback_marker(frontmatter):
        log.debug("Synthesizing fallback task for %s", file_path)
        result.pending.append(
            build_fallback_task(
                content,
                file_path=file_path,
                task_id=ids.next_id(),
                frontmatter=frontmatter,
                frontmatter_tags=frontmatter_tags,
                status=vocabulary.default_pending,
            )
        )

    return result
