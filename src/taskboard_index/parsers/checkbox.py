"""
Checklist line classification.

A checklist line starts at column 0 with a bullet, a space and a bracketed
single-character status symbol: ``- [ ]``, ``- [x]``, ``* [/]``. Indented
items are body lines of the task above them, not tasks of their own.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, NamedTuple, Optional

TASK_LINE_RE = re.compile(r"^[-*+] \[(.)\]")

UNCHECKED = " "

# Checkbox char → label
DEFAULT_STATUS_LABELS: Dict[str, str] = {
    " ": "unchecked",
    "x": "checked",
    "X": "checked",
    "/": "in-progress",
    "-": "cancelled",
}

DEFAULT_COMPLETE_SYMBOLS: FrozenSet[str] = frozenset({"x", "X"})


@dataclass(frozen=True)
class StatusVocabulary:
    """
    Configurable status table.

    Only symbols in ``complete`` route a task to the Completed partition;
    every other symbol, including unknown ones, means pending.
    """

    labels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_STATUS_LABELS))
    complete: FrozenSet[str] = DEFAULT_COMPLETE_SYMBOLS
    default_pending: str = UNCHECKED

    def is_complete(self, symbol: str) -> bool:
        return symbol in self.complete

    def label(self, symbol: str) -> str:
        return self.labels.get(symbol, "unknown")

    @classmethod
    def from_dict(cls, data: dict) -> "StatusVocabulary":
        """
        Build from ``{"labels": {...}, "complete": [...], "default_pending": " "}``.

        Missing keys fall back to the defaults.
        """
        labels = data.get("labels") or dict(DEFAULT_STATUS_LABELS)
        complete = data.get("complete")
        return cls(
            labels=dict(labels),
            complete=frozenset(complete) if complete else DEFAULT_COMPLETE_SYMBOLS,
            default_pending=data.get("default_pending", UNCHECKED),
        )


DEFAULT_VOCABULARY = StatusVocabulary()


class LineClass(NamedTuple):
    symbol: str
    is_completed: bool


def is_task_line(line: str) -> bool:
    return TASK_LINE_RE.match(line) is not None


def extract_checkbox_symbol(line: str) -> str:
    """Return the status symbol of a checklist line, or "" if not one."""
    m = TASK_LINE_RE.match(line)
    return m.group(1) if m else ""


def is_completed(line: str, vocabulary: StatusVocabulary = DEFAULT_VOCABULARY) -> bool:
    m = TASK_LINE_RE.match(line)
    return bool(m) and vocabulary.is_complete(m.group(1))


def classify_line(
    line: str, vocabulary: StatusVocabulary = DEFAULT_VOCABULARY
) -> Optional[LineClass]:
    """Return (symbol, is_completed) for a checklist line, None otherwise."""
    m = TASK_LINE_RE.match(line)
    if not m:
        return None
    symbol = m.group(1)
    return LineClass(symbol=symbol, is_completed=vocabulary.is_complete(symbol))
