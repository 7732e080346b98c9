"""
Inline field extractors for checklist lines.

Each field supports several syntaxes. They are declared as ordered rule
tables (``FieldRule``): the first rule whose pattern matches the raw line
wins, so precedence is the table order. Every extractor is total: when no
rule matches it returns the field's default ("" or 0).

Supported syntaxes per field, highest precedence first:

    time        [time:: 10:00 - 11:00]   @time(10:00 - 11:00)
                ⏰ 10:00 - 11:00          - [ ] 10:00 - 11:00 at line start
                ⏰ [10:00 - 11:00]
    due         📅 2024-09-28            [due:: 2024-09-28]      @due(2024-09-28)
    priority    [priority:: 2]           @priority(2)            priority emoji
    completion  ✅ 2024-09-28T10:00      [completion:: ...]      @completion(...)
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Pattern, Sequence

# Integer priority → emoji glyph (Tasks plugin compatible)
PRIORITY_EMOJIS: Dict[int, str] = {
    1: "🔺",
    2: "⏫",
    3: "🔼",
    4: "🔽",
    5: "⏬",
}

# Spaces equivalent to one level of body indentation
DEFAULT_BODY_INDENT = 4

_MARKER = r"^[-*+] \[.\]"
_TIME_RANGE = r"\d{2}:\d{2}\s*-\s*\d{2}:\d{2}"
_DATE = r"\d{4}-\d{2}-\d{2}|\d{2}-\d{2}-\d{4}"

_MARKER_RE = re.compile(_MARKER + r"\s*")
_MARKUP_TAG_RE = re.compile(r"<(mark|font).*?>")
_TAG_RE = re.compile(r"\s+#([^\s;@()\[\]{}<>]{1,20})")


@dataclass(frozen=True)
class FieldRule:
    """One syntax of one field: a pattern and how to turn its match into a value."""

    name: str
    pattern: Pattern[str]
    extract: Callable[["re.Match[str]"], Any]

    def apply(self, text: str) -> Optional[Any]:
        m = self.pattern.search(text)
        if m is None:
            return None
        return self.extract(m)


def _group(m: "re.Match[str]") -> str:
    return m.group(1)


def _stripped_group(m: "re.Match[str]") -> str:
    return m.group(1).strip()


def _int_group(m: "re.Match[str]") -> int:
    return int(m.group(1))


def apply_rules(rules: Sequence[FieldRule], text: str, default: Any) -> Any:
    """Return the value of the first matching rule, or ``default``."""
    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            return value
    return default


def matching_rule(rules: Sequence[FieldRule], text: str) -> Optional[str]:
    """Name of the rule that decides the field for this line, if any."""
    for rule in rules:
        if rule.pattern.search(text):
            return rule.name
    return None


TIME_RULES: List[FieldRule] = [
    FieldRule("dataview", re.compile(r"\[time::\s*(.*?)\]"), _group),
    FieldRule("call", re.compile(r"@time\((.*?)\)"), _group),
    FieldRule("emoji", re.compile(r"⏰\s*(" + _TIME_RANGE + r")"), _group),
    FieldRule("line-start", re.compile(_MARKER + r"\s*(" + _TIME_RANGE + r")"), _group),
    FieldRule("emoji-bracketed", re.compile(r"⏰\s*\[(" + _TIME_RANGE + r")\]"), _group),
]

DUE_RULES: List[FieldRule] = [
    FieldRule("emoji", re.compile(r"📅\s*(" + _DATE + r")"), _group),
    FieldRule("dataview", re.compile(r"\[due::\s*(" + _DATE + r")\]"), _group),
    FieldRule("call", re.compile(r"@due\(\s*(" + _DATE + r")\)"), _group),
]

PRIORITY_RULES: List[FieldRule] = [
    FieldRule("dataview", re.compile(r"\[priority::\s*(\d{1,2})\]"), _int_group),
    FieldRule("call", re.compile(r"@priority\(\s*(\d{1,2})\s*\)"), _int_group),
]

COMPLETION_RULES: List[FieldRule] = [
    FieldRule("emoji", re.compile(r"✅\s*(\S*)"), _stripped_group),
    FieldRule("dataview", re.compile(r"\[completion::\s*(.*?)\]"), _stripped_group),
    FieldRule("call", re.compile(r"@completion\(\s*(.*?)\s*\)"), _stripped_group),
]


# ---------------------------------------------------------------------------
# Public extractors
# ---------------------------------------------------------------------------

def extract_title(line: str) -> str:
    """The line with its bullet/status marker removed. Trailing markers are kept."""
    return _MARKER_RE.sub("", line, count=1).strip()


def extract_time(line: str) -> str:
    return apply_rules(TIME_RULES, line, "")


def extract_due_date(line: str) -> str:
    return apply_rules(DUE_RULES, line, "")


def _emoji_priority(line: str, emojis: Mapping[int, str]) -> int:
    """Priority from the first emoji of the table found in the line."""
    glyphs = [re.escape(e) for e in emojis.values() if e]
    if not glyphs:
        return 0
    pattern = re.compile("|".join(r"\s*" + g + r"\s*" for g in glyphs))

    matches = [m.group().strip() for m in pattern.finditer(line)]
    for found in matches:
        if not found:
            continue
        for key, emoji in emojis.items():
            if emoji == found:
                return int(key)
    return 0


def extract_priority(line: str, emojis: Optional[Mapping[int, str]] = None) -> int:
    value = apply_rules(PRIORITY_RULES, line, None)
    if value is not None:
        return value
    return _emoji_priority(line, PRIORITY_EMOJIS if emojis is None else emojis)


def extract_completion_date(line: str) -> str:
    return apply_rules(COMPLETION_RULES, line, "")


def extract_tags(line: str) -> List[str]:
    """
    Collect every whitespace-preceded ``#tag`` in order of appearance.

    ``<mark ...>`` and ``<font ...>`` opening tags are removed first so their
    attributes (``style="color: #ff0000"``) are not mistaken for tags.
    """
    text = _MARKUP_TAG_RE.sub("", line)
    return ["#" + m.group(1) for m in _TAG_RE.finditer(text)]


# ---------------------------------------------------------------------------
# Body collector
# ---------------------------------------------------------------------------

def extract_body(
    lines: Sequence[str], start: int, indent_width: int = DEFAULT_BODY_INDENT
) -> List[str]:
    """
    Collect the indented continuation lines of the task above ``start``.

    Stops at the first blank line or the first line without one level of
    indentation (a tab or ``indent_width`` spaces); that line is not consumed.
    Lines are returned verbatim.
    """
    space_indent = " " * indent_width
    body: List[str] = []
    for line in lines[start:]:
        if not line.strip():
            break
        if line.startswith("\t") or line.startswith(space_indent):
            body.append(line)
        else:
            break
    return body
