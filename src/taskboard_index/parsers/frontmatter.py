"""
YAML frontmatter extraction.

A frontmatter block is only recognised when the document starts with
``---`` on its very first line and a later line consists solely of ``---``.
Parsing never raises: malformed YAML is logged and treated as no metadata.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import yaml

log = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"

# Frontmatter key that marks a document for whole-file fallback tracking
FALLBACK_MARKER_KEY = "TaskBoard"

_OPENING = FRONTMATTER_DELIMITER + "\n"
_CLOSING = "\n" + FRONTMATTER_DELIMITER


def _locate_block(content: str) -> Optional[Tuple[int, int]]:
    """
    Return (yaml_end, body_start) offsets, or None if there is no block.

    yaml_end is the offset of the newline before the closing delimiter;
    body_start is the offset just past the closing delimiter line.
    """
    if not content.startswith(_OPENING):
        return None

    search_from = len(_OPENING) - 1
    while True:
        idx = content.find(_CLOSING, search_from)
        if idx == -1:
            return None
        after = idx + len(_CLOSING)
        if after == len(content):
            return idx, after
        if content[after] == "\n":
            return idx, after + 1
        if content.startswith("\r\n", after):
            return idx, after + 2
        # "---" followed by more text on the same line is not a delimiter
        search_from = after


def extract_frontmatter(content: str) -> Optional[Dict[str, Any]]:
    """
    Parse the leading YAML block of a document.

    Returns:
        The parsed mapping, or None when there is no block, the block is not
        closed, the YAML is invalid, or it does not parse to a mapping.
    """
    located = _locate_block(content)
    if located is None:
        return None

    yaml_end, _ = located
    yaml_content = content[len(_OPENING):yaml_end]

    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as exc:
        log.warning("Failed to parse frontmatter: %s", exc)
        return None

    if not isinstance(data, dict):
        return None
    return _json_safe(data)


def _json_safe(value: Any) -> Any:
    """
    Convert parsed YAML to plain JSON types.

    YAML turns date-shaped scalars (including mapping keys) into date and
    datetime objects; those become their ``str()`` form, as do any other
    non-JSON scalars. Keys are always strings, so the in-memory frontmatter
    matches what a persisted snapshot loads back.
    """
    if isinstance(value, dict):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


def frontmatter_body_start(content: str) -> int:
    """Offset of the first character after the frontmatter block (0 if none)."""
    located = _locate_block(content)
    return located[1] if located else 0


def _hashtag(tag: str) -> str:
    return tag if tag.startswith("#") else f"#{tag}"


def extract_frontmatter_tags(frontmatter: Optional[Dict[str, Any]]) -> List[str]:
    """
    Normalise the ``tags`` property of a frontmatter block to ``#tag`` form.

    A list is mapped element-wise; a comma-separated string is split, trimmed
    and empties dropped. Anything else yields no tags.
    """
    if not frontmatter:
        return []

    tags = frontmatter.get("tags")
    if not tags:
        return []

    if isinstance(tags, list):
        return [_hashtag(str(tag).strip()) for tag in tags]

    if isinstance(tags, str):
        result = [_hashtag(part.strip()) for part in tags.split(",")]
        return [tag for tag in result if len(tag) > 1]

    return []


def has_fallback_marker(frontmatter: Optional[Dict[str, Any]]) -> bool:
    """True if the frontmatter carries the whole-file tracking marker."""
    return bool(frontmatter) and FALLBACK_MARKER_KEY in frontmatter
