"""
Date format utilities for daily-note compatibility.

Daily notes are named after their date using a moment.js-style format
string (``YYYY-MM-DD``, ``DD.MM.YYYY``, ``YYYY/MM/DD`` ...). A base name only
counts as a date when it matches the format exactly (strict parsing).
"""

import re
from datetime import datetime
from typing import Optional

# moment.js token → strftime directive, longest tokens first
_MOMENT_TOKENS = [
    ("YYYY", "%Y"),
    ("MMMM", "%B"),
    ("dddd", "%A"),
    ("MMM", "%b"),
    ("ddd", "%a"),
    ("YY", "%y"),
    ("MM", "%m"),
    ("DD", "%d"),
    ("HH", "%H"),
    ("mm", "%M"),
    ("ss", "%S"),
]

_TOKEN_RE = re.compile("|".join(re.escape(token) for token, _ in _MOMENT_TOKENS))
_TOKEN_MAP = dict(_MOMENT_TOKENS)


def moment_to_strftime(fmt: str) -> str:
    """
    Translate a moment.js format string into a strftime format.

    Literal ``%`` characters are escaped; text inside ``[...]`` is kept
    verbatim, as moment does.
    """
    out = []
    pos = 0
    for literal in re.finditer(r"\[([^\]]*)\]", fmt):
        out.append(_translate_tokens(fmt[pos:literal.start()]))
        out.append(literal.group(1).replace("%", "%%"))
        pos = literal.end()
    out.append(_translate_tokens(fmt[pos:]))
    return "".join(out)


def _translate_tokens(segment: str) -> str:
    segment = segment.replace("%", "%%")
    return _TOKEN_RE.sub(lambda m: _TOKEN_MAP[m.group()], segment)


def parse_strict(value: str, moment_format: str) -> Optional[datetime]:
    """
    Parse ``value`` against a moment-style format, strictly.

    strptime accepts unpadded fields ("2024-9-1" for "%Y-%m-%d"); strict
    parsing additionally requires that re-formatting the parsed date gives
    back the exact input.
    """
    if not value or not moment_format:
        return None
    fmt = moment_to_strftime(moment_format)
    try:
        parsed = datetime.strptime(value, fmt)
    except ValueError:
        return None
    if parsed.strftime(fmt) != value:
        return None
    return parsed


def matches_date_format(value: str, moment_format: str) -> bool:
    return parse_strict(value, moment_format) is not None
