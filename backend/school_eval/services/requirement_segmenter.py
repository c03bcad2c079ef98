"""
Requirement Segmenter

Splits free-form (Khmer/English) requirement text into discrete checklist
item texts. Source requirements enumerate sub-clauses with empty "()" bullets;
unmarked long prose falls back to punctuation-based splitting.

    split_requirements("Submit plan () Attach schedule () File budget")
    -> ["Submit plan", "Attach schedule", "File budget"]
"""

import re
from typing import List, Optional

MAX_ITEMS = 60
FALLBACK_MIN_LENGTH = 80  # only prose longer than this is split on punctuation
MIN_FRAGMENT_LENGTH = 3

_WHITESPACE_RE = re.compile(r"\s+")
_EMPTY_PARENS_RE = re.compile(r"\(\s*\)\s*")
# Khmer full stop, semicolon, " - ", " • " or " · "
_PUNCTUATION_RE = re.compile(r"[។;]|(?:\s-\s)|(?:\s[•·]\s)")


def normalize_space(value: Optional[object]) -> str:
    """Collapse whitespace runs to a single space and trim"""
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def normalize_key(value: Optional[object]) -> str:
    """Comparison key for duplicate detection: whitespace- and case-insensitive"""
    return normalize_space(value).casefold()


def split_requirements(text: Optional[str]) -> List[str]:
    """Turn a raw requirement string into ordered checklist item texts"""
    raw = normalize_space(text)
    if not raw:
        return []

    parts = [normalize_space(p) for p in _EMPTY_PARENS_RE.split(raw)]
    parts = [p for p in parts if p]

    if len(parts) <= 1 and len(raw) > FALLBACK_MIN_LENGTH:
        parts = [normalize_space(p) for p in _PUNCTUATION_RE.split(raw)]
        parts = [p for p in parts if len(p) >= MIN_FRAGMENT_LENGTH]

    return parts[:MAX_ITEMS]
