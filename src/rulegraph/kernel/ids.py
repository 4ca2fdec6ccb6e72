"""Identifier canonicalization for parameter and rule names.

Canonical ids are trimmed, lower_snake_case and ASCII only. The function is
total and idempotent: ``normalize_id(normalize_id(x)) == normalize_id(x)``.
"""

import re

_SEPARATORS = re.compile(r"[\s\-]+")
_NON_ASCII = re.compile(r"[^\x00-\x7f]")
_NOT_ID_CHAR = re.compile(r"[^a-z0-9_]")
_UNDERSCORE_RUNS = re.compile(r"_+")


def normalize_id(raw: str) -> str:
    """Normalize a raw identifier to its canonical form."""
    s = raw.strip().lower()
    s = _SEPARATORS.sub("_", s)
    s = _NON_ASCII.sub("", s)
    s = _NOT_ID_CHAR.sub("", s)
    s = _UNDERSCORE_RUNS.sub("_", s)
    return s.strip("_")


def is_valid_id(raw: str) -> bool:
    """True if the identifier is non-empty after normalization."""
    return len(normalize_id(raw)) > 0
