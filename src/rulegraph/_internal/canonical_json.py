"""Canonical JSON serialization.

One serializer for everything that must be byte-stable: diff rule hashes,
CLI output and test snapshots.
"""

import hashlib
import json
from typing import Any


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization.

    Rules:
    - Sorted keys
    - Stable separators (",", ":")
    - Lists keep their order (sort before calling where order is not meaningful)
    - Non-ASCII characters written as-is

    Args:
        obj: Python object to serialize

    Returns:
        Canonical JSON string
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False
    )


def canonical_sha256(obj: Any) -> str:
    """Hex sha256 of the UTF-8 canonical JSON of ``obj``.

    Lone surrogates (legal in decoded JSON strings) are encoded as-is.
    """
    return hashlib.sha256(canonical_dumps(obj).encode("utf-8", "surrogatepass")).hexdigest()


def pretty_dumps(obj: Any) -> str:
    """Human-facing JSON: sorted keys, two-space indent."""
    return json.dumps(obj, sort_keys=True, indent=2, ensure_ascii=False)
