"""
Canonical JSON for the report digest.

Two runs over the same event stream must hash to the same digest, so the
report dict is serialized with sorted keys, no whitespace and tuples folded
into lists before hashing.
"""

import json
from typing import Any


def canonicalize(obj: Any) -> Any:
    """Sort dict keys and turn tuples into lists, recursively."""
    if isinstance(obj, dict):
        return {k: canonicalize(obj[k]) for k in sorted(obj)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    return obj


def canonical_json_bytes(obj: Any) -> bytes:
    """
    UTF-8 bytes of the canonical JSON form of a report dict.

    Validator names are kept as UTF-8 (ensure_ascii=False) so a digest
    matches the bytes a user sees in the JSON output.
    """
    s = json.dumps(canonicalize(obj), separators=(",", ":"), ensure_ascii=False)
    return s.encode("utf-8")
