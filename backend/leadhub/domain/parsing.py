# leadhub/domain/parsing.py
from __future__ import annotations

from typing import Any


def get_nested(payload: Any, path: str | None) -> Any:
    """Tiny dot-path getter: 'data.items' or 'contact.address.city'. Empty path returns payload."""
    if not path:
        return payload
    cur: Any = payload
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def source_value(record: dict[str, Any], source_key: str | None) -> str:
    """
    Read one mapped value from a raw record as trimmed text.

    A literal key wins over a dotted path, so CSV headers containing dots
    still resolve. Missing keys and None read as "".
    """
    if not source_key:
        return ""
    if source_key in record:
        v = record[source_key]
    elif "." in source_key:
        v = get_nested(record, source_key)
    else:
        v = None
    if v is None or isinstance(v, (dict, list)):
        return ""
    return str(v).strip()
