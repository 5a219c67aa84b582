"""
Identity-keyed merging of charm collections.

Remote collections are replaced wholesale on write, so every sync reads the
current collection, overlays the freshly read local records and writes the
union back. Merging is pure: the same inputs always give the same output.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..core.models import SourceName, parse_iso

Item = Dict[str, Any]
SortKey = Callable[[Item], Any]


@dataclass
class MergeResult:
    """Merged collection plus what changed relative to the existing one."""

    items: List[Item] = field(default_factory=list)
    added: int = 0
    updated: int = 0
    unchanged: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated)


def _timestamp(value: Any) -> Optional[float]:
    parsed = parse_iso(value) if isinstance(value, str) else None
    return parsed.timestamp() if parsed else None


def _ascending(value: Any) -> Tuple[bool, float]:
    """Sort key part: parsed timestamps ascending, missing ones last."""
    ts = _timestamp(value)
    return (ts is None, ts or 0.0)


def message_sort_key(item: Item) -> Any:
    row_id = item.get("rowId")
    return (_ascending(item.get("date")), row_id if isinstance(row_id, int) else 0)


def event_sort_key(item: Item) -> Any:
    return (_ascending(item.get("startDate")), str(item.get("title") or ""))


def reminder_sort_key(item: Item) -> Any:
    """Open first, then by due date, priority (high to low, none last) and title."""
    priority = item.get("priority")
    if not isinstance(priority, int) or priority <= 0:
        priority = 10
    return (
        bool(item.get("completed")),
        _ascending(item.get("dueDate")),
        priority,
        str(item.get("title") or "").lower(),
    )


def note_sort_key(item: Item) -> Any:
    # Most recently modified first
    ts = _timestamp(item.get("modifiedAt"))
    return (ts is None, -(ts or 0.0), str(item.get("title") or "").lower())


IDENTITY_KEYS: Dict[SourceName, str] = {
    SourceName.MESSAGES: "guid",
    SourceName.CALENDAR: "id",
    SourceName.REMINDERS: "id",
    SourceName.NOTES: "id",
}

SORT_KEYS: Dict[SourceName, SortKey] = {
    SourceName.MESSAGES: message_sort_key,
    SourceName.CALENDAR: event_sort_key,
    SourceName.REMINDERS: reminder_sort_key,
    SourceName.NOTES: note_sort_key,
}


def _identity(item: Any, key: str) -> Optional[str]:
    if not isinstance(item, dict):
        return None
    value = item.get(key)
    if value is None or value == "":
        return None
    return str(value)


def merge_by_identity(existing: Iterable[Any], incoming: Iterable[Any],
                      key: str, sort_key: Optional[SortKey] = None) -> MergeResult:
    """
    Union ``existing`` and ``incoming`` on ``item[key]``.

    Incoming records replace existing ones with the same identity; records
    without an identity are dropped.
    """
    merged: Dict[str, Item] = {}
    for item in existing or []:
        identity = _identity(item, key)
        if identity is not None:
            merged[identity] = item

    result = MergeResult()
    seen = set()
    for item in incoming or []:
        identity = _identity(item, key)
        if identity is None:
            continue
        if identity in seen:
            # Repeated within incoming: last one wins, counted once
            merged[identity] = item
            continue
        seen.add(identity)

        old = merged.get(identity)
        if old is None:
            result.added += 1
        elif _canonical(old) != _canonical(item):
            result.updated += 1
        else:
            result.unchanged += 1
        merged[identity] = item

    items = list(merged.values())
    if sort_key is not None:
        items.sort(key=sort_key)
    result.items = items
    return result


def merge_source(source: SourceName, existing: Iterable[Any], incoming: Iterable[Any]) -> MergeResult:
    return merge_by_identity(existing, incoming, IDENTITY_KEYS[source], SORT_KEYS[source])


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False, default=str)


def collections_equal(a: Optional[List[Any]], b: Optional[List[Any]]) -> bool:
    """Structural equality of two collections, order included."""
    return _canonical(a or []) == _canonical(b or [])
