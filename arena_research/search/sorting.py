"""Sort vocabulary and client-side sorting.

The CLI speaks short sort names (``score``, ``created``, ...); the backends
expect the long form (``score_desc``, ``created_at_desc``, ...).  The legacy
search backend ignores sort parameters entirely, so a subset of orders is
reproduced locally on its results.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping


class SearchSort(str, Enum):
    """Backend sort values accepted by search."""

    SCORE = "score_desc"
    CREATED = "created_at_desc"
    UPDATED = "updated_at_desc"
    CONNECTIONS = "connections_count_desc"
    RANDOM = "random"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"


class ContentsSort(str, Enum):
    """Backend sort values accepted by channel contents."""

    POSITION = "position_desc"
    CREATED = "created_at_desc"
    UPDATED = "updated_at_desc"


SEARCH_SORT_FLAGS: Dict[str, str] = {
    "score": SearchSort.SCORE.value,
    "relevance": SearchSort.SCORE.value,
    "created": SearchSort.CREATED.value,
    "updated": SearchSort.UPDATED.value,
    "connections": SearchSort.CONNECTIONS.value,
    "random": SearchSort.RANDOM.value,
    "name-asc": SearchSort.NAME_ASC.value,
    "name-desc": SearchSort.NAME_DESC.value,
}

CONTENTS_SORT_FLAGS: Dict[str, str] = {
    "position": ContentsSort.POSITION.value,
    "created": ContentsSort.CREATED.value,
    "updated": ContentsSort.UPDATED.value,
}


def map_search_sort(sort: str) -> str:
    """Translate a CLI sort name to the backend value; unknown names pass through."""
    return SEARCH_SORT_FLAGS.get(sort, sort)


def map_contents_sort(sort: str) -> str:
    """Translate a channel-contents sort name; unknown names pass through."""
    return CONTENTS_SORT_FLAGS.get(sort, sort)


def connection_count(record: Mapping[str, Any]) -> int:
    """Engagement proxy for a record: a channel's combined count.

    Falls back to the raw legacy ``length`` field; items and users count 0.
    """
    counts = record.get("counts")
    combined = counts.get("contents") if isinstance(counts, Mapping) else None
    return combined or record.get("length") or 0


def sort_records(records: List[Dict[str, Any]], sort: str) -> List[Dict[str, Any]]:
    """Sort legacy search records client-side.

    Only the created, updated and connections orders can be reproduced; every
    other value (relevance, random, name orders) returns the records in the
    order the backend sent them.  Sorting is stable.
    """
    if sort == SearchSort.CREATED.value:
        return sorted(records, key=lambda r: r.get("created_at") or "", reverse=True)
    if sort == SearchSort.UPDATED.value:
        return sorted(records, key=lambda r: r.get("updated_at") or "", reverse=True)
    if sort == SearchSort.CONNECTIONS.value:
        return sorted(records, key=connection_count, reverse=True)
    return list(records)
