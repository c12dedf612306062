"""Global discovery search over the legacy (v2) backend.

The legacy backend is the only one that ranks global results by relevance,
but it answers in its own flat shape and only reports a page count.  This
module picks the endpoint for a kind filter, normalizes the records and
rebuilds canonical pagination metadata.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from arena_research.core.data_models import Entity, Page, PageMeta, entity_from_dict
from arena_research.core.http_client import ArenaTransport
from arena_research.search.normalizer import normalize_legacy_record
from arena_research.search.options import EntityKind, SearchOptions
from arena_research.search.sorting import sort_records

logger = logging.getLogger(__name__)

# Result groups in the order they are concatenated
RESULT_GROUPS = ("channels", "blocks", "users")


def legacy_endpoint(kind: Optional[EntityKind]) -> str:
    """Pick the legacy search endpoint for a kind filter.

    There is no finer filter than "blocks": asking for Link returns every
    item kind.
    """
    if kind is None:
        return "/search"
    if kind is EntityKind.CHANNEL:
        return "/search/channels"
    if kind is EntityKind.USER:
        return "/search/users"
    return "/search/blocks"


def legacy_page_meta(response: Mapping[str, Any], page: int, per_page: int) -> PageMeta:
    """Rebuild canonical pagination from a legacy response.

    The legacy backend never reports an item count, so ``total_count`` is
    ``total_pages * per_page`` and flagged as approximate.
    """
    current = response.get("current_page") or page
    per = response.get("per") or per_page
    total_pages = response.get("total_pages") or 0
    return PageMeta(
        current_page=current,
        next_page=current + 1 if current < total_pages else None,
        prev_page=current - 1 if current > 1 else None,
        per_page=per,
        total_pages=total_pages,
        total_count=total_pages * per,
        has_more_pages=current < total_pages,
        total_count_approximate=True,
    )


def legacy_records(response: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Normalize channels, then blocks, then users; groups never interleave."""
    records: List[Dict[str, Any]] = []
    for group in RESULT_GROUPS:
        records.extend(normalize_legacy_record(r) for r in response.get(group) or [])
    return records


class LegacySearch:
    """Runs searches against the legacy discovery backend."""

    def __init__(self, transport: ArenaTransport) -> None:
        self.transport = transport
        self.logger = logging.getLogger(self.__class__.__name__)

    async def search(self, query: str, options: SearchOptions, token: Optional[str]) -> Page[Entity]:
        """Search globally and return a canonical, client-side sorted page."""
        endpoint = legacy_endpoint(options.kind)
        if options.kind is not None and options.kind.is_item and options.kind is not EntityKind.BLOCK:
            self.logger.warning("Legacy search cannot filter by %s; returning all block kinds", options.kind.value)
        params = {"q": query, "per": options.per_page, "page": options.page}
        self.logger.info("Legacy search %r via %s (page %d)", query, endpoint, options.page)

        response = await self.transport.get(self.transport.legacy_url(endpoint), token=token, params=params)
        payload = response.payload or {}

        records = sort_records(legacy_records(payload), options.sort)
        items = []
        for record in records:
            try:
                items.append(entity_from_dict(record))
            except ValueError as e:
                self.logger.warning("Skipping legacy record %s: %s", record.get("id"), e)

        return Page(items=tuple(items), meta=legacy_page_meta(payload, options.page, options.per_page))
