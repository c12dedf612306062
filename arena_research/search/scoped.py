"""Scope-aware search over the authenticated (v3) backend."""

from __future__ import annotations

import logging

from arena_research.core.data_models import Entity, Page
from arena_research.core.http_client import ArenaTransport
from arena_research.search.options import SearchOptions


class ScopedSearch:
    """Searches the caller's own content or network.

    The backend honours every option itself and already answers with
    canonical records and exact pagination, so nothing is reshaped here.
    """

    def __init__(self, transport: ArenaTransport) -> None:
        self.transport = transport
        self.logger = logging.getLogger(self.__class__.__name__)

    async def search(self, query: str, options: SearchOptions, token: str) -> Page[Entity]:
        params = {
            "q": query,
            "type": options.kind.value if options.kind else None,
            "sort": options.sort,
            "scope": options.scope.value,
            "page": options.page,
            "per": options.per_page,
        }
        self.logger.info("Scoped search %r (scope=%s, page %d)", query, options.scope.value, options.page)
        response = await self.transport.get("/search", token=token, params=params)
        return Page.from_dict(response.payload or {})
