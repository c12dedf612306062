"""Search routing between the legacy and authenticated backends."""

from __future__ import annotations

import logging
from typing import Optional

from arena_research.core.data_models import Entity, Page
from arena_research.core.errors import require_token
from arena_research.core.http_client import ArenaTransport
from arena_research.search.legacy import LegacySearch
from arena_research.search.options import SearchOptions
from arena_research.search.scoped import ScopedSearch


class SearchRouter:
    """Chooses the backend for a search.

    Scoped searches (``my``, ``following``) always go to the authenticated
    backend because the legacy one has no notion of scope.  Global searches go
    to the legacy backend, which ranks by relevance but ignores sort
    parameters, so its results are sorted client-side where possible.  Both
    paths need a token and fail before any request without one.
    """

    def __init__(self, transport: ArenaTransport) -> None:
        self.legacy = LegacySearch(transport)
        self.scoped = ScopedSearch(transport)
        self.logger = logging.getLogger(self.__class__.__name__)

    async def search(self, query: str, options: SearchOptions, token: Optional[str]) -> Page[Entity]:
        token = require_token(token)
        if not options.is_global:
            self.logger.debug("Routing %r to scoped search", query)
            return await self.scoped.search(query, options, token)
        self.logger.debug("Routing %r to legacy search", query)
        return await self.legacy.search(query, options, token)
