"""Central orchestrator for arena-research.

This module defines the ``Orchestrator`` class: the single entry point the
CLI (or any script) calls.  It owns the transport, the response cache, the
search router and the graph operations, and runs every read through the
same path:

    cache lookup -> (miss) search/traversal -> transport -> cache store

Fresh results are stored through ``to_dict`` and rebuilt with ``from_dict``
on a hit, so a cached answer equals the one originally returned.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from arena_research.core.cache import ResponseCache
from arena_research.core.config import Config, get_config
from arena_research.core.data_models import (
    Actor,
    Container,
    Entity,
    Item,
    Page,
    RateLimitStatus,
    item_from_dict,
)
from arena_research.core.http_client import ArenaTransport
from arena_research.core.logging_setup import log_performance
from arena_research.core.rate_limiter import get_rate_gate
from arena_research.core.traversal import GraphTraversal, Identifier, ResourceLookup
from arena_research.search.options import MAX_PER_PAGE, SearchOptions
from arena_research.search.router import SearchRouter

R = TypeVar("R")

_UNSET: Any = object()


def _container_page(payload: Any) -> Page[Container]:
    return Page.from_dict(payload, Container.from_dict)


class Orchestrator:
    """Coordinates cached reads against the Are.na APIs."""

    def __init__(
        self,
        config: Optional[Config] = None,
        *,
        transport: Optional[ArenaTransport] = None,
        cache: Optional[ResponseCache] = None,
        token: Optional[str] = _UNSET,
    ) -> None:
        """Initialize the orchestrator.

        Parameters
        ----------
        config : Config, optional
            Configuration; defaults to the global configuration.
        transport : ArenaTransport, optional
            Transport to use; built from ``config`` when omitted.
        cache : ResponseCache, optional
            Response cache; built from ``config`` when omitted.
        token : str, optional
            Bearer token; read from the configuration when omitted.  ``None``
            means anonymous access.
        """
        self.config = config or get_config()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.token = self.config.get_access_token() if token is _UNSET else token

        if transport is None:
            gate = get_rate_gate()
            gate.min_interval = self.config.get_int("api.rate_limit_delay_ms", 200) / 1000
            transport = ArenaTransport(
                base_url=self.config.get("api.base_url"),
                legacy_base_url=self.config.get("api.legacy_base_url"),
                timeout=float(self.config.get("api.timeout_seconds", 30)),
                rate_gate=gate,
            )
        self.transport = transport

        if cache is None:
            cache = ResponseCache(
                cache_dir=self.config.get("cache.directory", "data/cache"),
                default_ttl=self.config.get_int("cache.ttl_seconds", 900),
                enabled=self.config.get_bool("cache.enabled", True),
            )
        self.cache = cache

        self.router = SearchRouter(self.transport)
        self.graph = GraphTraversal(self.transport)
        self.lookup = ResourceLookup(self.transport)
        self.default_per_page = self.config.get_int("search.per_page", 24)

        self.last_rate_limit: Optional[RateLimitStatus] = None
        self.last_from_cache = False

    async def __aenter__(self) -> "Orchestrator":
        await self.transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.transport.__aexit__(exc_type, exc, tb)

    async def _cached(
        self,
        query: str,
        params: str,
        fetch: Callable[[], Awaitable[R]],
        parse: Callable[[Any], R],
        ttl: Optional[float] = None,
    ) -> R:
        payload = self.cache.get(query, params, ttl)
        if payload is not None:
            try:
                result = parse(payload)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                self.logger.debug("Discarding unparsable cache payload for %r: %s", query, e)
            else:
                self.logger.info("Served %r (%s) from cache", query, params)
                self.last_from_cache = True
                self.last_rate_limit = None
                return result

        self.last_from_cache = False
        result = await fetch()
        self.last_rate_limit = self.transport.last_rate_limit
        self.cache.set(query, params, result.to_dict())  # type: ignore[attr-defined]
        return result

    def _per(self, per_page: Optional[int]) -> int:
        per = per_page or self.default_per_page
        if per < 1 or per > MAX_PER_PAGE:
            clamped = min(max(per, 1), MAX_PER_PAGE)
            self.logger.warning("per_page %d clamped to %d", per, clamped)
            per = clamped
        return per

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> Page[Entity]:
        """Search the graph.

        Parameters
        ----------
        query: str
            Free-text query.
        options: SearchOptions, optional
            Kind filter, sort, scope and pagination.  Use ``quick_lookup`` for
            the quick preset.
        """
        options = options or SearchOptions(per_page=self.default_per_page)
        self.logger.info("Orchestrator: searching for %r (%s)", query, options.cache_params())
        with log_performance("search", self.logger):
            return await self._cached(
                query,
                options.cache_params(),
                lambda: self.router.search(query, options, self.token),
                Page.from_dict,
                ttl=options.cache_ttl,
            )

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    async def get_container(self, key: Identifier) -> Container:
        return await self._cached(
            f"channel-{key}",
            "",
            lambda: self.lookup.get_container(key, token=self.token),
            Container.from_dict,
        )

    async def get_container_contents(
        self,
        key: Identifier,
        sort: Optional[str] = None,
        kind: Optional[str] = None,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> Page[Entity]:
        per = self._per(per_page)
        return await self._cached(
            str(key),
            f"contents&sort={sort or ''}&type={kind or ''}&per={per}&page={page}",
            lambda: self.lookup.get_container_contents(
                key, sort=sort, kind=kind, page=page, per_page=per, token=self.token
            ),
            Page.from_dict,
        )

    async def get_container_connections(
        self, key: Identifier, page: int = 1, per_page: Optional[int] = None
    ) -> Page[Container]:
        per = self._per(per_page)
        return await self._cached(
            str(key),
            f"connections&per={per}&page={page}",
            lambda: self.graph.container_connections(key, page=page, per_page=per, token=self.token),
            _container_page,
        )

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    async def get_item(self, item_id: Identifier) -> Item:
        return await self._cached(
            f"block-{item_id}",
            "",
            lambda: self.lookup.get_item(item_id, token=self.token),
            item_from_dict,
        )

    async def get_item_connections(
        self, item_id: Identifier, page: int = 1, per_page: Optional[int] = None
    ) -> Page[Container]:
        per = self._per(per_page)
        return await self._cached(
            str(item_id),
            f"block-connections&per={per}&page={page}",
            lambda: self.graph.item_connections(item_id, page=page, per_page=per, token=self.token),
            _container_page,
        )

    # ------------------------------------------------------------------
    # Actors
    # ------------------------------------------------------------------

    async def get_actor(self, key: Union[str, int]) -> Actor:
        return await self._cached(
            f"user-{key}",
            "",
            lambda: self.lookup.get_actor(key, token=self.token),
            Actor.from_dict,
        )

    async def get_actor_contents(
        self, key: Identifier, page: int = 1, per_page: Optional[int] = None
    ) -> Page[Container]:
        per = self._per(per_page)
        return await self._cached(
            str(key),
            f"user&per={per}&page={page}",
            lambda: self.lookup.get_actor_contents(key, page=page, per_page=per, token=self.token),
            _container_page,
        )

    async def get_me(self) -> Actor:
        """Authenticated user's profile; never cached."""
        actor = await self.lookup.get_me(self.token)
        self.last_from_cache = False
        self.last_rate_limit = self.transport.last_rate_limit
        return actor

    async def ping(self) -> RateLimitStatus:
        """Connectivity check; never cached."""
        status = await self.lookup.ping(token=self.token)
        self.last_from_cache = False
        self.last_rate_limit = status
        return status
