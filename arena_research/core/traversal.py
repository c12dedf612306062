"""Graph traversal and entity lookups over the authenticated backend.

``GraphTraversal`` provides the two one-hop connection queries:

* item -> the channels that contain it ("how widely is this idea spread");
* channel -> the channels that share at least one item with it ("what else
  sits in the same neighbourhood").

``ResourceLookup`` fetches single entities and their contents.  Both are thin
pass-throughs: responses are already canonical, counts are taken as
reported, and multi-hop walks are left to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from arena_research.core.data_models import (
    Actor,
    Container,
    Entity,
    Item,
    Page,
    RateLimitStatus,
    item_from_dict,
)
from arena_research.core.errors import require_token
from arena_research.core.http_client import ArenaTransport

Identifier = Union[str, int]


def page_params(page: Optional[int] = None, per_page: Optional[int] = None, **extra: Any) -> Dict[str, Any]:
    """Build query parameters, leaving out anything unset."""
    params: Dict[str, Any] = {"page": page or None, "per": per_page or None}
    params.update(extra)
    return {k: v for k, v in params.items() if v is not None and v != ""}


class GraphTraversal:
    """One-hop connection queries."""

    def __init__(self, transport: ArenaTransport) -> None:
        self.transport = transport
        self.logger = logging.getLogger(self.__class__.__name__)

    async def item_connections(
        self,
        item_id: Identifier,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        token: Optional[str] = None,
    ) -> Page[Container]:
        """Channels that currently include item ``item_id``."""
        self.logger.info("Fetching connections for block %s", item_id)
        response = await self.transport.get(
            f"/blocks/{item_id}/connections", token=token, params=page_params(page, per_page)
        )
        return Page.from_dict(response.payload or {}, Container.from_dict)

    async def container_connections(
        self,
        key: Identifier,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        token: Optional[str] = None,
    ) -> Page[Container]:
        """Channels sharing at least one item with channel ``key``."""
        self.logger.info("Fetching connections for channel %s", key)
        response = await self.transport.get(
            f"/channels/{key}/connections", token=token, params=page_params(page, per_page)
        )
        return Page.from_dict(response.payload or {}, Container.from_dict)


class ResourceLookup:
    """Single-entity and contents lookups."""

    def __init__(self, transport: ArenaTransport) -> None:
        self.transport = transport
        self.logger = logging.getLogger(self.__class__.__name__)

    async def get_container(self, key: Identifier, token: Optional[str] = None) -> Container:
        response = await self.transport.get(f"/channels/{key}", token=token)
        return Container.from_dict(response.payload)

    async def get_container_contents(
        self,
        key: Identifier,
        sort: Optional[str] = None,
        kind: Optional[str] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        token: Optional[str] = None,
    ) -> Page[Entity]:
        """Items and nested channels of a channel, in the requested order."""
        response = await self.transport.get(
            f"/channels/{key}/contents",
            token=token,
            params=page_params(page, per_page, sort=sort, type=kind),
        )
        return Page.from_dict(response.payload or {})

    async def get_item(self, item_id: Identifier, token: Optional[str] = None) -> Item:
        response = await self.transport.get(f"/blocks/{item_id}", token=token)
        return item_from_dict(response.payload)

    async def get_actor(self, key: Identifier, token: Optional[str] = None) -> Actor:
        response = await self.transport.get(f"/users/{key}", token=token)
        return Actor.from_dict(response.payload)

    async def get_actor_contents(
        self,
        key: Identifier,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        token: Optional[str] = None,
    ) -> Page[Container]:
        """Channels owned by a user."""
        response = await self.transport.get(
            f"/users/{key}/contents", token=token, params=page_params(page, per_page)
        )
        return Page.from_dict(response.payload or {}, Container.from_dict)

    async def get_me(self, token: Optional[str]) -> Actor:
        """Profile of the token's owner."""
        response = await self.transport.get("/me", token=require_token(token))
        return Actor.from_dict(response.payload)

    async def ping(self, token: Optional[str] = None) -> RateLimitStatus:
        """Check connectivity and return the caller's rate limit status."""
        response = await self.transport.get("/ping", token=token)
        return response.rate_limit
