"""Search options, filter vocabulary and the quick lookup preset."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from arena_research.core.cache import DEFAULT_TTL, QUICK_TTL
from arena_research.search.sorting import SearchSort

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100
DEFAULT_PER_PAGE = 24
QUICK_PER_PAGE = 10


class EntityKind(str, Enum):
    """Kind filter accepted by search."""

    CHANNEL = "Channel"
    BLOCK = "Block"
    TEXT = "Text"
    IMAGE = "Image"
    LINK = "Link"
    ATTACHMENT = "Attachment"
    EMBED = "Embed"
    USER = "User"

    @property
    def is_item(self) -> bool:
        return self not in (EntityKind.CHANNEL, EntityKind.USER)

    @classmethod
    def parse(cls, value: Union[str, "EntityKind", None]) -> Optional["EntityKind"]:
        """Parse a kind name case-insensitively; empty values mean no filter."""
        if value is None or isinstance(value, cls):
            return value
        if not value:
            return None
        for kind in cls:
            if kind.value.lower() == value.lower():
                return kind
        raise ValueError(f"Unknown kind '{value}'. Must be one of: {', '.join(k.value for k in cls)}")


class SearchScope(str, Enum):
    """Which part of the graph a search covers."""

    ALL = "all"
    MY = "my"
    FOLLOWING = "following"

    @classmethod
    def parse(cls, value: Union[str, "SearchScope", None]) -> "SearchScope":
        if value is None or value == "":
            return cls.ALL
        if isinstance(value, cls):
            return value
        aliases = {"everything": cls.ALL, "mine": cls.MY, "network": cls.FOLLOWING}
        lowered = value.lower()
        if lowered in aliases:
            return aliases[lowered]
        return cls(lowered)


@dataclass(frozen=True)
class SearchOptions:
    """Options for one search call.

    Attributes
    ----------
    kind : EntityKind, optional
        Restrict results to one kind.  ``None`` searches everything.
    sort : str
        Backend sort value (see ``SearchSort``).
    scope : SearchScope
        ``ALL`` searches globally; ``MY`` and ``FOLLOWING`` need a token.
    page : int
        1-based page index.
    per_page : int
        Page size, at most 100.
    cache_ttl : int
        How long a cached response for these options stays valid, in seconds.
    """

    kind: Optional[EntityKind] = None
    sort: str = SearchSort.SCORE.value
    scope: SearchScope = SearchScope.ALL
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE
    cache_ttl: int = DEFAULT_TTL

    def __post_init__(self) -> None:
        # Clamp page and page size with a warning instead of raising
        if self.per_page < 1 or self.per_page > MAX_PER_PAGE:
            clamped = min(max(self.per_page, 1), MAX_PER_PAGE)
            logger.warning("per_page %d clamped to %d", self.per_page, clamped)
            object.__setattr__(self, "per_page", clamped)
        if self.page < 1:
            logger.warning("page %d clamped to 1", self.page)
            object.__setattr__(self, "page", 1)
        if isinstance(self.sort, Enum):
            object.__setattr__(self, "sort", self.sort.value)
        object.__setattr__(self, "kind", EntityKind.parse(self.kind))
        object.__setattr__(self, "scope", SearchScope.parse(self.scope))

    @property
    def is_global(self) -> bool:
        return self.scope is SearchScope.ALL

    def cache_params(self) -> str:
        """Deterministic parameter signature used as the cache key."""
        kind = self.kind.value if self.kind else ""
        return (
            f"type={kind}&sort={self.sort}&scope={self.scope.value}"
            f"&per={self.per_page}&page={self.page}"
        )


def quick_lookup(options: Optional[SearchOptions] = None) -> SearchOptions:
    """Apply the quick lookup preset: top 10 channels by connections, 1h cache.

    The preset always wins over whatever the caller set for kind, sort, page
    size and cache TTL; scope and page are kept.
    """
    return replace(
        options or SearchOptions(),
        kind=EntityKind.CHANNEL,
        sort=SearchSort.CONNECTIONS.value,
        per_page=QUICK_PER_PAGE,
        cache_ttl=QUICK_TTL,
    )
