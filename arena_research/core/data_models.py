"""Data models used throughout arena-research.

The canonical shapes mirror the authenticated (v3) API: a ``Container`` is a
channel, an ``Item`` is a block, an ``Actor`` is a user or group.  Items are a
tagged variant: one dataclass per kind, each carrying only its own payload,
so a ``LinkItem`` always has a link source and a ``TextItem`` never has an
image.  All models are frozen snapshots of a single response and round-trip
through ``to_dict`` / ``from_dict`` so the response cache can store them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Generic, Iterator, Mapping, Optional, Tuple, Type, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Description:
    """Tri-form rich text: source markdown, rendered HTML and plain text."""

    markdown: str = ""
    html: str = ""
    plain: str = ""

    @classmethod
    def from_value(cls, value: Any) -> Optional["Description"]:
        """Parse a description field.

        Legacy search records carry a bare markdown string instead of the
        three renderings; it is used as both the markdown and plain forms.
        """
        if not value:
            return None
        if isinstance(value, str):
            return cls(markdown=value, html="", plain=value)
        if isinstance(value, Mapping):
            return cls(
                markdown=value.get("markdown") or "",
                html=value.get("html") or "",
                plain=value.get("plain") or "",
            )
        return None

    def to_dict(self) -> Dict[str, str]:
        return {"markdown": self.markdown, "html": self.html, "plain": self.plain}


def _description_dict(description: Optional[Description]) -> Optional[Dict[str, str]]:
    return description.to_dict() if description is not None else None


# ---------------------------------------------------------------------------
# Actors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ActorCounts:
    channels: int = 0
    followers: int = 0
    following: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActorCounts":
        return cls(
            channels=_int(data.get("channels")),
            followers=_int(data.get("followers")),
            following=_int(data.get("following")),
        )

    def to_dict(self) -> Dict[str, int]:
        return {"channels": self.channels, "followers": self.followers, "following": self.following}


@dataclass(frozen=True)
class Actor:
    """A user or group account.

    Owner stubs embedded in containers and items only carry the identity
    fields; ``counts`` and ``bio`` are populated for full user profiles.
    """

    id: Optional[int]
    kind: str = "User"
    name: str = ""
    slug: str = ""
    avatar: Optional[str] = None
    initials: str = ""
    counts: Optional[ActorCounts] = None
    bio: Optional[Description] = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_group(self) -> bool:
        return self.kind == "Group"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Actor":
        avatar = data.get("avatar")
        if isinstance(avatar, Mapping):
            avatar = avatar.get("display") or avatar.get("thumb") or avatar.get("url")
        counts = data.get("counts")
        return cls(
            id=data.get("id"),
            kind=data.get("type") or "User",
            # Owner stubs inside legacy items still use username/full_name
            name=data.get("name") or data.get("full_name") or data.get("username") or "",
            slug=data.get("slug") or data.get("username") or "",
            avatar=avatar,
            initials=data.get("initials") or "",
            counts=ActorCounts.from_dict(counts) if isinstance(counts, Mapping) else None,
            bio=Description.from_value(data.get("bio")),
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind,
            "name": self.name,
            "slug": self.slug,
            "avatar": self.avatar,
            "initials": self.initials,
            "counts": self.counts.to_dict() if self.counts is not None else None,
            "bio": _description_dict(self.bio),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContainerCounts:
    """Aggregate counts reported by the backend; never recomputed locally."""

    items: int = 0
    containers: int = 0
    combined: int = 0
    collaborators: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContainerCounts":
        return cls(
            items=_int(data.get("blocks")),
            containers=_int(data.get("channels")),
            combined=_int(data.get("contents")),
            collaborators=_int(data.get("collaborators")),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "blocks": self.items,
            "channels": self.containers,
            "contents": self.combined,
            "collaborators": self.collaborators,
        }


@dataclass(frozen=True)
class Container:
    """A channel: an ordered collection of items and nested containers."""

    kind: ClassVar[str] = "Channel"

    id: int
    slug: str = ""
    title: str = ""
    description: Optional[Description] = None
    visibility: str = "public"
    owner: Optional[Actor] = None
    counts: ContainerCounts = field(default_factory=ContainerCounts)
    state: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Container":
        owner = data.get("owner")
        counts = data.get("counts")
        return cls(
            id=data.get("id"),
            slug=data.get("slug") or "",
            title=data.get("title") or "",
            description=Description.from_value(data.get("description")),
            visibility=data.get("visibility") or "public",
            owner=Actor.from_dict(owner) if isinstance(owner, Mapping) else None,
            counts=ContainerCounts.from_dict(counts) if isinstance(counts, Mapping) else ContainerCounts(),
            state=data.get("state") or "",
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind,
            "base_type": "Channel",
            "slug": self.slug,
            "title": self.title,
            "description": _description_dict(self.description),
            "visibility": self.visibility,
            "owner": self.owner.to_dict() if self.owner is not None else None,
            "counts": self.counts.to_dict(),
            "state": self.state,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Membership:
    """How an item sits inside the container it was fetched from."""

    position: int = 0
    pinned: bool = False
    connected_at: str = ""
    connected_by: Optional[Actor] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Membership":
        connected_by = data.get("connected_by")
        return cls(
            position=_int(data.get("position")),
            pinned=bool(data.get("pinned", False)),
            connected_at=data.get("connected_at") or "",
            connected_by=Actor.from_dict(connected_by) if isinstance(connected_by, Mapping) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "pinned": self.pinned,
            "connected_at": self.connected_at,
            "connected_by": self.connected_by.to_dict() if self.connected_by is not None else None,
        }


@dataclass(frozen=True)
class Item:
    """Fields shared by every item kind."""

    kind: ClassVar[str] = ""

    id: int
    title: str = ""
    description: Optional[Description] = None
    owner: Optional[Actor] = None
    state: str = ""
    comment_count: int = 0
    created_at: str = ""
    updated_at: str = ""
    membership: Optional[Membership] = None

    @classmethod
    def _common(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        owner = data.get("user") or data.get("owner")
        connection = data.get("connection")
        return {
            "id": data.get("id"),
            "title": data.get("title") or "",
            "description": Description.from_value(data.get("description")),
            "owner": Actor.from_dict(owner) if isinstance(owner, Mapping) else None,
            "state": data.get("state") or "",
            "comment_count": _int(data.get("comment_count")),
            "created_at": data.get("created_at") or "",
            "updated_at": data.get("updated_at") or "",
            "membership": Membership.from_dict(connection) if isinstance(connection, Mapping) else None,
        }

    @classmethod
    def _payload_from_dict(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {}

    def _payload_to_dict(self) -> Dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Item":
        if cls is Item:
            return item_from_dict(data)
        return cls(**cls._common(data), **cls._payload_from_dict(data))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.kind,
            "base_type": "Block",
            "title": self.title,
            "description": _description_dict(self.description),
            "state": self.state,
            "comment_count": self.comment_count,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "user": self.owner.to_dict() if self.owner is not None else None,
        }
        data.update(self._payload_to_dict())
        if self.membership is not None:
            data["connection"] = self.membership.to_dict()
        return data


@dataclass(frozen=True)
class TextItem(Item):
    kind: ClassVar[str] = "Text"

    content: Optional[Description] = None

    @classmethod
    def _payload_from_dict(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {"content": Description.from_value(data.get("content"))}

    def _payload_to_dict(self) -> Dict[str, Any]:
        return {"content": _description_dict(self.content)}


@dataclass(frozen=True)
class ImagePayload:
    src: str = ""
    width: int = 0
    height: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImagePayload":
        src = data.get("src")
        if not src:
            # legacy search nests the URL under original/display
            for version in ("original", "display"):
                nested = data.get(version)
                if isinstance(nested, Mapping) and nested.get("url"):
                    src = nested["url"]
                    break
        return cls(src=src or "", width=_int(data.get("width")), height=_int(data.get("height")))

    def to_dict(self) -> Dict[str, Any]:
        return {"src": self.src, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class ImageItem(Item):
    kind: ClassVar[str] = "Image"

    image: Optional[ImagePayload] = None

    @classmethod
    def _payload_from_dict(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        image = data.get("image")
        return {"image": ImagePayload.from_dict(image) if isinstance(image, Mapping) else None}

    def _payload_to_dict(self) -> Dict[str, Any]:
        return {"image": self.image.to_dict() if self.image is not None else None}


@dataclass(frozen=True)
class LinkSource:
    url: str = ""
    title: str = ""
    provider_name: str = ""
    provider_url: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LinkSource":
        provider = data.get("provider") or {}
        return cls(
            url=data.get("url") or "",
            title=data.get("title") or "",
            provider_name=provider.get("name") or "",
            provider_url=provider.get("url") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "provider": {"name": self.provider_name, "url": self.provider_url},
        }


@dataclass(frozen=True)
class LinkItem(Item):
    kind: ClassVar[str] = "Link"

    source: LinkSource = field(default_factory=LinkSource)

    @property
    def url(self) -> str:
        return self.source.url

    @classmethod
    def _payload_from_dict(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        source = data.get("source")
        if not isinstance(source, Mapping):
            logger.warning("Link item %s has no source payload", data.get("id"))
            source = {}
        return {"source": LinkSource.from_dict(source)}

    def _payload_to_dict(self) -> Dict[str, Any]:
        return {"source": self.source.to_dict()}


@dataclass(frozen=True)
class AttachmentItem(Item):
    kind: ClassVar[str] = "Attachment"

    url: str = ""

    @classmethod
    def _payload_from_dict(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {"url": (data.get("attachment") or {}).get("url") or ""}

    def _payload_to_dict(self) -> Dict[str, Any]:
        return {"attachment": {"url": self.url}}


@dataclass(frozen=True)
class EmbedItem(Item):
    kind: ClassVar[str] = "Embed"

    url: str = ""

    @classmethod
    def _payload_from_dict(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {"url": (data.get("embed") or {}).get("url") or ""}

    def _payload_to_dict(self) -> Dict[str, Any]:
        return {"embed": {"url": self.url}}


ITEM_TYPES: Dict[str, Type[Item]] = {
    cls.kind: cls for cls in (TextItem, ImageItem, LinkItem, AttachmentItem, EmbedItem)
}

# The legacy backend calls embeds "Media"
ITEM_KIND_ALIASES: Dict[str, str] = {"Media": "Embed"}

Entity = Union[Container, Item, Actor]


def item_from_dict(data: Mapping[str, Any]) -> Item:
    """Build the item variant matching the record's ``type`` discriminator."""
    kind = data.get("type") or ""
    kind = ITEM_KIND_ALIASES.get(kind, kind)
    try:
        item_cls = ITEM_TYPES[kind]
    except KeyError:
        raise ValueError(f"Unknown item type: {kind!r}") from None
    return item_cls.from_dict(data)


def entity_from_dict(data: Mapping[str, Any]) -> Entity:
    """Build a Container, Item or Actor from a canonical record."""
    kind = data.get("type")
    if kind == "Channel":
        return Container.from_dict(data)
    if kind in ("User", "Group"):
        return Actor.from_dict(data)
    return item_from_dict(data)


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PageMeta:
    """Pagination metadata for one page of results.

    ``total_count_approximate`` is set when the backend only reports a page
    count and ``total_count`` was derived as ``total_pages * per_page``.
    """

    current_page: int = 1
    next_page: Optional[int] = None
    prev_page: Optional[int] = None
    per_page: int = 0
    total_pages: int = 0
    total_count: int = 0
    has_more_pages: bool = False
    total_count_approximate: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PageMeta":
        return cls(
            current_page=_int(data.get("current_page"), 1),
            next_page=data.get("next_page"),
            prev_page=data.get("prev_page"),
            per_page=_int(data.get("per_page")),
            total_pages=_int(data.get("total_pages")),
            total_count=_int(data.get("total_count")),
            has_more_pages=bool(data.get("has_more_pages", False)),
            total_count_approximate=bool(data.get("total_count_approximate", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_page": self.current_page,
            "next_page": self.next_page,
            "prev_page": self.prev_page,
            "per_page": self.per_page,
            "total_pages": self.total_pages,
            "total_count": self.total_count,
            "has_more_pages": self.has_more_pages,
            "total_count_approximate": self.total_count_approximate,
        }


@dataclass(frozen=True)
class Page(Generic[T]):
    """A bounded, ordered sequence of entities plus pagination metadata."""

    items: Tuple[T, ...]
    meta: PageMeta

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        parse: Callable[[Mapping[str, Any]], T] = entity_from_dict,  # type: ignore[assignment]
    ) -> "Page[T]":
        """Parse a canonical page; records of an unknown kind are skipped with a warning."""
        items = []
        for record in data.get("data") or []:
            try:
                items.append(parse(record))
            except ValueError as e:
                logger.warning("Skipping record %s: %s", record.get("id"), e)
        return cls(items=tuple(items), meta=PageMeta.from_dict(data.get("meta") or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [entity.to_dict() for entity in self.items],  # type: ignore[attr-defined]
            "meta": self.meta.to_dict(),
        }


# ---------------------------------------------------------------------------
# Rate limit telemetry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RateLimitStatus:
    """Per-response rate limit snapshot.  Informational only, never cached."""

    limit: int = 0
    tier: str = "unknown"
    window: int = 0
    reset: int = 0

    HEADER_LIMIT: ClassVar[str] = "x-ratelimit-limit"
    HEADER_TIER: ClassVar[str] = "x-ratelimit-tier"
    HEADER_WINDOW: ClassVar[str] = "x-ratelimit-window"
    HEADER_RESET: ClassVar[str] = "x-ratelimit-reset"

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitStatus":
        return cls(
            limit=_int(headers.get(cls.HEADER_LIMIT)),
            tier=headers.get(cls.HEADER_TIER) or "unknown",
            window=_int(headers.get(cls.HEADER_WINDOW)),
            reset=_int(headers.get(cls.HEADER_RESET)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"limit": self.limit, "tier": self.tier, "window": self.window, "reset": self.reset}
