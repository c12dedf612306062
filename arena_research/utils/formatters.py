"""Output formatting utilities for arena-research.

Provides formatters for:
- JSON output
- Terminal (plain text) output
- Markdown output and research reports
- Pagination footers
"""

import json
import re
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from arena_research.core.data_models import (
    Actor,
    Container,
    Description,
    Entity,
    Item,
    LinkItem,
    PageMeta,
    TextItem,
)

WEB_BASE_URL = "https://www.are.na"


class OutputFormat(str, Enum):
    """Supported output formats."""

    TERMINAL = "terminal"
    JSON = "json"
    MARKDOWN = "markdown"


def truncate(text: str, max_length: int) -> str:
    """Shorten ``text`` to ``max_length`` characters, ending with '...'."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def description_text(description: Optional[Description]) -> str:
    return description.plain.strip() if description is not None else ""


def container_url(container: Container) -> str:
    owner_slug = container.owner.slug if container.owner and container.owner.slug else "unknown"
    return f"{WEB_BASE_URL}/{owner_slug}/{container.slug}"


def item_url(item: Item) -> str:
    return f"{WEB_BASE_URL}/block/{item.id}"


def actor_url(actor: Actor) -> str:
    return f"{WEB_BASE_URL}/{actor.slug}"


def _owner_name(container: Container) -> str:
    return container.owner.name if container.owner and container.owner.name else "?"


def _text_content(item: Item) -> str:
    if isinstance(item, TextItem) and item.content is not None:
        return item.content.plain
    return ""


class DataFormatter:
    """Formats data for various output types."""

    @staticmethod
    def to_dict(obj: Any) -> Any:
        """Convert object to dictionary representation.

        Entities and pages serialize through their own ``to_dict`` so the
        output uses the same field names as the API.
        """
        if obj is None:
            return None
        if isinstance(obj, (str, int, float, bool)):
            return obj
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        if is_dataclass(obj):
            return asdict(obj)
        if isinstance(obj, dict):
            return {k: DataFormatter.to_dict(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple, set)):
            return [DataFormatter.to_dict(item) for item in obj]
        return str(obj)


class JSONFormatter:
    """Formats data as JSON."""

    def __init__(self, indent: int = 2, sort_keys: bool = False):
        """Initialize JSON formatter.

        Args:
            indent: Indentation level
            sort_keys: Whether to sort dictionary keys
        """
        self.indent = indent
        self.sort_keys = sort_keys

    def format(self, data: Any) -> str:
        converted = DataFormatter.to_dict(data)
        return json.dumps(converted, indent=self.indent, sort_keys=self.sort_keys, default=str)


def format_pagination(meta: Optional[PageMeta]) -> str:
    """Footer line for a multi-page result, empty for a single page.

    Totals rebuilt from a page count are prefixed with ``~``.
    """
    if meta is None or meta.total_pages <= 1:
        return ""
    approx = "~" if meta.total_count_approximate else ""
    return f"Page {meta.current_page}/{meta.total_pages} ({approx}{meta.total_count} total)"


class TerminalFormatter:
    """Plain-text renderings for the terminal."""

    def container(self, container: Container) -> str:
        lines = [
            f"{container.title} | by {_owner_name(container)} | "
            f"{container.counts.combined} items | {container.visibility}",
            f"  {container_url(container)}",
        ]
        desc = description_text(container.description)
        if desc:
            lines.append(f"  {truncate(desc, 100)}")
        return "\n".join(lines)

    def item(self, item: Item) -> str:
        lines = [f"[{item.kind}] {item.title or '(untitled)'}"]
        if isinstance(item, LinkItem) and item.url:
            lines.append(f"  URL: {item.url}")
        content = _text_content(item)
        if content:
            lines.append(f"  {truncate(content, 120)}")
        desc = description_text(item.description)
        if desc:
            lines.append(f"  Desc: {truncate(desc, 100)}")
        lines.append(f"  Block ID: {item.id}")
        return "\n".join(lines)

    def actor(self, actor: Actor) -> str:
        channels = actor.counts.channels if actor.counts else 0
        followers = actor.counts.followers if actor.counts else 0
        lines = [f"{actor.name} (@{actor.slug})", f"  {channels} channels | {followers} followers"]
        bio = description_text(actor.bio)
        if bio:
            lines.append(f"  Bio: {truncate(bio, 100)}")
        lines.append(f"  {actor_url(actor)}")
        return "\n".join(lines)

    def entity(self, entity: Entity) -> str:
        if isinstance(entity, Container):
            return self.container(entity)
        if isinstance(entity, Actor):
            return self.actor(entity)
        return self.item(entity)

    def entities(self, entities: Sequence[Entity], meta: Optional[PageMeta] = None) -> str:
        blocks = [self.entity(e) + "\n" for e in entities]
        footer = format_pagination(meta)
        if footer:
            blocks.append(footer)
        return "\n".join(blocks)

    def connections(self, containers: Sequence[Container], meta: PageMeta, item_id: Any = None) -> str:
        """Connection list headed by the reported total.

        With ``item_id`` the header reads as the item's reach, otherwise as a
        channel's neighbourhood.
        """
        if item_id is not None:
            header = f"This block appears in {meta.total_count} channels:\n"
        else:
            header = f"{meta.total_count} connected channels:\n"
        return header + "\n" + self.entities(containers, meta)


class MarkdownFormatter:
    """Formats entities and reports as Markdown."""

    def container(self, container: Container) -> str:
        line = (
            f"- **[{container.title}]({container_url(container)})** | by {_owner_name(container)} | "
            f"{container.counts.combined} items | {container.visibility}"
        )
        desc = description_text(container.description)
        if desc:
            line += f"\n  > {truncate(desc, 200)}"
        return line

    def item(self, item: Item) -> str:
        url = item.url if isinstance(item, LinkItem) and item.url else item_url(item)
        line = f"- **[{item.title or '(untitled)'}]({url})** [{item.kind}]"
        desc = description_text(item.description)
        if desc:
            line += f"\n  > {truncate(desc, 200)}"
        content = _text_content(item)
        if content:
            line += f"\n  > {truncate(content, 200)}"
        return line

    def actor(self, actor: Actor) -> str:
        channels = actor.counts.channels if actor.counts else 0
        followers = actor.counts.followers if actor.counts else 0
        return (
            f"- **[{actor.name}]({actor_url(actor)})** (@{actor.slug}) | "
            f"{channels} channels | {followers} followers"
        )

    def entity(self, entity: Entity) -> str:
        if isinstance(entity, Container):
            return self.container(entity)
        if isinstance(entity, Actor):
            return self.actor(entity)
        return self.item(entity)

    def format_section(self, title: str, entries: Sequence[str], level: int = 2) -> str:
        return f"{'#' * level} {title} ({len(entries)})\n\n" + "\n\n".join(entries) + "\n\n"

    def research_report(
        self,
        query: str,
        results: Sequence[Entity],
        meta: Optional[PageMeta] = None,
        command: Optional[str] = None,
        today: Optional[date] = None,
    ) -> str:
        """Research report for one search, grouped into channels, blocks and users."""
        day = (today or date.today()).isoformat()
        total: Union[int, str] = len(results)
        if meta is not None and meta.total_count:
            total = f"~{meta.total_count}" if meta.total_count_approximate else meta.total_count

        out = f"# Are.na Research: {query}\n\n"
        out += f"**Date:** {day}\n"
        out += f"**Results:** {total}\n\n"

        containers = [self.container(r) for r in results if isinstance(r, Container)]
        items = [self.item(r) for r in results if isinstance(r, Item)]
        actors = [self.actor(r) for r in results if isinstance(r, Actor)]
        if containers:
            out += self.format_section("Channels", containers)
        if items:
            out += self.format_section("Blocks", items)
        if actors:
            out += self.format_section("Users", actors)

        out += "---\n\n## Research Metadata\n"
        out += f"- **Query:** {query}\n"
        out += f"- **Date:** {day}\n"
        if command:
            out += f"- **Command:** `{command}`\n"
        out += f"- **Results:** {len(results)}\n"
        return out

    def container_contents(
        self,
        container: Container,
        contents: Sequence[Entity],
        meta: PageMeta,
        today: Optional[date] = None,
    ) -> str:
        day = (today or date.today()).isoformat()
        out = f"# {container.title}\n\n"
        out += f"**Owner:** {_owner_name(container)}\n"
        out += f"**Items:** {container.counts.combined}\n"
        out += f"**Visibility:** {container.visibility}\n"
        out += f"**URL:** {container_url(container)}\n"
        out += f"**Date fetched:** {day}\n\n"
        desc = description_text(container.description)
        if desc:
            out += f"> {desc}\n\n"
        out += f"## Contents (page {meta.current_page}/{meta.total_pages})\n\n"
        for entity in contents:
            out += self.entity(entity) + "\n\n"
        return out

    def actor_profile(self, actor: Actor, containers: Sequence[Container], meta: PageMeta) -> str:
        counts = actor.counts
        out = f"# {actor.name} (@{actor.slug})\n\n"
        out += f"**Channels:** {counts.channels if counts else 0}\n"
        out += f"**Followers:** {counts.followers if counts else 0}\n"
        out += f"**Following:** {counts.following if counts else 0}\n"
        bio = description_text(actor.bio)
        if bio:
            out += f"\n> {bio}\n"
        out += f"\n**URL:** {actor_url(actor)}\n\n"
        out += f"## Channels (page {meta.current_page}/{meta.total_pages})\n\n"
        out += "\n\n".join(self.container(c) for c in containers)
        return out

    def connections(self, containers: Sequence[Container], meta: PageMeta, title: str) -> str:
        out = f"# {title}\n\n"
        out += f"**Connected channels:** {meta.total_count}\n\n"
        out += "\n\n".join(self.container(c) for c in containers)
        return out


def slugify(text: str, max_length: int = 40) -> str:
    """Lowercase, dash-separated slug used in draft file names."""
    return re.sub(r"[^a-zA-Z0-9]+", "-", text).strip("-")[:max_length].lower()


def draft_path(drafts_dir: Union[str, Path], name: str, today: Optional[date] = None) -> Path:
    """Path of a saved research draft: ``arena-research-{slug}-{date}.md``."""
    day = (today or date.today()).isoformat()
    return Path(drafts_dir).expanduser() / f"arena-research-{slugify(name)}-{day}.md"


def to_json(data: Any, indent: int = 2) -> str:
    """Convenience function to format data as JSON."""
    return JSONFormatter(indent=indent).format(data)
