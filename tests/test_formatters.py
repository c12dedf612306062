"""Tests for output formatters."""

import json
from datetime import date

from arena_research.core.data_models import Actor, Container, PageMeta, item_from_dict
from arena_research.utils.formatters import (
    DataFormatter,
    MarkdownFormatter,
    TerminalFormatter,
    container_url,
    draft_path,
    format_pagination,
    slugify,
    to_json,
    truncate,
)
from conftest import channel_record, link_record

TODAY = date(2024, 5, 1)


def _container(**extra) -> Container:
    return Container.from_dict(channel_record(1, "Brutalist Architecture", contents=87, **extra))


def _actor() -> Actor:
    return Actor.from_dict(
        {"id": 15, "type": "User", "name": "Charles", "slug": "charles",
         "counts": {"channels": 12, "followers": 300, "following": 4}, "bio": "Makes things"}
    )


class TestHelpers:
    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("a" * 20, 10) == "aaaaaaa..."

    def test_container_url(self):
        assert container_url(_container()) == "https://www.are.na/charles-broskoski/brutalist-architecture"

    def test_container_url_without_owner(self):
        container = Container.from_dict({"id": 1, "slug": "orphan"})
        assert container_url(container) == "https://www.are.na/unknown/orphan"

    def test_slugify(self):
        assert slugify("  Brutalist Architecture!! 2024 ") == "brutalist-architecture-2024"
        assert len(slugify("x" * 100)) == 40

    def test_draft_path(self, tmp_path):
        path = draft_path(tmp_path, "Brutalist Architecture", today=TODAY)
        assert path == tmp_path / "arena-research-brutalist-architecture-2024-05-01.md"


class TestPagination:
    def test_single_page_has_no_footer(self):
        assert format_pagination(PageMeta(total_pages=1, total_count=3)) == ""
        assert format_pagination(None) == ""

    def test_exact_total(self):
        meta = PageMeta(current_page=2, total_pages=4, total_count=31)
        assert format_pagination(meta) == "Page 2/4 (31 total)"

    def test_approximate_total(self):
        meta = PageMeta(current_page=1, total_pages=5, total_count=50, total_count_approximate=True)
        assert format_pagination(meta) == "Page 1/5 (~50 total)"


class TestTerminalFormatter:
    def test_container(self):
        text = TerminalFormatter().container(_container())
        lines = text.splitlines()
        assert lines[0] == "Brutalist Architecture | by Charles Broskoski | 87 items | public"
        assert lines[1] == "  https://www.are.na/charles-broskoski/brutalist-architecture"
        assert lines[2] == "  About Brutalist Architecture"

    def test_link_item(self):
        text = TerminalFormatter().item(item_from_dict(link_record(7, "Essay", url="https://example.org")))
        assert text.splitlines() == ["[Link] Essay", "  URL: https://example.org", "  Block ID: 7"]

    def test_untitled_text_item(self):
        item = item_from_dict({"id": 3, "type": "Text", "content": "hello world"})
        assert TerminalFormatter().item(item).splitlines()[:2] == ["[Text] (untitled)", "  hello world"]

    def test_actor(self):
        text = TerminalFormatter().actor(_actor())
        assert "Charles (@charles)" in text
        assert "12 channels | 300 followers" in text
        assert "Bio: Makes things" in text

    def test_entities_with_footer(self):
        meta = PageMeta(current_page=1, total_pages=2, total_count=4)
        text = TerminalFormatter().entities([_container(), _actor()], meta)
        assert text.endswith("Page 1/2 (4 total)")

    def test_block_connections_header(self):
        meta = PageMeta(total_pages=1, total_count=3)
        text = TerminalFormatter().connections([_container()], meta, item_id=3235876)
        assert text.startswith("This block appears in 3 channels:")


class TestMarkdownFormatter:
    def test_container(self):
        line = MarkdownFormatter().container(_container())
        assert line.startswith(
            "- **[Brutalist Architecture](https://www.are.na/charles-broskoski/brutalist-architecture)**"
        )
        assert "\n  > About Brutalist Architecture" in line

    def test_item_links_to_source(self):
        line = MarkdownFormatter().item(item_from_dict(link_record(7, "Essay", url="https://example.org")))
        assert line == "- **[Essay](https://example.org)** [Link]"

    def test_item_without_source_links_to_block(self):
        item = item_from_dict({"id": 3, "type": "Image", "title": "Pic"})
        assert "(https://www.are.na/block/3)" in MarkdownFormatter().item(item)

    def test_research_report(self):
        results = [_container(), item_from_dict(link_record(7, "Essay")), _actor()]
        meta = PageMeta(total_pages=3, total_count=30, total_count_approximate=True)

        report = MarkdownFormatter().research_report(
            "brutalism", results, meta, command='search "brutalism"', today=TODAY
        )

        assert report.startswith("# Are.na Research: brutalism\n\n**Date:** 2024-05-01\n**Results:** ~30\n")
        assert "## Channels (1)" in report
        assert "## Blocks (1)" in report
        assert "## Users (1)" in report
        assert report.index("## Channels") < report.index("## Blocks") < report.index("## Users")
        assert '- **Command:** `search "brutalism"`' in report
        assert report.endswith("- **Results:** 3\n")

    def test_research_report_skips_empty_groups(self):
        report = MarkdownFormatter().research_report("q", [_container()], today=TODAY)
        assert "## Blocks" not in report
        assert "**Results:** 1" in report

    def test_container_contents(self):
        meta = PageMeta(current_page=1, total_pages=2, total_count=30)
        text = MarkdownFormatter().container_contents(
            _container(), [item_from_dict(link_record(7, "Essay"))], meta, today=TODAY
        )
        assert text.startswith("# Brutalist Architecture\n\n**Owner:** Charles Broskoski\n**Items:** 87\n")
        assert "## Contents (page 1/2)" in text

    def test_actor_profile(self):
        text = MarkdownFormatter().actor_profile(_actor(), [_container()], PageMeta(total_pages=1))
        assert text.startswith("# Charles (@charles)\n\n**Channels:** 12\n**Followers:** 300\n**Following:** 4\n")
        assert "> Makes things" in text


class TestJSON:
    def test_page_like_dict(self):
        payload = json.loads(to_json({"channel": _container(), "meta": PageMeta()}))
        assert payload["channel"]["type"] == "Channel"
        assert payload["channel"]["counts"]["contents"] == 87
        assert payload["meta"]["current_page"] == 1

    def test_data_formatter_primitives(self):
        assert DataFormatter.to_dict([1, "a", None, date(2024, 1, 1)]) == [1, "a", None, "2024-01-01"]
