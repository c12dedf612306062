"""Tests for legacy search, scoped search and routing."""

import pytest

from arena_research.core.data_models import Actor, Container, Item, LinkItem
from arena_research.core.errors import ConfigurationError, MissingCredentialError, UnauthorizedError
from arena_research.search.legacy import LegacySearch, legacy_endpoint, legacy_page_meta, legacy_records
from arena_research.search.options import EntityKind, SearchOptions, SearchScope
from arena_research.search.router import SearchRouter
from conftest import FakeArena, channel_record, make_transport, page_payload

LEGACY_RESPONSE = {
    "term": "brutalism",
    "channels": [
        {"id": 1, "class": "Channel", "title": "Small", "slug": "small", "length": 3, "status": "public",
         "user": {"id": 15, "username": "charles", "full_name": "Charles"}},
        {"id": 2, "class": "Channel", "title": "Big", "slug": "big", "length": 90, "status": "closed",
         "user": {"id": 16, "username": "laurel", "full_name": "Laurel"}},
    ],
    "blocks": [
        {"id": 10, "class": "Link", "title": "An essay", "source": {"url": "https://example.com"}},
        {"id": 11, "class": "Hologram", "title": "Unknown kind"},
    ],
    "users": [{"id": 20, "class": "User", "username": "bruto", "full_name": "Bruto"}],
    "current_page": 2,
    "total_pages": 5,
    "per": 10,
}


class TestLegacyHelpers:
    def test_endpoints(self):
        assert legacy_endpoint(None) == "/search"
        assert legacy_endpoint(EntityKind.CHANNEL) == "/search/channels"
        assert legacy_endpoint(EntityKind.USER) == "/search/users"
        assert legacy_endpoint(EntityKind.LINK) == "/search/blocks"
        assert legacy_endpoint(EntityKind.BLOCK) == "/search/blocks"

    def test_page_meta_reconstruction(self):
        meta = legacy_page_meta(LEGACY_RESPONSE, page=2, per_page=10)
        assert meta.current_page == 2
        assert meta.next_page == 3
        assert meta.prev_page == 1
        assert meta.per_page == 10
        assert meta.total_pages == 5
        assert meta.total_count == 50
        assert meta.has_more_pages is True
        assert meta.total_count_approximate is True

    def test_page_meta_last_page(self):
        meta = legacy_page_meta({"current_page": 5, "total_pages": 5, "per": 10}, page=5, per_page=10)
        assert meta.next_page is None
        assert meta.has_more_pages is False

    def test_page_meta_first_page(self):
        meta = legacy_page_meta({"total_pages": 1}, page=1, per_page=24)
        assert meta.prev_page is None
        assert meta.total_count == 24

    def test_records_grouped_in_order(self):
        records = legacy_records(LEGACY_RESPONSE)
        assert [r["id"] for r in records] == [1, 2, 10, 11, 20]
        assert records[0]["counts"]["contents"] == 3


class TestLegacySearch:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        fake = FakeArena({"/v2/search/channels": LEGACY_RESPONSE})
        async with make_transport(fake) as transport:
            await LegacySearch(transport).search(
                "brutalism", SearchOptions(kind=EntityKind.CHANNEL, page=2, per_page=10), token="tok"
            )

        request = fake.requests[0]
        assert request.url.params["q"] == "brutalism"
        assert request.url.params["per"] == "10"
        assert request.url.params["page"] == "2"
        assert request.headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_item_subkind_filter_warns(self, caplog):
        """Item sub-kinds fall back to every block kind, and say so."""
        fake = FakeArena({"/v2/search/blocks": LEGACY_RESPONSE})
        async with make_transport(fake) as transport:
            await LegacySearch(transport).search("brutalism", SearchOptions(kind=EntityKind.LINK), token="tok")

        assert fake.paths == ["/v2/search/blocks"]
        assert "cannot filter by Link; returning all block kinds" in caplog.text

    @pytest.mark.asyncio
    async def test_block_filter_does_not_warn(self, caplog):
        fake = FakeArena({"/v2/search/blocks": LEGACY_RESPONSE})
        async with make_transport(fake) as transport:
            await LegacySearch(transport).search("brutalism", SearchOptions(kind=EntityKind.BLOCK), token="tok")

        assert "cannot filter by" not in caplog.text

    @pytest.mark.asyncio
    async def test_results_are_canonical(self):
        fake = FakeArena({"/v2/search": LEGACY_RESPONSE})
        async with make_transport(fake) as transport:
            page = await LegacySearch(transport).search("brutalism", SearchOptions(), token="tok")

        kinds = [type(e) for e in page]
        assert kinds == [Container, Container, LinkItem, Actor]
        big = page.items[1]
        assert big.visibility == "closed"
        assert big.owner.name == "Laurel"
        assert page.meta.total_count_approximate is True

    @pytest.mark.asyncio
    async def test_unknown_record_kinds_are_skipped(self, caplog):
        fake = FakeArena({"/v2/search": LEGACY_RESPONSE})
        async with make_transport(fake) as transport:
            page = await LegacySearch(transport).search("brutalism", SearchOptions(), token="tok")

        assert 11 not in [e.id for e in page]
        assert "Skipping legacy record 11" in caplog.text

    @pytest.mark.asyncio
    async def test_client_side_connections_sort(self):
        fake = FakeArena({"/v2/search/channels": LEGACY_RESPONSE})
        async with make_transport(fake) as transport:
            page = await LegacySearch(transport).search(
                "brutalism",
                SearchOptions(kind=EntityKind.CHANNEL, sort="connections_count_desc"),
                token="tok",
            )

        assert [e.id for e in page][:2] == [2, 1]


class TestSearchRouter:
    @pytest.mark.asyncio
    async def test_missing_token_fails_before_any_request(self):
        fake = FakeArena()
        async with make_transport(fake) as transport:
            router = SearchRouter(transport)
            for scope in (SearchScope.ALL, SearchScope.MY):
                with pytest.raises(MissingCredentialError) as exc_info:
                    await router.search("brutalism", SearchOptions(scope=scope), token=None)
                assert isinstance(exc_info.value, ConfigurationError)
                assert isinstance(exc_info.value, UnauthorizedError)

        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_global_search_goes_to_legacy_backend(self):
        fake = FakeArena({"/v2/search/channels": LEGACY_RESPONSE})
        async with make_transport(fake) as transport:
            page = await SearchRouter(transport).search(
                "brutalism", SearchOptions(kind=EntityKind.CHANNEL), token="tok"
            )

        assert fake.paths == ["/v2/search/channels"]
        assert all(isinstance(e, (Container, Item, Actor)) for e in page)

    @pytest.mark.asyncio
    async def test_scoped_search_goes_to_authenticated_backend(self):
        payload = page_payload(
            [channel_record(1, "Mine A"), channel_record(2, "Mine B")],
            total_count=31,
            current_page=2,
            next_page=3,
            prev_page=1,
            total_pages=4,
            per_page=10,
            has_more_pages=True,
        )
        fake = FakeArena({"/v3/search": payload})
        async with make_transport(fake) as transport:
            page = await SearchRouter(transport).search(
                "brutalism",
                SearchOptions(kind=EntityKind.CHANNEL, scope=SearchScope.MY, sort="created_at_desc", page=2, per_page=10),
                token="tok",
            )

        params = fake.requests[0].url.params
        assert fake.paths == ["/v3/search"]
        assert params["scope"] == "my"
        assert params["type"] == "Channel"
        assert params["sort"] == "created_at_desc"
        assert page.meta.next_page == 3
        assert page.meta.prev_page == 1
        assert page.meta.total_count == 31
        assert page.meta.total_count_approximate is False
        assert all(isinstance(e, Container) for e in page)
