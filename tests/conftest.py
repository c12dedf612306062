"""Shared fixtures and fake API payloads for the test suite."""

from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest

from arena_research.core.cache import ResponseCache
from arena_research.core.http_client import ArenaTransport
from arena_research.core.rate_limiter import RateGate

RATE_LIMIT_HEADERS = {
    "x-ratelimit-limit": "60",
    "x-ratelimit-tier": "premium",
    "x-ratelimit-window": "60",
    "x-ratelimit-reset": "0",
}

Route = Union[Dict[str, Any], Callable[[httpx.Request], httpx.Response]]


class FakeArena:
    """Mock transport handler that routes by URL path and records requests."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None) -> None:
        self.routes: Dict[str, Route] = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route, headers=RATE_LIMIT_HEADERS)

    @property
    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


def make_transport(handler: Callable[[httpx.Request], httpx.Response]) -> ArenaTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ArenaTransport(client=client, rate_gate=RateGate(min_interval=0))


def owner_record(slug: str = "charles-broskoski", name: str = "Charles Broskoski") -> Dict[str, Any]:
    return {"id": 15, "type": "User", "name": name, "slug": slug, "avatar": None, "initials": "CB"}


def channel_record(channel_id: int, title: str, contents: int = 0, **extra: Any) -> Dict[str, Any]:
    record = {
        "id": channel_id,
        "type": "Channel",
        "base_type": "Channel",
        "slug": title.lower().replace(" ", "-"),
        "title": title,
        "description": {"markdown": f"About {title}", "html": "", "plain": f"About {title}"},
        "visibility": "public",
        "owner": owner_record(),
        "counts": {"blocks": contents, "channels": 0, "contents": contents, "collaborators": 0},
        "state": "available",
        "created_at": "2023-01-01T00:00:00Z",
        "updated_at": "2023-06-01T00:00:00Z",
    }
    record.update(extra)
    return record


def link_record(block_id: int, title: str, url: str = "https://example.com") -> Dict[str, Any]:
    return {
        "id": block_id,
        "type": "Link",
        "base_type": "Block",
        "title": title,
        "description": None,
        "state": "available",
        "comment_count": 0,
        "created_at": "2023-02-01T00:00:00Z",
        "updated_at": "2023-02-01T00:00:00Z",
        "user": owner_record(),
        "source": {"url": url, "title": title, "provider": {"name": "Example", "url": "https://example.com"}},
    }


def page_payload(records: List[Dict[str, Any]], total_count: Optional[int] = None, **meta: Any) -> Dict[str, Any]:
    total = len(records) if total_count is None else total_count
    page_meta = {
        "current_page": 1,
        "next_page": None,
        "prev_page": None,
        "per_page": 24,
        "total_pages": 1,
        "total_count": total,
        "has_more_pages": False,
    }
    page_meta.update(meta)
    return {"data": records, "meta": page_meta}


@pytest.fixture
def response_cache(tmp_path) -> ResponseCache:
    return ResponseCache(cache_dir=tmp_path / "cache", default_ttl=900)
