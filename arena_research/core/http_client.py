"""Asynchronous transport for the Are.na APIs.

This module provides a wrapper around the ``httpx`` asynchronous client used
by every arena-research operation.  It centralises the base URLs, bearer
authentication, request pacing and the mapping of HTTP status codes onto the
error taxonomy in ``arena_research.core.errors``.  There is deliberately no
retry loop: a failed request ends the operation that issued it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

from arena_research.core.data_models import RateLimitStatus
from arena_research.core.errors import (
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
)
from arena_research.core.rate_limiter import RateGate, get_rate_gate

API_BASE_URL = "https://api.are.na/v3"
LEGACY_API_BASE_URL = "https://api.are.na/v2"

# Maximum number of body characters carried by a ServerError
BODY_EXCERPT_LIMIT = 200

# Wait reported for a 429 that carries no reset header
DEFAULT_RATE_LIMIT_WAIT = 60

RESOURCE_KINDS: Dict[str, str] = {
    "channels": "Channel",
    "blocks": "Block",
    "users": "User",
}


@dataclass(frozen=True)
class TransportResponse:
    """Decoded JSON payload plus the rate limit snapshot of its response."""

    payload: Any
    rate_limit: RateLimitStatus


def resource_from_path(path: str) -> tuple[str, str]:
    """Infer the resource kind and identifier a request path refers to.

    ``/channels/foo/contents`` resolves to ``("Channel", "foo")``; absolute
    URLs have their API version prefix stripped first.
    """
    url_path = urlparse(path).path if path.startswith("http") else path.split("?", 1)[0]
    parts = [part for part in url_path.split("/") if part]
    if parts and parts[0] in ("v2", "v3"):
        parts = parts[1:]
    if not parts:
        return "Resource", path
    kind = RESOURCE_KINDS.get(parts[0], "Resource")
    identifier = parts[1] if len(parts) > 1 else path
    return kind, identifier


class ArenaTransport:
    """Issues authenticated GET requests and classifies their responses."""

    DEFAULT_USER_AGENT = "arena-research/0.1.0"

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        legacy_base_url: str = LEGACY_API_BASE_URL,
        timeout: float = 30.0,
        rate_gate: Optional[RateGate] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the transport.

        Parameters
        ----------
        base_url : str
            Base URL of the authenticated API; relative paths are joined to it.
        legacy_base_url : str
            Base URL of the legacy search API.
        timeout : float
            Request timeout in seconds.
        rate_gate : RateGate, optional
            Pacing gate; defaults to the process-wide gate.
        client : httpx.AsyncClient, optional
            Pre-built client (used by tests to inject a mock transport).
        """
        self.base_url = base_url.rstrip("/")
        self.legacy_base_url = legacy_base_url.rstrip("/")
        self._timeout = timeout
        self._rate_gate = rate_gate or get_rate_gate()
        self._client = client
        self._owns_client = client is None
        self.logger = logging.getLogger(self.__class__.__name__)
        self.last_rate_limit: Optional[RateLimitStatus] = None
        self._request_count = 0
        self._total_request_time = 0.0

    async def __aenter__(self) -> "ArenaTransport":
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": self.DEFAULT_USER_AGENT},
                follow_redirects=True,
            )
            self._owns_client = True
        self.logger.debug("Transport initialized (timeout=%.1fs)", self._timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        if self._request_count > 0:
            self.logger.debug(
                "Transport closed (requests=%d, avg_time=%.2fms)",
                self._request_count,
                self._total_request_time / self._request_count * 1000,
            )

    @property
    def rate_gate(self) -> RateGate:
        return self._rate_gate

    def legacy_url(self, path: str) -> str:
        """Build an absolute legacy-API URL for ``path``."""
        return f"{self.legacy_base_url}{path}"

    def _url_for(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    async def get(
        self,
        path: str,
        *,
        token: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> TransportResponse:
        """Make one paced GET request.

        Parameters
        ----------
        path : str
            API path (``/channels/foo``) or absolute URL.
        token : str, optional
            Bearer token; the Authorization header is omitted when absent.
        params : dict, optional
            Query parameters; ``None`` values are dropped.

        Returns
        -------
        TransportResponse
            Decoded JSON payload and rate limit snapshot.

        Raises
        ------
        UnauthorizedError, ForbiddenError, NotFoundError, RateLimitedError, ServerError
            According to the response status.
        RuntimeError
            If the transport is not used as an async context manager.
        """
        if self._client is None:
            raise RuntimeError("ArenaTransport must be used as an async context manager")

        url = self._url_for(path)
        headers: Dict[str, str] = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        query = {k: v for k, v in (params or {}).items() if v is not None}

        await self._rate_gate.acquire()

        start_time = time.time()
        self.logger.debug("GET %s params=%s", url[:100], query)
        response = await self._client.get(url, headers=headers, params=query or None)
        elapsed = time.time() - start_time
        self._request_count += 1
        self._total_request_time += elapsed
        self.logger.debug("GET %s -> %d (%.2fms)", url[:100], response.status_code, elapsed * 1000)

        rate_limit = RateLimitStatus.from_headers(response.headers)
        self.last_rate_limit = rate_limit

        self._raise_for_status(response, path, rate_limit)
        return TransportResponse(payload=response.json(), rate_limit=rate_limit)

    def _raise_for_status(
        self,
        response: httpx.Response,
        path: str,
        rate_limit: RateLimitStatus,
    ) -> None:
        if response.is_success:
            return

        status = response.status_code

        if status == 401:
            raise UnauthorizedError()
        if status == 403:
            raise ForbiddenError()
        if status == 404:
            kind, identifier = resource_from_path(path)
            raise NotFoundError(kind, identifier)
        if status == 429:
            if rate_limit.reset:
                wait_seconds = max(rate_limit.reset - int(time.time()), 1)
            else:
                wait_seconds = DEFAULT_RATE_LIMIT_WAIT
            self.logger.warning("Rate limited on %s (tier=%s, wait=%ds)", path[:100], rate_limit.tier, wait_seconds)
            raise RateLimitedError(wait_seconds, rate_limit.tier)

        self.logger.error("Unexpected status %d for %s", status, path[:100])
        raise ServerError(status, response.text[:BODY_EXCERPT_LIMIT])

    @property
    def stats(self) -> Dict[str, Any]:
        """Get request statistics."""
        return {
            "request_count": self._request_count,
            "total_time_ms": self._total_request_time * 1000,
            "avg_time_ms": (
                (self._total_request_time / self._request_count * 1000)
                if self._request_count > 0
                else 0
            ),
        }
