"""Response cache for arena-research.

Responses are stored as one JSON file per logical request, keyed by a hash
of the query string and its serialized parameters.  The cache is a
convenience only: unreadable records are treated as misses and any failure
to write is logged and ignored.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

# Default TTL values (in seconds)
DEFAULT_TTL = 900  # 15 minutes
QUICK_TTL = 3600  # 1 hour, used by the quick lookup preset

DEFAULT_CACHE_DIR = Path("data") / "cache"


@dataclass
class CacheRecord:
    """One stored response."""

    query: str
    params: str
    timestamp: float
    data: Any

    def is_expired(self, ttl: float, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return now - self.timestamp > ttl

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "params": self.params,
            "timestamp": self.timestamp,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheRecord":
        return cls(
            query=data["query"],
            params=data.get("params", ""),
            timestamp=float(data["timestamp"]),
            data=data["data"],
        )


class ResponseCache:
    """TTL-bound key/value store over (query, params) signatures."""

    def __init__(
        self,
        cache_dir: Union[str, Path] = DEFAULT_CACHE_DIR,
        default_ttl: float = DEFAULT_TTL,
        enabled: bool = True,
    ) -> None:
        """Initialize the cache.

        Args:
            cache_dir: Directory holding one JSON file per record
            default_ttl: Default time-to-live in seconds
            enabled: Whether caching is enabled
        """
        self.cache_dir = Path(cache_dir).expanduser()
        self.default_ttl = default_ttl
        self.enabled = enabled
        self.logger = logging.getLogger(self.__class__.__name__)
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(query: str, params: str = "") -> str:
        """Hash a query signature into a short, filesystem-safe key."""
        return hashlib.md5(f"{query}|{params}".encode("utf-8")).hexdigest()[:12]

    def _ensure_dir(self) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, query: str, params: str = "") -> Path:
        """Return the file that stores the record for this signature."""
        return self.cache_dir / f"{self.make_key(query, params)}.json"

    def get(self, query: str, params: str = "", ttl: Optional[float] = None) -> Optional[Any]:
        """Get a cached payload.

        Args:
            query: Logical query string
            params: Serialized parameter signature
            ttl: Maximum age in seconds (uses default if not specified)

        Returns:
            The stored payload, or None if absent, expired or unreadable
        """
        if not self.enabled:
            return None

        ttl = self.default_ttl if ttl is None else ttl
        path = self.path_for(query, params)
        if not path.exists():
            self._misses += 1
            return None

        try:
            record = CacheRecord.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.logger.debug("Ignoring unreadable cache record %s: %s", path.name, e)
            self._misses += 1
            return None

        if record.is_expired(ttl):
            self.logger.debug("Cache record expired: %s", path.name)
            path.unlink(missing_ok=True)
            self._misses += 1
            return None

        self._hits += 1
        self.logger.debug("Cache hit for %r (%s)", query, params)
        return record.data

    def set(self, query: str, params: str, data: Any) -> bool:
        """Store a payload.

        Returns:
            True if the record was written
        """
        if not self.enabled:
            return False

        record = CacheRecord(query=query, params=params, timestamp=time.time(), data=data)
        try:
            self._ensure_dir()
            self.path_for(query, params).write_text(json.dumps(record.to_dict(), indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            self.logger.warning("Cache set failed: %s", e)
            return False
        self.logger.debug("Cached %r (%s)", query, params)
        return True

    def prune(self, ttl: Optional[float] = None) -> int:
        """Remove records whose file is older than ``ttl`` seconds.

        Returns:
            Number of records removed
        """
        ttl = self.default_ttl if ttl is None else ttl
        if not self.cache_dir.exists():
            return 0

        now = time.time()
        removed = 0
        for path in self.cache_dir.glob("*.json"):
            try:
                if now - path.stat().st_mtime > ttl:
                    path.unlink()
                    removed += 1
            except OSError as e:
                self.logger.debug("Could not prune %s: %s", path.name, e)
        self.logger.info("Pruned %d expired cache entries", removed)
        return removed

    def clear(self) -> int:
        """Remove every record.

        Returns:
            Number of records found in the cache directory
        """
        if not self.cache_dir.exists():
            return 0

        files = list(self.cache_dir.glob("*.json"))
        for path in files:
            path.unlink(missing_ok=True)
        self.logger.info("Cleared %d cache entries", len(files))
        return len(files)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0.0
        entries = len(list(self.cache_dir.glob("*.json"))) if self.cache_dir.exists() else 0

        return {
            "hits": self._hits,
            "misses": self._misses,
            "total_requests": total,
            "hit_rate_percent": round(hit_rate, 2),
            "entries": entries,
            "enabled": self.enabled,
            "default_ttl": self.default_ttl,
            "directory": str(self.cache_dir),
        }


# Global cache instance
_response_cache: Optional[ResponseCache] = None


def get_response_cache() -> ResponseCache:
    """Get or create the process-wide response cache."""
    global _response_cache
    if _response_cache is None:
        _response_cache = ResponseCache()
    return _response_cache


def set_response_cache(cache: ResponseCache) -> None:
    """Replace the process-wide response cache."""
    global _response_cache
    _response_cache = cache
