"""Search for arena-research.

- legacy: global relevance search over the v2 backend, normalized
- scoped: search within your own content or network over the v3 backend
- router: picks the backend for a set of options
"""

from .legacy import LegacySearch  # noqa: F401
from .normalizer import normalize_legacy_record  # noqa: F401
from .options import EntityKind, SearchOptions, SearchScope, quick_lookup  # noqa: F401
from .router import SearchRouter  # noqa: F401
from .scoped import ScopedSearch  # noqa: F401
from .sorting import ContentsSort, SearchSort  # noqa: F401

__all__ = [
    "LegacySearch",
    "ScopedSearch",
    "SearchRouter",
    "SearchOptions",
    "SearchScope",
    "EntityKind",
    "SearchSort",
    "ContentsSort",
    "normalize_legacy_record",
    "quick_lookup",
]
