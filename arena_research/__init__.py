"""arena-research - Are.na research client.

Search, browse and traverse the Are.na content graph: channels, blocks and
users, with a response cache and rate-limit-aware transport.
"""

__version__ = "0.1.0"
__author__ = "arena-research contributors"

from arena_research.core.orchestrator import Orchestrator
from arena_research.search.options import SearchOptions, quick_lookup

__all__ = ["Orchestrator", "SearchOptions", "quick_lookup", "__version__"]
