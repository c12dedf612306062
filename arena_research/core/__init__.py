"""Core functionality for arena-research.

This package contains the essential components: data models, transport,
rate gate, response cache, graph traversal, configuration, logging and the
orchestrator that ties them together.
"""

from .data_models import (  # noqa: F401
    Actor,
    Container,
    Item,
    Page,
    PageMeta,
    RateLimitStatus,
    entity_from_dict,
    item_from_dict,
)
from .errors import (  # noqa: F401
    ArenaError,
    ConfigurationError,
    ForbiddenError,
    MissingCredentialError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
)
from .http_client import ArenaTransport  # noqa: F401
from .logging_setup import configure_logging  # noqa: F401
from .orchestrator import Orchestrator  # noqa: F401
from .config import Config, get_config, ValidationResult  # noqa: F401
from .cache import ResponseCache, get_response_cache  # noqa: F401
from .rate_limiter import RateGate, get_rate_gate  # noqa: F401
from .traversal import GraphTraversal, ResourceLookup  # noqa: F401

__all__ = [
    # Models
    "Actor",
    "Container",
    "Item",
    "Page",
    "PageMeta",
    "RateLimitStatus",
    "entity_from_dict",
    "item_from_dict",
    # Errors
    "ArenaError",
    "ConfigurationError",
    "ForbiddenError",
    "MissingCredentialError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "UnauthorizedError",
    # Core
    "ArenaTransport",
    "configure_logging",
    "Orchestrator",
    "GraphTraversal",
    "ResourceLookup",
    # Config
    "Config",
    "get_config",
    "ValidationResult",
    # Caching
    "ResponseCache",
    "get_response_cache",
    # Rate Limiting
    "RateGate",
    "get_rate_gate",
]
