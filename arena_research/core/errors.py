"""Error taxonomy for arena-research.

Every failure raised by the core layer derives from ``ArenaError`` so the
CLI can catch one type and report it.  None of these are retried
automatically: each one ends the operation that raised it.
"""

from __future__ import annotations

from typing import Optional

TOKEN_SETTINGS_URL = "https://www.are.na/settings/personal-access-tokens"

MISSING_TOKEN_MESSAGE = f"ARENA_ACCESS_TOKEN not configured. Get one from {TOKEN_SETTINGS_URL}"


class ArenaError(Exception):
    """Base class for all arena-research errors."""

    pass


class UnauthorizedError(ArenaError):
    """Raised when the credential is missing or rejected (HTTP 401)."""

    def __init__(self, message: str = MISSING_TOKEN_MESSAGE):
        super().__init__(message)


class ForbiddenError(ArenaError):
    """Raised when the resource exists but the caller lacks access (HTTP 403)."""

    def __init__(
        self,
        message: str = "This channel is private. You need to be a collaborator to view it.",
    ):
        super().__init__(message)


class NotFoundError(ArenaError):
    """Raised when a container, item or actor does not resolve (HTTP 404)."""

    def __init__(self, resource_kind: str, identifier: str):
        super().__init__(f"{resource_kind} not found: {identifier}")
        self.resource_kind = resource_kind
        self.identifier = identifier


class RateLimitedError(ArenaError):
    """Raised when the upstream rate limit is exhausted (HTTP 429)."""

    def __init__(self, wait_seconds: int, tier: str):
        super().__init__(f"Rate limited. Resets in {wait_seconds}s. Your tier: {tier}")
        self.wait_seconds = wait_seconds
        self.tier = tier


class ServerError(ArenaError):
    """Raised for any other non-2xx response."""

    def __init__(self, status_code: int, body_excerpt: str = ""):
        super().__init__(f"Are.na API {status_code}: {body_excerpt}")
        self.status_code = status_code
        self.body_excerpt = body_excerpt


class ConfigurationError(ArenaError):
    """Raised when local configuration makes an operation impossible."""

    pass


class MissingCredentialError(ConfigurationError, UnauthorizedError):
    """Raised before any network call when an operation requires a token.

    It is both a configuration problem and the same ``Unauthorized`` kind the
    transport reports for a 401, so callers can catch either.
    """

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or MISSING_TOKEN_MESSAGE)


def require_token(token: Optional[str]) -> str:
    """Return ``token`` or raise ``MissingCredentialError`` when it is empty."""
    if not token:
        raise MissingCredentialError()
    return token
