"""
Exception types raised by the Movie DNA pipeline.

Kept separate from the clients and the pipeline so the HTTP layer can map
them to status codes without importing provider code.
"""

from typing import Optional

from constants import FATAL_PROVIDER_STATUSES


class MovieDNAError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(MovieDNAError):
    """The incoming request is missing a usable movie title."""


class NotFoundError(MovieDNAError):
    """The title search returned no matches."""

    def __init__(self, title: str, message: Optional[str] = None):
        self.title = title
        super().__init__(message or f'Movie "{title}" not found')


class ProviderError(MovieDNAError):
    """
    An external provider returned a non-success status or unusable payload.

    Transport failures (timeouts, refused connections) are reported with
    ``status=None``.
    """

    def __init__(
        self,
        provider: str,
        status: Optional[int] = None,
        body: str = "",
        message: Optional[str] = None,
    ):
        self.provider = provider
        self.status = status
        self.body = body
        if message is None:
            message = f"{provider} returned HTTP {status}" if status else f"{provider} request failed"
        super().__init__(message)

    @property
    def is_fatal(self) -> bool:
        """True when the failure affects every call to the provider (bad or revoked key)."""
        return self.status in FATAL_PROVIDER_STATUSES


class GenerationFailure(MovieDNAError):
    """The completion provider failed or produced no content."""
