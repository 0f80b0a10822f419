"""SignalFeed exception hierarchy.

All application-specific exceptions inherit from :class:`SignalFeedError`.
The data source raises the :class:`BackendError` family; the feed
controller catches them at the fetch boundary.
"""

from __future__ import annotations


class SignalFeedError(Exception):
    """Base exception for all SignalFeed errors."""


# -- Configuration ----------------------------------------------------------


class ConfigError(SignalFeedError):
    """Invalid or missing configuration (backend URL, keys, settings)."""


# -- Backend / data access --------------------------------------------------


class BackendError(SignalFeedError):
    """A fetch from the hosted backend failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendUnavailableError(BackendError):
    """Network failure, timeout, or 5xx response. Safe to retry."""


class RateLimitError(BackendError):
    """Backend rate limit exceeded (HTTP 429)."""


class AuthError(BackendError):
    """Request rejected for missing or expired credentials (401/403)."""


class MalformedResponseError(BackendError):
    """Response body is not JSON or does not have the expected shape."""


# -- Domain -----------------------------------------------------------------


class InvalidSignalError(SignalFeedError):
    """A backend row could not be turned into a :class:`Signal`."""
