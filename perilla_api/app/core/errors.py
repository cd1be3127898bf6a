"""
Error types raised by services and permission checks.

Every error carries a human readable ``message``.  The REST layer
does not distinguish between error kinds on the wire: all of them are
turned into the failure envelope ``{"status": "failed", "payload":
message}`` by the handlers in :mod:`perilla_api.app.core.envelope`.
The subclasses exist so that callers (and logs) can tell validation
problems, permission problems and lookup misses apart.
"""

from typing import Optional

from .constants import (
    ERR_ACCESS_DENIED,
    ERR_ENTRY_NOT_FOUND,
    ERR_INVALID_REQUEST,
    ERR_NOT_FOUND,
)


class PerillaError(Exception):
    """Base exception for the registry API."""

    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AccessDenied(PerillaError):
    """The caller is not allowed to perform the request."""

    default_message = ERR_ACCESS_DENIED


class InvalidRequest(PerillaError):
    """Malformed or missing query/body fields."""

    default_message = ERR_INVALID_REQUEST


class NotFound(PerillaError):
    """A looked up record does not exist."""

    default_message = ERR_NOT_FOUND


class EntryNotFound(NotFound):
    default_message = ERR_ENTRY_NOT_FOUND


class StoreError(PerillaError):
    """Wraps errors raised by the underlying database driver."""

    default_message = "Database error"


def ensure(value, error: PerillaError) -> None:
    """Raise ``error`` unless ``value`` is truthy."""
    if not value:
        raise error
