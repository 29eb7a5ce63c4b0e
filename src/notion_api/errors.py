"""Typed exception hierarchy for Notion API errors.

This module defines the custom exceptions raised by the Notion client wrapper.
All exceptions inherit from NotionError, itself a SyncError, so callers can
catch either the API-specific or the application-wide base class.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all notion-content-sync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class NotionError(SyncError):
    """Base exception for all Notion API errors."""
    pass


class InvalidCredentialsError(NotionError):
    """Raised when the integration token is missing or rejected."""

    def __init__(self, endpoint: str, reason: Optional[str] = None):
        message = f"Notion integration token is invalid (endpoint: {endpoint})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.endpoint = endpoint
        self.reason = reason


class ObjectNotFoundError(NotionError):
    """Raised when a database, page or block does not exist or is not shared."""

    def __init__(self, object_id: str):
        super().__init__(f"Notion object {object_id} not found")
        self.object_id = object_id


class APIUnreachableError(NotionError):
    """Raised when the Notion API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(NotionError):
    """Raised when API access fails after retries or due to access restrictions."""

    def __init__(self, message: str = "Notion API failure (after 3 retries)"):
        super().__init__(message)
