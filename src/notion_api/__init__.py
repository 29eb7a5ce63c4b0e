"""Notion client library for content sync.

This package provides Python abstractions over the Notion REST API:
authentication, cursor pagination, rate-limit retries and helpers for
flattening page properties.
"""

from .errors import (
    SyncError,
    NotionError,
    InvalidCredentialsError,
    ObjectNotFoundError,
    APIUnreachableError,
    APIAccessError,
)
from .api_wrapper import NotionAPI, is_full_block, is_full_page
from .auth import Authenticator, Credentials

__all__ = [
    "SyncError",
    "NotionError",
    "InvalidCredentialsError",
    "ObjectNotFoundError",
    "APIUnreachableError",
    "APIAccessError",
    "NotionAPI",
    "is_full_block",
    "is_full_page",
    "Authenticator",
    "Credentials",
]
