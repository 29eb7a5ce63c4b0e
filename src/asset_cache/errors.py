"""Typed exception hierarchy for asset cache errors."""

from typing import Optional

from src.notion_api.errors import SyncError


class AssetCacheError(SyncError):
    """Base exception for all asset cache errors."""
    pass


class InvalidReferenceError(AssetCacheError):
    """Raised when an asset URL cannot be decomposed into an object id and file name."""

    def __init__(self, url: str, reason: Optional[str] = None):
        message = f"Invalid asset URL: {url}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.url = url
        self.reason = reason


class DestinationMissingError(AssetCacheError):
    """Raised when the asset destination root directory does not exist."""

    def __init__(self, destination: str):
        super().__init__(f"Directory {destination} does not exist")
        self.destination = destination


class AssetDownloadError(AssetCacheError):
    """Raised when fetching the remote bytes of an asset fails."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to download asset: {reason}")
        self.url = url
        self.reason = reason
