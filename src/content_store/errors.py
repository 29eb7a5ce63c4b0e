"""Typed exception hierarchy for content store errors."""

from typing import Optional

from src.notion_api.errors import SyncError


class ContentStoreError(SyncError):
    """Base exception for all content store errors."""
    pass


class StoreError(ContentStoreError):
    """Raised when reading or writing a stored entry fails."""

    def __init__(self, location: str, operation: str, reason: Optional[str] = None):
        message = f"Store operation '{operation}' failed for {location}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.location = location
        self.operation = operation
        self.reason = reason


class StoreValidationError(ContentStoreError):
    """Raised when an entry does not have the shape the store accepts."""

    def __init__(self, message: str, entry_field: Optional[str] = None):
        if entry_field:
            full_message = f"Invalid store entry field '{entry_field}': {message}"
        else:
            full_message = f"Invalid store entry: {message}"
        super().__init__(full_message)
        self.entry_field = entry_field
        self.original_message = message
