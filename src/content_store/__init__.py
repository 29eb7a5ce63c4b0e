"""Local content store for synced Notion documents.

This package defines the keyed store contract the sync controller writes to,
with an in-memory backend and a file backend (markdown files with YAML front
matter).
"""

from .models import StoreEntry
from .store import ContentStore, FileContentStore, MemoryContentStore, validate_entry
from .errors import ContentStoreError, StoreError, StoreValidationError

__all__ = [
    'StoreEntry',
    'ContentStore',
    'FileContentStore',
    'MemoryContentStore',
    'validate_entry',
    'ContentStoreError',
    'StoreError',
    'StoreValidationError',
]
