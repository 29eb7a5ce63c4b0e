"""Local cache for Notion-hosted binary assets.

This package downloads expiring Notion file URLs to stable local paths and
reports, per render, how many files were downloaded or reused.
"""

from .asset_cache import AssetCache, VIRTUAL_CONTENT_ROOT, derive_local_path
from .models import AssetAnalytics, AssetKind, AssetReference, AssetResolution
from .errors import (
    AssetCacheError,
    AssetDownloadError,
    DestinationMissingError,
    InvalidReferenceError,
)

__all__ = [
    'AssetCache',
    'VIRTUAL_CONTENT_ROOT',
    'derive_local_path',
    'AssetAnalytics',
    'AssetKind',
    'AssetReference',
    'AssetResolution',
    'AssetCacheError',
    'AssetDownloadError',
    'DestinationMissingError',
    'InvalidReferenceError',
]
