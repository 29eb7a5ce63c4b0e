"""Data models for CLI operations.

This module defines all data models used by the CLI module.
All models use dataclasses for clean, type-safe data structures.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Sync pass completed without failures
    - GENERAL_ERROR (1): General error (config issues, validation failures)
    - AUTH_ERROR (3): Notion rejected the integration token
    - NETWORK_ERROR (4): Network connectivity or API availability issues
    - DOCUMENT_FAILURES (5): Pass completed but some pages failed to sync

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
    DOCUMENT_FAILURES = 5


@dataclass
class SyncConfig:
    """Sync configuration loaded from .notion-sync/config.yaml.

    Attributes:
        database_id: Notion database whose pages are synced
        collection_name: Collection name used in log labels
        asset_path: Directory (under src/) assets are cached in
        store_path: Directory of the file content store
        body_format: Stored body format ("html" or "markdown")
        filter: Notion filter object for the database query
        sorts: Notion sort objects for the database query
        archived: Query archived pages instead of live ones
        filter_properties: Property ids to limit returned properties to
        transform_stages: Extra transform stages (names or [name, options])
        timeout_ms: API request timeout in milliseconds
        notion_version: Notion-Version header value
        base_url: Notion API base URL (None for the default)
        ignore_asset_cache: Download assets again even if cached

    Example:
        >>> config = SyncConfig(database_id="d16195b7...", collection_name="blog")
    """
    database_id: str
    collection_name: str = "notion"
    asset_path: str = "assets/notion"
    store_path: str = ".notion-sync/store"
    body_format: str = "html"
    filter: Optional[Dict[str, Any]] = None
    sorts: Optional[List[Dict[str, Any]]] = None
    archived: Optional[bool] = None
    filter_properties: Optional[List[str]] = None
    transform_stages: List[Any] = field(default_factory=list)
    timeout_ms: int = 60_000
    notion_version: str = "2022-06-28"
    base_url: Optional[str] = None
    ignore_asset_cache: bool = False
