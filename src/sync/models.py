"""Data models for sync passes."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class QueryOptions:
    """Options passed through to the database query.

    Attributes:
        filter: Notion filter object
        sorts: Notion sort objects
        archived: Query archived pages instead of live ones
        filter_properties: Property ids to limit the returned properties to
        page_size: Results per request (max 100)
    """
    filter: Optional[Dict[str, Any]] = None
    sorts: Optional[List[Dict[str, Any]]] = None
    archived: Optional[bool] = None
    filter_properties: Optional[List[str]] = None
    page_size: int = 100

    def to_kwargs(self) -> Dict[str, Any]:
        return {
            'filter': self.filter,
            'sorts': self.sorts,
            'archived': self.archived,
            'filter_properties': self.filter_properties,
            'page_size': self.page_size,
        }


@dataclass
class SyncReport:
    """What one sync pass did.

    Attributes:
        created: Ids of documents rendered and stored for the first time
        updated: Ids of documents re-rendered over an existing entry
        skipped: Ids of documents whose digest was unchanged
        deleted: Ids removed because they are no longer in the database
        failed: Ids whose render or store write failed
        fetched_count: Number of full pages seen in the database query
    """
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    fetched_count: int = 0

    @property
    def write_count(self) -> int:
        """Number of store writes (creates and updates)."""
        return len(self.created) + len(self.updated)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)
