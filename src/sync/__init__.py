"""Incremental sync of a Notion database into a local content store."""

from .models import QueryOptions, SyncReport
from .sync_controller import (
    FORCE_RERENDER_ENV,
    SyncController,
    force_rerender_from_env,
    page_label,
)

__all__ = [
    'QueryOptions',
    'SyncReport',
    'FORCE_RERENDER_ENV',
    'SyncController',
    'force_rerender_from_env',
    'page_label',
]
