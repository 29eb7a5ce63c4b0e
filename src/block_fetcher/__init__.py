"""Recursive block tree fetching for Notion pages."""

from .block_fetcher import BlockTreeFetcher
from .models import (
    AssetBlockType,
    Block,
    get_asset_reference,
    iter_blocks,
    set_asset_reference,
)

__all__ = [
    'BlockTreeFetcher',
    'AssetBlockType',
    'Block',
    'get_asset_reference',
    'iter_blocks',
    'set_asset_reference',
]
