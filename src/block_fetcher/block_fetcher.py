"""Block tree fetcher for Notion pages.

This module retrieves the complete, arbitrarily deep content tree of a page.
Children are listed through the paginated block children endpoint; every
block reporting nested content is queued and fetched in turn, so the tree is
fully realized before rendering starts.

The walk uses an explicit work stack instead of recursion: Notion pages can
nest list items and toggles far deeper than Python's recursion limit.
"""

import logging
from typing import Awaitable, Callable, List, Optional, Tuple

from src.asset_cache.models import AssetReference
from src.notion_api.api_wrapper import NotionAPI, is_full_block

from .models import (
    ASSET_FIELDS,
    Block,
    asset_block_type,
    get_asset_reference,
    set_asset_reference,
)

logger = logging.getLogger(__name__)

# (reference, resolve_path) -> resolved reference
AssetResolver = Callable[[AssetReference, bool], Awaitable[AssetReference]]


class BlockTreeFetcher:
    """Fetches the realized block tree of a page.

    Partial block records (blocks the integration cannot read) are skipped.
    Asset-bearing blocks (file, image, video, audio and callout icons) have
    their reference resolved through the given resolver before they are
    added to the tree; a failing resolution leaves the remote URL in place.

    Example:
        >>> fetcher = BlockTreeFetcher(api, resolve_asset=renderer.fetch_asset)
        >>> blocks = await fetcher.fetch_tree(page_id)
        >>> print(f"{len(blocks)} top-level blocks")
    """

    def __init__(self, api: NotionAPI, resolve_asset: Optional[AssetResolver] = None):
        """Initialize the fetcher.

        Args:
            api: Notion API wrapper used to list block children
            resolve_asset: Coroutine resolving an asset reference (optional;
                           assets are left untouched without one)
        """
        self._api = api
        self._resolve_asset = resolve_asset
        self.block_count = 0

    async def fetch_tree(self, root_id: str) -> List[Block]:
        """Fetch every block below a page or block.

        Args:
            root_id: Page or block id whose descendants to fetch

        Returns:
            List of top-level blocks, each with its children realized

        Raises:
            NotionError: If listing the children of any block fails
        """
        roots: List[Block] = []
        stack: List[Tuple[str, List[Block]]] = [(root_id, roots)]

        while stack:
            parent_id, siblings = stack.pop()
            logger.debug(f"Fetching block {parent_id}")

            with_children: List[Block] = []
            async for obj in self._api.iterate_paginated(
                self._api.list_block_children, block_id=parent_id
            ):
                if not is_full_block(obj):
                    continue

                block = Block.from_object(obj)
                await self._resolve_block_asset(block)
                siblings.append(block)
                self.block_count += 1

                if block.has_children:
                    with_children.append(block)

            # Reversed so earlier siblings' subtrees are fetched first
            for block in reversed(with_children):
                logger.debug(f"Fetching children of block {block.id}")
                stack.append((block.id, block.children))

        return roots

    async def _resolve_block_asset(self, block: Block) -> None:
        """Resolve the asset reference of an asset-bearing block in place."""
        kind = asset_block_type(block)
        if kind is None or self._resolve_asset is None:
            return

        ref = get_asset_reference(block)
        if ref is None:
            return

        try:
            resolved = await self._resolve_asset(ref, ASSET_FIELDS[kind].project_relative)
        except Exception as e:
            logger.error(f"Failed to resolve asset of {block.type} block {block.id}: {e}")
            return

        set_asset_reference(block, resolved)
