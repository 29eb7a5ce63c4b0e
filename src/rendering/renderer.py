"""Document renderer: one page in, property data and rendered markup out.

The renderer resolves the page's own assets (cover, icon and files
properties), fetches the complete block tree, and runs it through a
TransformChain. Any failure is logged with the document's label and turned
into an empty RenderResult, so one broken page never aborts a sync pass.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.asset_cache.asset_cache import AssetCache
from src.asset_cache.errors import AssetCacheError
from src.asset_cache.models import AssetAnalytics, AssetReference
from src.block_fetcher.block_fetcher import BlockTreeFetcher
from src.notion_api.api_wrapper import NotionAPI
from src.notion_api.properties import transform_properties

from .models import RenderContext, RenderedDocument, RenderResult
from .pipeline import TransformChain

logger = logging.getLogger(__name__)


class DocumentRenderer:
    """Renders one Notion page.

    A renderer is created per page and per sync pass; it owns that render's
    asset analytics and the list of local asset paths it referenced.

    Example:
        >>> renderer = DocumentRenderer(api, page, "src/assets/notion", cache)
        >>> result = await renderer.render(TransformChain())
        >>> result.rendered.headings
        [HeadingOutlineEntry(depth=0, text='Intro', slug='intro')]
    """

    def __init__(
        self,
        api: NotionAPI,
        page: Dict[str, Any],
        asset_path: str,
        asset_cache: AssetCache,
        label: Optional[str] = None,
        ignore_cache: bool = False,
    ):
        """Initialize the renderer.

        Args:
            api: Notion API wrapper
            page: Full page object from the database query
            asset_path: Directory assets are cached under (relative paths are
                        taken from the asset cache's project root)
            asset_cache: Shared asset cache
            label: Prefix for log messages (defaults to the page id)
            ignore_cache: Download assets again even if cached locally
        """
        self._api = api
        self.page = page
        self._asset_cache = asset_cache
        self._ignore_cache = ignore_cache
        self.label = label or page['id']

        path = Path(asset_path)
        self.asset_dir = path if path.is_absolute() else asset_cache.project_root / path

        self.analytics = AssetAnalytics()
        self.asset_paths: List[str] = []
        self._asset_dir_ready = False

    async def render(self, chain: TransformChain) -> RenderResult:
        """Render the page.

        Args:
            chain: Transform chain to run the block tree through

        Returns:
            RenderResult with data and rendered document, or an empty
            RenderResult if anything failed
        """
        try:
            logger.debug(f"{self.label} Generating page metadata")
            data = await self._get_page_data()
            logger.debug(f"{self.label} Generated page metadata ({len(self.asset_paths)} assets found)")

            logger.debug(f"{self.label} Fetching page content")
            fetcher = BlockTreeFetcher(self._api, resolve_asset=self.fetch_asset)
            blocks = await fetcher.fetch_tree(self.page['id'])
            logger.debug(f"{self.label} Fetched page content ({fetcher.block_count} blocks found)")

            if self.analytics.total > 0:
                message = f"{self.label} Found {self.analytics.downloaded} assets to download"
                if self.analytics.cached > 0:
                    message += f" ({self.analytics.cached} already cached)"
                logger.info(message)

            logger.debug(f"{self.label} Rendering page")
            context = RenderContext(page_id=self.page['id'], asset_paths=list(self.asset_paths))
            html = chain.process(blocks, context)
            logger.debug(f"{self.label} Rendered page")

            return RenderResult(
                data=data,
                rendered=RenderedDocument(
                    html=html,
                    headings=context.headings,
                    image_paths=list(self.asset_paths),
                    blocks=blocks,
                ),
            )
        except Exception as e:
            logger.exception(f"{self.label} Failed to render: {e}")
            return RenderResult()

    async def fetch_asset(self, ref: AssetReference, resolve_path: bool = True) -> AssetReference:
        """Cache a Notion-hosted asset locally and point the reference at it.

        Only Notion-hosted files are cached; other references are returned
        unchanged, as is the original reference if caching fails.

        Args:
            ref: Asset reference from a block or the page
            resolve_path: Rewrite the path relative to the project root
                          instead of the virtual content root

        Returns:
            Reference pointing at the local copy
        """
        if not ref.is_cacheable:
            return ref

        try:
            await self._ensure_asset_dir()
            resolution = await self._asset_cache.resolve(
                ref,
                self.asset_dir,
                ignore_cache=self._ignore_cache,
                analytics=self.analytics,
            )
        except (AssetCacheError, OSError) as e:
            logger.error(f"{self.label} Failed to cache asset: {e}")
            return ref

        path = resolution.url
        self.asset_paths.append(path)
        if resolve_path:
            path = self._asset_cache.resolve_asset_path(path)
        return ref.with_url(path)

    async def _ensure_asset_dir(self) -> None:
        if not self._asset_dir_ready:
            await asyncio.to_thread(os.makedirs, self.asset_dir, exist_ok=True)
            self._asset_dir_ready = True

    async def _fetch_object(self, obj: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        ref = AssetReference.from_object(obj)
        if ref is None:
            return obj
        resolved = await self.fetch_asset(ref)
        return resolved.to_object()

    async def _fetch_files_property(self, prop: Dict[str, Any]) -> Dict[str, Any]:
        files = await asyncio.gather(*[self._fetch_object(f) for f in prop.get('files') or []])
        return {**prop, 'files': list(files)}

    async def _get_page_data(self) -> Dict[str, Any]:
        """Build the property data for the content store."""
        page = self.page
        properties = dict(page.get('properties') or {})
        file_props = [name for name, prop in properties.items() if prop.get('type') == 'files']

        cover, icon, *files = await asyncio.gather(
            self._fetch_object(page.get('cover')),
            self._fetch_object(page.get('icon')),
            *[self._fetch_files_property(properties[name]) for name in file_props],
        )
        for name, prop in zip(file_props, files):
            properties[name] = prop

        return {
            'id': page['id'],
            'icon': icon,
            'cover': cover,
            'archived': page.get('archived', False),
            'in_trash': page.get('in_trash', False),
            'url': page.get('url'),
            'public_url': page.get('public_url'),
            'properties': transform_properties(properties),
        }
