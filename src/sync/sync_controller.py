"""Incremental sync of a Notion database into a local content store.

One pass:

1. Read the ids already in the store.
2. Enumerate the database. Partial pages are skipped; every full page is
   marked as seen. Pages whose last_edited_time equals the stored digest are
   skipped unless re-rendering is forced; every other page gets a render task.
   Render tasks run concurrently and write their own store entry.
3. Delete every stored id that was not seen.
4. Wait for all render tasks.

A failing render or store write only fails that document. A failing
enumeration aborts the pass before anything is deleted.
"""

import asyncio
import logging
import os
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Set

from src.asset_cache.asset_cache import VIRTUAL_CONTENT_ROOT, AssetCache
from src.content_store.errors import ContentStoreError
from src.content_store.models import StoreEntry
from src.content_store.store import ContentStore
from src.notion_api.api_wrapper import NotionAPI, is_full_page
from src.notion_api.properties import page_metadata
from src.rendering.models import RenderResult
from src.rendering.pipeline import TransformChain
from src.rendering.renderer import DocumentRenderer

from .models import QueryOptions, SyncReport

logger = logging.getLogger(__name__)

FORCE_RERENDER_ENV = 'FORCE_RERENDER'

DEFAULT_ASSET_PATH = 'src/assets/notion'

DEFAULT_COLLECTION_NAME = 'notion'


class Renderer(Protocol):
    def render(self, chain: TransformChain) -> Awaitable[RenderResult]:
        ...


# (page, log label) -> renderer for that page
RendererFactory = Callable[[Dict[str, Any], str], Renderer]


def force_rerender_from_env() -> bool:
    """Any non-empty FORCE_RERENDER value forces every page to re-render."""
    return bool(os.environ.get(FORCE_RERENDER_ENV))


def page_label(collection_name: str, page_id: str) -> str:
    """Short log label for a page.

    Example:
        >>> page_label("blog", "d16195b7-7bd5-4a9f-8b5e-9a1c2f3e4d5c")
        'blog/d16..d5c'
    """
    return f"{collection_name}/{page_id[:3]}..{page_id[-3:]}"


class SyncController:
    """Runs sync passes of one database into one content store.

    Example:
        >>> controller = SyncController(api, store, database_id="abc...")
        >>> report = await controller.sync()
        >>> print(f"{len(report.created)} created, {len(report.deleted)} deleted")
    """

    def __init__(
        self,
        api: NotionAPI,
        store: ContentStore,
        database_id: str,
        query: Optional[QueryOptions] = None,
        asset_path: str = DEFAULT_ASSET_PATH,
        asset_cache: Optional[AssetCache] = None,
        chain: Optional[TransformChain] = None,
        renderer_factory: Optional[RendererFactory] = None,
        collection_name: str = DEFAULT_COLLECTION_NAME,
        force_rerender: Optional[bool] = None,
        ignore_asset_cache: bool = False,
    ):
        """Initialize the controller.

        Args:
            api: Notion API wrapper
            store: Content store receiving the synced entries
            database_id: Database whose pages to sync
            query: Filter, sort and archive options for the database query
            asset_path: Directory assets are cached under
            asset_cache: Shared asset cache (created if not given)
            chain: Transform chain for every render (default chain if not given)
            renderer_factory: Creates the renderer for a page (DocumentRenderer
                              if not given)
            collection_name: Name used in log labels
            force_rerender: Re-render every page regardless of its digest
                            (None reads the FORCE_RERENDER environment variable)
            ignore_asset_cache: Download assets again even if cached locally
        """
        self._api = api
        self._store = store
        self.database_id = database_id
        self.query = query or QueryOptions()
        self.asset_path = asset_path
        self._asset_cache = asset_cache or AssetCache()
        self._chain = chain or TransformChain()
        self._renderer_factory = renderer_factory or self._default_renderer
        self.collection_name = collection_name
        self.force_rerender = force_rerender_from_env() if force_rerender is None else force_rerender
        self._ignore_asset_cache = ignore_asset_cache

    def _default_renderer(self, page: Dict[str, Any], label: str) -> DocumentRenderer:
        return DocumentRenderer(
            self._api,
            page,
            self.asset_path,
            self._asset_cache,
            label=label,
            ignore_cache=self._ignore_asset_cache,
        )

    async def sync(self) -> SyncReport:
        """Run one sync pass.

        Returns:
            SyncReport describing what changed

        Raises:
            NotionError: If enumerating the database fails
            ContentStoreError: If the store's ids cannot be read
        """
        report = SyncReport()
        cached_ids: Set[str] = set(self._store.keys())
        tasks: List['asyncio.Task[None]'] = []

        logger.info(f"Loading pages from database {self.database_id}")
        if self.force_rerender:
            logger.info("Forcing re-render of every page")

        try:
            async for page in self._api.iterate_paginated(
                self._api.query_database,
                database_id=self.database_id,
                **self.query.to_kwargs(),
            ):
                if not is_full_page(page):
                    continue

                report.fetched_count += 1
                page_id = page['id']
                cached_ids.discard(page_id)
                label = page_label(self.collection_name, page_id)

                existing = self._stored_entry(page_id, label)
                if (
                    existing is not None
                    and existing.digest == page.get("last_edited_time")
                    and not self.force_rerender
                ):
                    logger.debug(f"{label} Skipped page {page_metadata(page)}")
                    report.skipped.append(page_id)
                    continue

                tasks.append(asyncio.create_task(
                    self._render_page(page, label, existing is not None, report)
                ))
        except Exception:
            # Scheduled renders are not cancelled; let them settle first
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        for page_id in sorted(cached_ids):
            self._delete_page(page_id, report)

        await asyncio.gather(*tasks)

        logger.info(
            f"Synced {report.fetched_count} pages: {len(report.created)} created, "
            f"{len(report.updated)} updated, {len(report.skipped)} skipped, "
            f"{len(report.deleted)} deleted, {len(report.failed)} failed"
        )
        return report

    async def _render_page(
        self,
        page: Dict[str, Any],
        label: str,
        is_update: bool,
        report: SyncReport,
    ) -> None:
        page_id = page['id']
        try:
            renderer = self._renderer_factory(page, label)
            result = await renderer.render(self._chain)
        except Exception as e:
            logger.exception(f"{label} Failed to render: {e}")
            result = RenderResult()

        if not result.ok:
            logger.error(f"{label} Failed to render page")
            report.failed.append(page_id)
            return

        entry = StoreEntry(
            id=page_id,
            digest=page['last_edited_time'],
            data=result.data,
            rendered=result.rendered,
            file_path=f"{VIRTUAL_CONTENT_ROOT}/{page_id}.md",
            asset_imports=list(result.rendered.image_paths),
        )

        try:
            self._store.set(entry)
        except ContentStoreError as e:
            logger.error(f"{label} Failed to store page: {e}")
            report.failed.append(page_id)
            return
        except Exception as e:
            logger.exception(f"{label} Failed to store page: {e}")
            report.failed.append(page_id)
            return

        if is_update:
            logger.info(f"{label} Updated page {page_metadata(page)}")
            report.updated.append(page_id)
        else:
            logger.info(f"{label} Created page {page_metadata(page)}")
            report.created.append(page_id)

    def _stored_entry(self, page_id: str, label: str) -> Optional[StoreEntry]:
        """Return the stored entry for a page; an unreadable entry counts as absent."""
        try:
            return self._store.get(page_id)
        except ContentStoreError as e:
            logger.warning(f"{label} Ignoring unreadable store entry: {e}")
            return None

    def _delete_page(self, page_id: str, report: SyncReport) -> None:
        label = page_label(self.collection_name, page_id)
        try:
            self._store.delete(page_id)
        except ContentStoreError as e:
            logger.error(f"{label} Failed to delete page: {e}")
            report.failed.append(page_id)
            return
        except Exception as e:
            logger.exception(f"{label} Failed to delete page: {e}")
            report.failed.append(page_id)
            return

        logger.info(f"{label} Deleted page")
        report.deleted.append(page_id)

    async def close(self) -> None:
        """Release the HTTP clients of the API wrapper and the asset cache."""
        await self._asset_cache.close()
        await self._api.close()
