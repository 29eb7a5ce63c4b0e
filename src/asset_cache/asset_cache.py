"""Local cache for Notion-hosted assets.

Notion serves uploaded files (images, PDFs, icons, covers) from object-store
URLs carrying signatures that expire after an hour. This module downloads such
files once into a local asset directory and hands back stable paths that can be
embedded in rendered markup.

Given a URL such as::

    https://prod-files-secure.s3.us-west-2.amazonaws.com/ed3b245b-.../d16195b7-.../image.png?X-Amz-...

the last path segment is the file name and the one before it is a stable
per-object id. The file is stored at ``<destination>/d16195b7-.../image.png``;
the query string is ignored, so rotating signatures map to the same file.
"""

import asyncio
import logging
import os
import uuid
from pathlib import Path
from typing import Dict, Optional, Tuple, Union
from urllib.parse import unquote, urlparse

import httpx

from .errors import AssetDownloadError, DestinationMissingError, InvalidReferenceError
from .models import AssetAnalytics, AssetReference, AssetResolution

logger = logging.getLogger(__name__)

# Rendered entries are addressed as if they lived here, relative to the project root
VIRTUAL_CONTENT_ROOT = "src/content/notion"

DEFAULT_DOWNLOAD_TIMEOUT = 60.0

PathLike = Union[str, os.PathLike]


def derive_local_path(url: str, destination_root: PathLike) -> Path:
    """Derive the local path an asset URL is cached at.

    Args:
        url: Asset URL (query string and fragment are ignored)
        destination_root: Root directory of the asset cache

    Returns:
        Path: ``<destination_root>/<object_id>/<file_name>``

    Raises:
        InvalidReferenceError: If the URL has fewer than two path segments or
            a segment would escape the destination directory

    Example:
        >>> derive_local_path("https://host/ws/obj/a.png?sig=1", "/tmp/assets")
        PosixPath('/tmp/assets/obj/a.png')
    """
    try:
        path = urlparse(url).path
    except ValueError as e:
        raise InvalidReferenceError(url, str(e))

    segments = [unquote(segment) for segment in path.split('/') if segment]
    if len(segments) < 2:
        raise InvalidReferenceError(url, "expected an object id and a file name")

    object_id, file_name = segments[-2], segments[-1]
    for segment in (object_id, file_name):
        if segment in ('.', '..') or '/' in segment or '\\' in segment or '\x00' in segment:
            raise InvalidReferenceError(url, f"unsafe path segment '{segment}'")

    return Path(destination_root) / object_id / file_name


class AssetCache:
    """Downloads Notion-hosted files on first use and reuses them afterwards.

    The cache is safe to use from concurrent coroutines. Resolutions of the
    same derived path that overlap share a single download; each file is
    written to a temporary name and moved into place, so a reader never sees
    a partially written file.

    Example:
        >>> cache = AssetCache()
        >>> resolution = await cache.resolve(ref, "/project/src/assets/notion")
        >>> resolution.url
        '../../assets/notion/d16195b7-.../image.png'
        >>> await cache.close()
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        project_root: Optional[PathLike] = None,
    ):
        """Initialize the asset cache.

        Args:
            http_client: Client used for downloads (created lazily if omitted)
            project_root: Project root the virtual content root is relative to
                          (defaults to the current working directory)
        """
        self._client = http_client
        self._owns_client = http_client is None
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self._in_flight: Dict[str, 'asyncio.Future[None]'] = {}

    @property
    def content_root(self) -> Path:
        """Absolute path of the virtual content root."""
        return self.project_root / VIRTUAL_CONTENT_ROOT

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=DEFAULT_DOWNLOAD_TIMEOUT,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the download client if this cache created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def relative_to_content_root(self, file_path: PathLike) -> str:
        """Express a local file path relative to the virtual content root."""
        relative = os.path.relpath(os.path.abspath(file_path), self.content_root)
        return relative.replace(os.sep, '/')

    def resolve_asset_path(self, raw_path: str) -> str:
        """Turn a content-root-relative path into a project-relative path.

        Example:
            >>> cache.resolve_asset_path("../../assets/notion/obj/a.pdf")
            'src/assets/notion/obj/a.pdf'
        """
        absolute = os.path.normpath(self.content_root / raw_path)
        return os.path.relpath(absolute, self.project_root).replace(os.sep, '/')

    async def resolve(
        self,
        ref: Optional[AssetReference],
        destination_root: PathLike,
        ignore_cache: bool = False,
        analytics: Optional[AssetAnalytics] = None,
    ) -> AssetResolution:
        """Resolve an asset reference to a locally cached copy.

        References that are not Notion-hosted files pass through unchanged
        and are reported as neither hit nor miss.

        Args:
            ref: The asset reference to resolve
            destination_root: Existing directory the asset is cached under
            ignore_cache: Download again even if the file exists locally
            analytics: Optional per-render counters to update

        Returns:
            AssetResolution with the content-root-relative path

        Raises:
            InvalidReferenceError: If the URL cannot be decomposed
            DestinationMissingError: If destination_root does not exist
            AssetDownloadError: If the download fails
        """
        if ref is None or not ref.is_cacheable:
            return AssetResolution(url=ref.url if ref else None)

        file_path, was_hit = await self.download_file(ref.url, destination_root, ignore_cache)
        if analytics is not None:
            analytics.record(was_hit)

        return AssetResolution(
            url=self.relative_to_content_root(file_path),
            local_path=str(file_path),
            was_hit=was_hit,
        )

    async def download_file(
        self,
        url: str,
        destination_root: PathLike,
        ignore_cache: bool = False,
    ) -> Tuple[Path, bool]:
        """Download a file into the cache unless it is already there.

        Args:
            url: Asset URL
            destination_root: Existing directory the asset is cached under
            ignore_cache: Download again even if the file exists locally

        Returns:
            Tuple of (local file path, True if the cached file was reused)

        Raises:
            InvalidReferenceError: If the URL cannot be decomposed
            DestinationMissingError: If destination_root does not exist
            AssetDownloadError: If the download fails
        """
        if not await asyncio.to_thread(os.path.isdir, destination_root):
            raise DestinationMissingError(str(destination_root))

        file_path = derive_local_path(url, destination_root)
        key = str(file_path)

        # The checks and the registration below must not be separated by an await
        pending = self._in_flight.get(key)
        if pending is not None:
            await pending
            logger.debug(f"Reused concurrent download of `{file_path.name}`")
            return file_path, True

        if not ignore_cache and file_path.exists():
            logger.debug(f"Skipped downloading file `{file_path.name}` (cached at `{file_path}`)")
            return file_path, True

        task = asyncio.ensure_future(self._fetch(url, file_path))
        self._in_flight[key] = task
        try:
            await task
        finally:
            self._in_flight.pop(key, None)

        logger.debug(f"Downloaded file `{file_path.name}` (created `{file_path}`)")
        return file_path, False

    async def _fetch(self, url: str, file_path: Path) -> None:
        """Fetch the full remote body and move it into place atomically."""
        try:
            response = await self._get_client().get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AssetDownloadError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise AssetDownloadError(url, type(e).__name__) from e

        await asyncio.to_thread(_write_atomic, file_path, response.content)


def _write_atomic(file_path: Path, content: bytes) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = file_path.with_name(f".{file_path.name}.{uuid.uuid4().hex}.part")
    try:
        temp_path.write_bytes(content)
        os.replace(temp_path, file_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
