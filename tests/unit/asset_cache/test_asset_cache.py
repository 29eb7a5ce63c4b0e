"""Unit tests for asset_cache.asset_cache module."""

import asyncio
import pytest

import httpx

from src.asset_cache.asset_cache import AssetCache, derive_local_path
from src.asset_cache.errors import (
    AssetDownloadError,
    DestinationMissingError,
    InvalidReferenceError,
)
from src.asset_cache.models import AssetAnalytics, AssetReference
from tests.fixtures.notion_objects import notion_file_url

OBJECT_ID = "d16195b7-7bd5-4a9f-8b5e-9a1c2f3e4d5c"


class CountingHandler:
    """MockTransport handler counting requests per URL path."""

    def __init__(self, status_code=200, content=b"PNGDATA"):
        self.status_code = status_code
        self.content = content
        self.requests = []

    def __call__(self, request):
        self.requests.append(str(request.url))
        return httpx.Response(self.status_code, content=self.content)


def make_cache(tmp_path, handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AssetCache(http_client=client, project_root=tmp_path), client


def hosted_ref(file_name="image.png", signature="sig1"):
    return AssetReference.from_object({
        'type': 'file',
        'file': {'url': notion_file_url(OBJECT_ID, file_name, signature)},
    })


@pytest.fixture
def asset_root(tmp_path):
    root = tmp_path / "src" / "assets" / "notion"
    root.mkdir(parents=True)
    return root


class TestDeriveLocalPath:
    """Test cases for derive_local_path function."""

    def test_uses_last_two_segments(self, tmp_path):
        """The object id and file name form the local path."""
        path = derive_local_path(notion_file_url(OBJECT_ID, "image.png"), tmp_path)
        assert path == tmp_path / OBJECT_ID / "image.png"

    def test_ignores_query_string(self, tmp_path):
        """Rotating signatures map to the same local path."""
        first = derive_local_path(notion_file_url(OBJECT_ID, "a.png", "one"), tmp_path)
        second = derive_local_path(notion_file_url(OBJECT_ID, "a.png", "two"), tmp_path)
        assert first == second

    def test_unquotes_file_name(self, tmp_path):
        """Percent-encoded file names are decoded."""
        path = derive_local_path(f"https://host/ws/{OBJECT_ID}/my%20file.pdf", tmp_path)
        assert path.name == "my file.pdf"

    def test_single_segment_is_invalid(self, tmp_path):
        """URLs without an object id segment are rejected."""
        with pytest.raises(InvalidReferenceError):
            derive_local_path("https://host/image.png", tmp_path)

    def test_traversal_segment_is_invalid(self, tmp_path):
        """Encoded path separators cannot escape the destination."""
        with pytest.raises(InvalidReferenceError, match="unsafe path segment"):
            derive_local_path("https://host/ws/obj/..%2Fescape.png", tmp_path)


class TestResolve:
    """Test cases for AssetCache.resolve."""

    @pytest.mark.asyncio
    async def test_miss_downloads_file(self, tmp_path, asset_root):
        """First resolution downloads the bytes and reports a miss."""
        handler = CountingHandler()
        cache, client = make_cache(tmp_path, handler)
        analytics = AssetAnalytics()

        resolution = await cache.resolve(hosted_ref(), asset_root, analytics=analytics)
        await client.aclose()

        local_file = asset_root / OBJECT_ID / "image.png"
        assert local_file.read_bytes() == b"PNGDATA"
        assert resolution.was_hit is False
        assert resolution.local_path == str(local_file)
        assert resolution.url == f"../../assets/notion/{OBJECT_ID}/image.png"
        assert analytics.downloaded == 1
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_hit_skips_download(self, tmp_path, asset_root):
        """A second resolution with a new signature reuses the cached file."""
        handler = CountingHandler()
        cache, client = make_cache(tmp_path, handler)
        analytics = AssetAnalytics()

        await cache.resolve(hosted_ref(signature="one"), asset_root, analytics=analytics)
        resolution = await cache.resolve(hosted_ref(signature="two"), asset_root, analytics=analytics)
        await client.aclose()

        assert resolution.was_hit is True
        assert len(handler.requests) == 1
        assert (analytics.downloaded, analytics.cached) == (1, 1)

    @pytest.mark.asyncio
    async def test_ignore_cache_downloads_again(self, tmp_path, asset_root):
        """ignore_cache forces a fresh download over an existing file."""
        handler = CountingHandler()
        cache, client = make_cache(tmp_path, handler)

        await cache.resolve(hosted_ref(), asset_root)
        handler.content = b"NEWDATA"
        resolution = await cache.resolve(hosted_ref(), asset_root, ignore_cache=True)
        await client.aclose()

        assert resolution.was_hit is False
        assert (asset_root / OBJECT_ID / "image.png").read_bytes() == b"NEWDATA"

    @pytest.mark.asyncio
    async def test_external_reference_passes_through(self, tmp_path, asset_root):
        """External URLs are not downloaded and not counted."""
        handler = CountingHandler()
        cache, client = make_cache(tmp_path, handler)
        analytics = AssetAnalytics()
        ref = AssetReference.from_object({'type': 'external', 'external': {'url': 'https://x.test/a.png'}})

        resolution = await cache.resolve(ref, asset_root, analytics=analytics)
        await client.aclose()

        assert resolution.url == 'https://x.test/a.png'
        assert resolution.was_hit is None
        assert analytics.total == 0
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_missing_destination_raises(self, tmp_path):
        """A destination directory that does not exist is an error."""
        cache, client = make_cache(tmp_path, CountingHandler())

        with pytest.raises(DestinationMissingError):
            await cache.resolve(hosted_ref(), tmp_path / "missing")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_http_error_raises_and_leaves_no_file(self, tmp_path, asset_root):
        """Failed downloads raise AssetDownloadError and write nothing."""
        cache, client = make_cache(tmp_path, CountingHandler(status_code=403))

        with pytest.raises(AssetDownloadError, match="HTTP 403"):
            await cache.resolve(hosted_ref(), asset_root)
        await client.aclose()

        assert not (asset_root / OBJECT_ID).exists() or not any((asset_root / OBJECT_ID).iterdir())

    @pytest.mark.asyncio
    async def test_concurrent_resolutions_share_one_download(self, tmp_path, asset_root):
        """Overlapping resolutions of the same file download it once."""
        handler = CountingHandler()
        cache, client = make_cache(tmp_path, handler)

        results = await asyncio.gather(*[
            cache.resolve(hosted_ref(signature=str(n)), asset_root) for n in range(5)
        ])
        await client.aclose()

        assert len(handler.requests) == 1
        assert sum(1 for r in results if r.was_hit is False) == 1
        assert len({r.url for r in results}) == 1


class TestPaths:
    """Test cases for content-root path helpers."""

    def test_resolve_asset_path_is_project_relative(self, tmp_path):
        """Content-root-relative paths become project-relative."""
        cache = AssetCache(project_root=tmp_path)
        assert cache.resolve_asset_path("../../assets/notion/obj/a.pdf") == "src/assets/notion/obj/a.pdf"

    def test_relative_to_content_root(self, tmp_path):
        cache = AssetCache(project_root=tmp_path)
        path = tmp_path / "src" / "assets" / "notion" / "obj" / "a.png"
        assert cache.relative_to_content_root(path) == "../../assets/notion/obj/a.png"

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self, tmp_path):
        """Only clients created by the cache are closed by it."""
        cache, client = make_cache(tmp_path, CountingHandler())

        await cache.close()

        assert client.is_closed is False
        await client.aclose()
