"""Pytest configuration and fixtures for integration tests.

Integration tests run the sync controller, document renderer, asset cache
and file store together. The Notion API is replaced by FakeNotionAPI and
asset downloads are served by an httpx MockTransport, so no test touches the
network.
"""

from pathlib import Path
from typing import List

import httpx
import pytest

from src.asset_cache.asset_cache import AssetCache
from src.content_store.store import FileContentStore


class DownloadLog(list):
    """URLs requested from the asset host; set ``status`` to fail downloads."""
    status = 200


@pytest.fixture
def project_root(tmp_path) -> Path:
    """Empty project directory the asset cache and store live under."""
    root = tmp_path / "site"
    root.mkdir()
    return root


@pytest.fixture
def downloads() -> List[str]:
    return DownloadLog()


@pytest.fixture
def asset_cache(project_root, downloads) -> AssetCache:
    """Asset cache whose downloads are answered in-process."""
    def handler(request: httpx.Request) -> httpx.Response:
        downloads.append(str(request.url))
        return httpx.Response(downloads.status, content=f"asset:{request.url.path}".encode())

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AssetCache(http_client=client, project_root=project_root)


@pytest.fixture
def file_store(project_root) -> FileContentStore:
    return FileContentStore(project_root / ".notion-sync" / "store")
