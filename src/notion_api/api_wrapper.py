"""API wrapper for the Notion REST API.

This module wraps an httpx.AsyncClient and provides error translation from
HTTP failures to our typed exception hierarchy. It integrates with the retry
logic for handling rate limits and exposes cursor pagination as a lazy async
iterator.
"""

import logging
import re
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

import httpx

from .auth import Authenticator
from .errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    ObjectNotFoundError,
)
from .retry_logic import RateLimitedError, retry_on_rate_limit

logger = logging.getLogger(__name__)

DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_PAGE_SIZE = 100


def is_full_page(obj: Dict[str, Any]) -> bool:
    """Return True if a database query result is a full page object.

    Partial page objects (pages the integration can see but not read) carry
    only ``object`` and ``id``.
    """
    return obj.get('object') == 'page' and 'url' in obj


def is_full_block(obj: Dict[str, Any]) -> bool:
    """Return True if a block children result is a full block object."""
    return obj.get('object') == 'block' and 'type' in obj


class NotionAPI:
    """Wrapper around an httpx.AsyncClient for the Notion API.

    This class provides a thin wrapper over the HTTP client that:
    1. Handles authentication using the Authenticator
    2. Translates HTTP errors to typed exceptions
    3. Integrates retry logic for 429 rate limits
    4. Provides cursor pagination as a lazy async iterator

    Example:
        >>> api = NotionAPI(Authenticator())
        >>> async for page in api.iterate_paginated(api.query_database, database_id="abc"):
        ...     print(page["id"])
        >>> await api.close()
    """

    def __init__(
        self,
        authenticator: Authenticator,
        notion_version: str = DEFAULT_NOTION_VERSION,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the API wrapper.

        Args:
            authenticator: Authenticator instance for loading credentials
            notion_version: Value of the Notion-Version header
            timeout_ms: Request timeout in milliseconds
            transport: Optional httpx transport (used by tests)
        """
        self._authenticator = authenticator
        self._notion_version = notion_version
        self._timeout = timeout_ms / 1000
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._base_url = ""

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client.

        The client is created lazily on first use so that constructing the
        wrapper never touches credentials.

        Raises:
            InvalidCredentialsError: If credentials are missing
        """
        if self._client is None:
            creds = self._authenticator.get_credentials()
            self._base_url = creds.base_url
            self._client = httpx.AsyncClient(
                base_url=creds.base_url,
                headers={
                    'Authorization': f"Bearer {creds.token}",
                    'Notion-Version': self._notion_version,
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _sanitize_credentials(self, text: str) -> str:
        """Mask bearer tokens and integration secrets in error text."""
        if not text:
            return text
        sanitized = re.sub(
            r'Bearer\s+[^\s\n\r]+',
            'Bearer ***REDACTED***',
            text,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'\b(secret|ntn)_[A-Za-z0-9]{8,}\b',
            '***REDACTED***',
            sanitized
        )
        return sanitized

    def _translate_error(self, exception: Exception, operation: str, object_id: str) -> Exception:
        """Translate HTTP exceptions to typed Notion exceptions.

        Args:
            exception: The original exception from the HTTP client
            operation: Description of the operation that failed (for logging)
            object_id: Id of the database or block the request targeted

        Returns:
            Exception: Translated exception (one of our typed exceptions)
        """
        if isinstance(exception, (httpx.TimeoutException, httpx.TransportError)):
            return APIUnreachableError(endpoint=self._base_url)

        if isinstance(exception, httpx.HTTPStatusError):
            status_code = exception.response.status_code
            if status_code == 401:
                return InvalidCredentialsError(endpoint=self._base_url)
            if status_code == 404:
                return ObjectNotFoundError(object_id=object_id)

        safe_error_msg = self._sanitize_credentials(str(exception))
        logger.error(f"API operation failed: {operation} - {safe_error_msg}")
        return APIAccessError(f"Notion API failure during {operation}")

    async def _request(
        self,
        method: str,
        url: str,
        operation: str,
        object_id: str,
        **kwargs,
    ) -> Dict[str, Any]:
        """Send one request with rate-limit retries and error translation."""

        async def _send() -> Dict[str, Any]:
            try:
                client = self._get_client()
                response = await client.request(method, url, **kwargs)
                if response.status_code == 429:
                    retry_after = response.headers.get('Retry-After', '0')
                    raise RateLimitedError(
                        retry_after=float(retry_after) if retry_after.isdigit() else 0.0
                    )
                response.raise_for_status()
                return response.json()
            except (RateLimitedError, InvalidCredentialsError):
                raise
            except Exception as e:
                raise self._translate_error(e, operation, object_id) from e

        return await retry_on_rate_limit(_send)

    async def query_database(
        self,
        database_id: str,
        start_cursor: Optional[str] = None,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        archived: Optional[bool] = None,
        filter_properties: Optional[List[str]] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """Query one page of results from a database.

        Args:
            database_id: The database to query
            start_cursor: Cursor returned by the previous page (None for first page)
            filter: Notion filter object
            sorts: Notion sort objects
            archived: Whether to return archived pages
            filter_properties: Property ids to limit the returned properties to
            page_size: Number of results per page (max 100)

        Returns:
            Dict with ``results``, ``has_more`` and ``next_cursor``

        Raises:
            InvalidCredentialsError: If the token is rejected
            ObjectNotFoundError: If the database doesn't exist or isn't shared
            APIUnreachableError: If API is unreachable
            APIAccessError: If API access fails after retries
        """
        body: Dict[str, Any] = {'page_size': page_size}
        if start_cursor:
            body['start_cursor'] = start_cursor
        if filter is not None:
            body['filter'] = filter
        if sorts is not None:
            body['sorts'] = sorts
        if archived is not None:
            body['archived'] = archived

        params = [('filter_properties', prop) for prop in (filter_properties or [])]

        logger.debug(f"Notion API: POST /databases/{database_id}/query (cursor={start_cursor})")
        return await self._request(
            'POST',
            f"/databases/{database_id}/query",
            operation=f"query_database({database_id})",
            object_id=database_id,
            json=body,
            params=params,
        )

    async def list_block_children(
        self,
        block_id: str,
        start_cursor: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """List one page of the children of a block or page.

        Args:
            block_id: Parent block or page id
            start_cursor: Cursor returned by the previous page (None for first page)
            page_size: Number of results per page (max 100)

        Returns:
            Dict with ``results``, ``has_more`` and ``next_cursor``

        Raises:
            ObjectNotFoundError: If the block doesn't exist
            APIUnreachableError: If API is unreachable
            APIAccessError: If API access fails after retries
        """
        params: Dict[str, Any] = {'page_size': page_size}
        if start_cursor:
            params['start_cursor'] = start_cursor

        logger.debug(f"Notion API: GET /blocks/{block_id}/children (cursor={start_cursor})")
        return await self._request(
            'GET',
            f"/blocks/{block_id}/children",
            operation=f"list_block_children({block_id})",
            object_id=block_id,
            params=params,
        )

    @staticmethod
    async def iterate_paginated(
        method: Callable[..., Awaitable[Dict[str, Any]]],
        **kwargs,
    ) -> AsyncIterator[Dict[str, Any]]:
        """Iterate every result of a paginated endpoint.

        Pages are requested lazily as the caller consumes results. Each call
        starts a fresh enumeration from the first page.

        Args:
            method: A paginated method such as query_database or list_block_children
            **kwargs: Arguments forwarded to every call of ``method``

        Yields:
            Each result object, across all pages, in API order
        """
        start_cursor: Optional[str] = None
        while True:
            response = await method(start_cursor=start_cursor, **kwargs)
            for result in response.get('results', []):
                yield result

            start_cursor = response.get('next_cursor')
            if not response.get('has_more') or not start_cursor:
                break
