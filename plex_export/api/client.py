"""
Async client for the Plex Media Server library API with retry on transient failures.
"""

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from plex_export.exceptions import (
    CatalogRequestError,
    NoChildrenError,
    TransientCatalogError,
)
from plex_export.models.catalog import CatalogDocument
from plex_export.models.config import ExportConfig

log = logging.getLogger(__name__)

JSON_HEADERS = {"Accept": "application/json"}
XML_HEADERS = {"Accept": "application/xml"}

# Statuses worth another attempt; everything else >= 400 fails immediately
RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})

# Plex answers a children request for an empty container with one of these
NO_CHILDREN_STATUSES = frozenset({400, 404})


class PlexCatalogClient:
    """
    Async client for the Plex library endpoints.

    Every metadata request is made twice, once per representation, so the
    JSON and XML documents can both be persisted verbatim. Transient failures
    are retried with exponential backoff.
    """

    ASSET_CHUNK_SIZE = 131072  # 128 KB

    def __init__(self, config: ExportConfig):
        self.base_url = config.server_address
        self.token = config.auth_token
        self.max_retries = config.max_retries
        self.retry_base_delay = config.retry_base_delay
        self.request_timeout = config.request_timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept-Encoding": "gzip, deflate"},
                timeout=aiohttp.ClientTimeout(
                    total=self.request_timeout, sock_connect=15
                ),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "PlexCatalogClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    async def _backoff(self, attempt: int, endpoint: str, reason: Any) -> None:
        delay = self.retry_base_delay * (2 ** (attempt - 1))
        log.debug(
            f"Request to {endpoint} failed (attempt {attempt}/"
            f"{self.max_retries + 1}): {reason}. Retrying in {delay:.1f}s..."
        )
        await asyncio.sleep(delay)

    async def _request_body(self, endpoint: str, headers: Dict[str, str]) -> bytes:
        """
        Performs a GET request and returns the raw body, undecoded.

        Raises:
            TransientCatalogError: If a retryable failure persists after all retries.
            CatalogRequestError: For any other HTTP error status.
        """
        await self._initialize_session()
        url = self._url(endpoint)
        attempts = self.max_retries + 1
        last_reason: Any = None
        last_status: Optional[int] = None

        for attempt in range(1, attempts + 1):
            try:
                async with self._session.get(
                    url, params={"X-Plex-Token": self.token}, headers=headers
                ) as r:
                    if r.status < 400:
                        return await r.read()
                    if r.status not in RETRYABLE_STATUSES:
                        raise CatalogRequestError(
                            f"Plex API error {r.status} for {endpoint}",
                            url=endpoint,
                            status=r.status,
                        )
                    last_reason, last_status = f"HTTP {r.status}", r.status
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_reason, last_status = e, None

            if attempt < attempts:
                await self._backoff(attempt, endpoint, last_reason)

        raise TransientCatalogError(
            f"Request to {endpoint} failed after {attempts} attempts: {last_reason}",
            url=endpoint,
            status=last_status,
        )

    async def fetch_listing(self, endpoint: str) -> CatalogDocument:
        """Fetches an endpoint in both its JSON and XML representations."""
        json_body = await self._request_body(endpoint, JSON_HEADERS)
        xml_body = await self._request_body(endpoint, XML_HEADERS)
        try:
            return CatalogDocument(json_body, xml_body)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError both land here
            raise CatalogRequestError(
                f"Invalid JSON returned for {endpoint}: {e}", url=endpoint
            ) from e

    # Public API Methods
    async def fetch_sections(self) -> CatalogDocument:
        return await self.fetch_listing("/library/sections/all")

    async def fetch_section_items(self, section_key: str) -> CatalogDocument:
        return await self.fetch_listing(f"/library/sections/{section_key}/all")

    async def fetch_entity(self, rating_key: str) -> CatalogDocument:
        return await self.fetch_listing(f"/library/metadata/{rating_key}")

    async def fetch_children(self, rating_key: str) -> CatalogDocument:
        """
        Fetches the children of a show or season.

        Raises:
            NoChildrenError: If the container has no children.
        """
        endpoint = f"/library/metadata/{rating_key}/children"
        try:
            document = await self.fetch_listing(endpoint)
        except CatalogRequestError as e:
            if e.status in NO_CHILDREN_STATUSES:
                raise NoChildrenError(
                    f"No children for {rating_key}", url=endpoint, status=e.status
                ) from e
            raise

        if not document.media_container.get("Metadata"):
            raise NoChildrenError(f"No children for {rating_key}", url=endpoint)
        return document

    async def fetch_asset(self, ref: str) -> AsyncIterator[bytes]:
        """
        Streams a binary asset (cover, background art, theme) in chunks.

        Only opening the response is retried; a failure mid-stream propagates.
        """
        await self._initialize_session()
        url = self._url(ref)
        attempts = self.max_retries + 1
        reason: Any = None
        streaming = False

        for attempt in range(1, attempts + 1):
            try:
                async with self._session.get(
                    url, params={"X-Plex-Token": self.token}
                ) as r:
                    if r.status >= 400:
                        if r.status not in RETRYABLE_STATUSES:
                            raise CatalogRequestError(
                                f"Plex asset error {r.status} for {ref}",
                                url=ref,
                                status=r.status,
                            )
                        reason = f"HTTP {r.status}"
                    else:
                        streaming = True
                        async for chunk in r.content.iter_chunked(
                            self.ASSET_CHUNK_SIZE
                        ):
                            yield chunk
                        return
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if streaming:
                    raise TransientCatalogError(
                        f"Asset {ref} was interrupted: {e}", url=ref
                    ) from e
                reason = e

            if attempt < attempts:
                await self._backoff(attempt, ref, reason)

        raise TransientCatalogError(
            f"Asset {ref} failed after {attempts} attempts: {reason}", url=ref
        )

    async def fetch_identity(self) -> Dict[str, Any]:
        """Returns the server identity, used to check connectivity."""
        body = await self._request_body("/identity", JSON_HEADERS)
        try:
            return json.loads(body).get("MediaContainer", {})
        except (ValueError, AttributeError) as e:
            raise CatalogRequestError(f"Invalid identity response: {e}") from e
