"""
Google Books API client.

Every call goes through ``CatalogCache`` first. Failures are raised as typed
errors from ``app.core.exceptions`` and never retried here.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from app.core.config import settings
from app.core.exceptions import (
    CatalogNotFoundError,
    LibraryValidationError,
    UpstreamError,
    UpstreamTimeoutError,
)
from app.schemas.catalog import CatalogConfigOut, SearchResponse, Volume
from app.services.catalog_cache import CatalogCache, make_cache_key
from app.utils.helpers import build_advanced_query

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your-google-books-api-key"
MAX_RESULTS_LIMIT = 40
USER_AGENT = "Bookshelf/1.0"


class GoogleBooksClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://www.googleapis.com/books/v1",
        timeout: float = 10.0,
        cache: Optional[CatalogCache] = None,
        search_ttl: int = 300,
        volume_ttl: int = 600,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache if cache is not None else CatalogCache()
        self.search_ttl = search_ttl
        self.volume_ttl = volume_ttl
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
            transport=transport,
        )

        if self.has_api_key():
            logger.info("Google Books API key configured - higher rate limits available")
        else:
            logger.info("Google Books API running without key - using free tier limits")

    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key != PLACEHOLDER_API_KEY)

    def get_config(self) -> CatalogConfigOut:
        """Current configuration without the key itself."""
        return CatalogConfigOut(
            base_url=self.base_url,
            has_api_key=self.has_api_key(),
            timeout=self.timeout,
            using_free_tier=not self.has_api_key(),
        )

    async def search(
        self,
        query: str,
        max_results: int = 10,
        start_index: int = 0,
        lang_restrict: Optional[str] = None,
        print_type: Optional[str] = None,
        order_by: Optional[str] = None,
        filter: Optional[str] = None,
    ) -> SearchResponse:
        if not query or not query.strip():
            raise LibraryValidationError("Search query must not be empty")

        params: Dict[str, Any] = {
            "q": query.strip(),
            "maxResults": min(max_results, MAX_RESULTS_LIMIT),
            "startIndex": start_index,
            "projection": "full",
        }
        if lang_restrict:
            params["langRestrict"] = lang_restrict
        if print_type:
            params["printType"] = print_type
        if order_by:
            params["orderBy"] = order_by
        if filter:
            params["filter"] = filter

        cache_key = make_cache_key("search", params)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for search: {query}")
            return cached

        logger.debug(f"Cache miss for search: {query}")
        data = await self._get_json("/volumes", params)
        result = self._parse(SearchResponse, data)
        logger.debug(
            f"Fetched {result.total_items} books, returned {len(result.items)} items"
        )
        self.cache.set(cache_key, result, self.search_ttl)
        return result

    async def advanced_search(
        self,
        title: Optional[str] = None,
        author: Optional[str] = None,
        publisher: Optional[str] = None,
        subject: Optional[str] = None,
        isbn: Optional[str] = None,
        **search_options: Any,
    ) -> SearchResponse:
        query = build_advanced_query(title, author, publisher, subject, isbn)
        if not query:
            raise LibraryValidationError("At least one search parameter must be provided")
        return await self.search(query, **search_options)

    async def get_by_id(self, volume_id: str) -> Volume:
        cache_key = make_cache_key("volume", {"id": volume_id})
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for book: {volume_id}")
            return cached

        logger.debug(f"Cache miss for book: {volume_id}")
        data = await self._get_json(
            f"/volumes/{quote(volume_id, safe='')}", {}, not_found_detail="Book not found"
        )
        volume = self._parse(Volume, data)
        logger.debug(f"Fetched book: {volume.volume_info.title}")
        self.cache.set(cache_key, volume, self.volume_ttl)
        return volume

    async def _get_json(
        self, path: str, params: Dict[str, Any], not_found_detail: Optional[str] = None
    ) -> Any:
        if self.has_api_key():
            params = {**params, "key": self.api_key}
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            logger.error("Google Books API request timeout")
            raise UpstreamTimeoutError() from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Error contacting Google Books API: {e}")
            raise UpstreamError("Error contacting Google Books API") from e

        if response.status_code == 404 and not_found_detail:
            logger.warning(f"Not found in Google Books: {path}")
            raise CatalogNotFoundError(not_found_detail)
        if response.is_error:
            logger.error(
                f"❌ Google Books API error: {response.status_code} {response.reason_phrase}"
            )
            raise UpstreamError(
                f"Failed to fetch from Google Books API: {response.reason_phrase}",
                upstream_status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("Google Books API returned invalid JSON") from e

    @staticmethod
    def _parse(model: type[BaseModel], data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"❌ Unexpected Google Books payload: {e}")
            raise UpstreamError("Unexpected response from Google Books API") from e

    async def close(self) -> None:
        await self._client.aclose()


_catalog_client: Optional[GoogleBooksClient] = None


async def get_catalog_client() -> GoogleBooksClient:
    """FastAPI dependency: the process-wide client, created on first use."""
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = GoogleBooksClient(
            api_key=settings.GOOGLE_BOOKS_API_KEY,
            base_url=settings.GOOGLE_BOOKS_BASE_URL,
            timeout=settings.GOOGLE_BOOKS_TIMEOUT,
            cache=CatalogCache(max_entries=settings.CATALOG_CACHE_MAX_ENTRIES),
            search_ttl=settings.CATALOG_SEARCH_CACHE_TTL,
            volume_ttl=settings.CATALOG_VOLUME_CACHE_TTL,
        )
    return _catalog_client


async def close_catalog_client() -> None:
    global _catalog_client
    if _catalog_client is not None:
        await _catalog_client.close()
        _catalog_client = None
