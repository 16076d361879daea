"""
Google Books API client.

Google Books is the external catalog: search results, ISBN lookups and
volume details all come from the public ``/volumes`` endpoints.
"""

from typing import Any

import httpx

from app.core.config import get_settings
from app.core.logging import get_logger
from app.schemas.book import CatalogBook
from app.services.errors import CatalogLookupError

logger = get_logger(__name__)

# Google caps startIndex + maxResults for volume searches
MAX_SEARCH_RESULTS = 1000


class GoogleBooksClient:
    """Client for Google Books API."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        settings = get_settings()
        self.api_key = settings.GOOGLE_BOOKS_API_KEY
        self.client = client or httpx.AsyncClient(
            base_url=settings.GOOGLE_BOOKS_BASE_URL,
            timeout=settings.EXTERNAL_API_TIMEOUT,
        )

    async def close(self):
        await self.client.aclose()

    async def lookup_by_isbn(self, isbn: str) -> CatalogBook | None:
        """
        Look up a volume by ISBN-10 or ISBN-13.

        Returns:
            The first matching volume, or None when Google has no match.

        Raises:
            CatalogLookupError: on transport failure or a non-2xx response.
        """
        books, _ = await self.search(f"isbn:{isbn}", max_results=1)
        return books[0] if books else None

    async def isbn_exists(self, isbn10: str | None = None, isbn13: str | None = None) -> bool:
        """Check whether Google Books knows either ISBN."""
        if not isbn10 and not isbn13:
            return False
        _, total = await self.search(f"isbn:{isbn10 or isbn13}", max_results=1)
        return total > 0

    async def search(
        self,
        query: str,
        start_index: int = 0,
        max_results: int = 40,
        order_by: str | None = None,
    ) -> tuple[list[CatalogBook], int]:
        """
        Execute a volume search.

        Returns:
            Tuple of (books, totalItems reported by Google)
        """
        if max_results <= 0:
            return [], 0

        params: dict[str, Any] = {
            "q": query,
            "startIndex": start_index,
            "maxResults": min(max_results, 40),
        }
        if order_by:
            params["orderBy"] = order_by
        if self.api_key:
            params["key"] = self.api_key

        data = await self._get_json("/volumes", params)
        items = data.get("items") or []
        return [self.map_volume(item) for item in items], int(data.get("totalItems") or 0)

    async def search_by_author(self, name: str, max_results: int = 40) -> list[CatalogBook]:
        books, _ = await self.search(
            f'inauthor:"{name}"', max_results=max_results, order_by="relevance"
        )
        return books

    async def get_volume(self, volume_id: str) -> CatalogBook | None:
        """Fetch one volume by its Google id; None when it does not exist."""
        try:
            response = await self.client.get(f"/volumes/{volume_id}", params=self._key_params())
        except httpx.HTTPError as e:
            raise CatalogLookupError(f"Google Books request failed: {e}") from e

        if response.status_code == 404:
            logger.warning(f"Book not found in Google Books: {volume_id}")
            return None
        if response.status_code != 200:
            raise CatalogLookupError(
                f"Failed to fetch book from Google Books API: {response.status_code}"
            )

        data = response.json()
        if not data.get("id") or not data.get("volumeInfo"):
            logger.warning("Invalid data received from Google Books API")
            return None
        return self.map_volume(data)

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict:
        try:
            response = await self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise CatalogLookupError(f"Google Books request failed: {e}") from e

        if response.status_code != 200:
            raise CatalogLookupError(
                f"Google Books returned {response.status_code} for {path}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise CatalogLookupError("Google Books returned invalid JSON") from e

    def _key_params(self) -> dict[str, str]:
        return {"key": self.api_key} if self.api_key else {}

    @staticmethod
    def map_volume(item: dict) -> CatalogBook:
        """Map a Google Books volume resource to a CatalogBook."""
        volume_info = item.get("volumeInfo", {})

        identifiers = {
            ident.get("type"): ident.get("identifier")
            for ident in volume_info.get("industryIdentifiers", [])
        }

        cover_image = (volume_info.get("imageLinks") or {}).get("thumbnail")
        if cover_image and cover_image.startswith("http://"):
            cover_image = cover_image.replace("http://", "https://", 1)

        return CatalogBook(
            source="google",
            id=item["id"],
            title=volume_info.get("title") or "",
            authors=volume_info.get("authors") or [],
            description=volume_info.get("description"),
            published_date=volume_info.get("publishedDate"),
            publisher=volume_info.get("publisher"),
            isbn10=identifiers.get("ISBN_10"),
            isbn13=identifiers.get("ISBN_13"),
            page_count=volume_info.get("pageCount"),
            categories=volume_info.get("categories"),
            language=volume_info.get("language"),
            average_rating=volume_info.get("averageRating"),
            cover_image=cover_image,
        )


async def get_google_books_client():
    """FastAPI dependency yielding a client that is closed after the request."""
    client = GoogleBooksClient()
    try:
        yield client
    finally:
        await client.close()
