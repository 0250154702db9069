"""Cache-or-fetch book lookup.

Per call:
    START -> (isbn? CHECK_CACHE : QUERY_TEXT)
    CHECK_CACHE -> hit: DONE | miss: FETCH_REMOTE
    FETCH_REMOTE -> found: WRITE_CACHE -> DONE | not found / transport error: DONE(error)
No retries happen at this layer.
"""

import logging
from typing import Optional, Protocol

from catalog.config import get_settings
from catalog.exceptions import BookNotFoundError, MissingParameterError
from catalog.models.schemas import BookRecord
from catalog.services.book_cache import BookCache

logger = logging.getLogger(__name__)
settings = get_settings()


class CatalogFetcher(Protocol):
    """Remote catalog search capability."""

    def search(
        self,
        query: str,
        max_results: int = 10,
        requested_isbn: Optional[str] = None,
    ) -> list[BookRecord]:
        ...


class LookupService:
    """Looks up books by ISBN (cached) or free text (never cached)."""

    def __init__(
        self,
        cache: BookCache,
        fetcher: CatalogFetcher,
        search_max_results: int = settings.search_max_results,
    ):
        self.cache = cache
        self.fetcher = fetcher
        self.search_max_results = search_max_results

    def lookup(
        self,
        isbn: Optional[str] = None,
        query: Optional[str] = None,
    ) -> BookRecord | list[BookRecord]:
        """Look up by ISBN when one is given, otherwise by free text.

        Args:
            isbn: ISBN cache key
            query: Free-text search, used only when isbn is absent

        Returns:
            BookRecord for an ISBN lookup, list of up to ``search_max_results``
            records for a free-text lookup

        Raises:
            MissingParameterError: Neither isbn nor query given
            BookNotFoundError: The ISBN has no catalog match
            UpstreamError: The catalog call failed
        """
        isbn = isbn.strip() if isbn else ""
        query = query.strip() if query else ""

        if isbn:
            return self.lookup_isbn(isbn)
        if query:
            return self.search_text(query)

        raise MissingParameterError("ISBN or search query is required")

    def lookup_isbn(self, isbn: str) -> BookRecord:
        """Return the cached record for an ISBN, fetching and caching it on a miss."""
        entry = self.cache.get(isbn)
        if entry is not None:
            logger.info(f"Cache hit for ISBN {isbn}")
            return entry.record

        logger.info(f"Cache miss for ISBN {isbn}, querying catalog")
        records = self.fetcher.search(f"isbn:{isbn}", max_results=1, requested_isbn=isbn)
        if not records:
            logger.info(f"No books found for ISBN {isbn}")
            raise BookNotFoundError("Book not found")

        record = records[0]
        self.cache.put(isbn, record, source="google_api", validated=True)
        logger.info(f"Fetched and cached ISBN {isbn}: {record.title}")
        return record

    def search_text(self, query: str) -> list[BookRecord]:
        """Free-text search. Results are never cached."""
        records = self.fetcher.search(query, max_results=self.search_max_results)
        logger.info(f"Text search '{query}' returned {len(records)} result(s)")
        return records[: self.search_max_results]
