"""Google Books API integration service."""

import logging
from typing import Any, Optional

import requests
from pydantic import ValidationError

from catalog.config import get_settings
from catalog.constants import (
    GOOGLE_BOOKS_MAX_RESULTS,
    PREFERRED_IDENTIFIER_TYPES,
    STRING_LIST_FIELDS,
    VOLUME_INFO_DEFAULTS,
    VOLUME_INFO_TYPES,
)
from catalog.exceptions import UpstreamError
from catalog.models.schemas import BookRecord, IndustryIdentifier
from catalog.services.quota_tracker import QuotaTracker
from catalog.utils.isbn_utils import normalize_isbn

logger = logging.getLogger(__name__)
settings = get_settings()


class GoogleBooksClient:
    """Queries the Google Books volumes endpoint and shapes the results.

    No retries: a failed call raises UpstreamError and the caller decides
    whether to try again.
    """

    def __init__(
        self,
        api_key: Optional[str] = settings.google_books_api_key,
        base_url: str = settings.google_books_base_url,
        timeout: int = settings.google_books_timeout,
        session: Optional[requests.Session] = None,
        quota_tracker: Optional[QuotaTracker] = None,
    ):
        """
        Args:
            api_key: Optional API key (raises rate limits)
            base_url: Volumes search endpoint
            timeout: Request timeout in seconds
            session: HTTP session (one is created when omitted)
            quota_tracker: Counts successful calls against the daily quota
        """
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.quota_tracker = quota_tracker

    def fetch_volumes(self, query: str, max_results: int = 10) -> list[dict[str, Any]]:
        """Run a raw volumes search.

        Args:
            query: ``isbn:<isbn>`` or free text (URL-encoded by requests)
            max_results: Maximum volumes to request (capped at the API limit)

        Returns:
            Raw volume objects; empty when the catalog has no match

        Raises:
            UpstreamError: On transport errors, non-2xx responses or malformed JSON
        """
        params: dict[str, Any] = {
            "q": query,
            "maxResults": max(1, min(max_results, GOOGLE_BOOKS_MAX_RESULTS)),
        }
        if self.api_key:
            params["key"] = self.api_key

        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Network error querying Google Books for '{query}': {e}")
            raise UpstreamError(f"Google Books request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Google Books API returned status {response.status_code} for '{query}'")
            raise UpstreamError(f"Google Books API error: {response.status_code}")

        if self.quota_tracker is not None:
            self.quota_tracker.increment()

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Malformed JSON from Google Books for '{query}': {e}")
            raise UpstreamError(f"Malformed Google Books response: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamError("Malformed Google Books response: expected a JSON object")

        items = data.get("items") or []
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise UpstreamError("Malformed Google Books response: 'items' is not a list of volumes")

        logger.info(f"✓ Google Books returned {len(items)} volume(s) for '{query}'")
        return items

    def search(
        self,
        query: str,
        max_results: int = 10,
        requested_isbn: Optional[str] = None,
    ) -> list[BookRecord]:
        """Search and shape results into BookRecords.

        Args:
            query: Search query string
            max_results: Maximum records to return
            requested_isbn: ISBN being looked up, used when a volume lists none

        Returns:
            Shaped records, at most ``max_results``

        Raises:
            UpstreamError: If the call fails or a volume cannot be shaped
        """
        volumes = self.fetch_volumes(query, max_results)
        try:
            return [shape_volume(volume, requested_isbn) for volume in volumes[:max_results]]
        except ValidationError as e:
            logger.error(f"Unusable volume from Google Books for '{query}': {e}")
            raise UpstreamError(f"Malformed Google Books response: {e}") from e

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def _field(volume_info: dict[str, Any], name: str) -> Any:
    """Read a volumeInfo field, substituting the table default for falsy or wrong-typed values."""
    value = volume_info.get(name)
    # bool is an int subclass; JSON true/false is never a page count
    if isinstance(value, bool) or not isinstance(value, VOLUME_INFO_TYPES[name]):
        value = None

    if name in STRING_LIST_FIELDS and value:
        value = [entry for entry in value if isinstance(entry, str) and entry]

    return value or VOLUME_INFO_DEFAULTS[name]


def extract_identifiers(volume_info: dict[str, Any]) -> tuple[IndustryIdentifier, ...]:
    """Collect well-formed industryIdentifiers entries."""
    identifiers = []
    for entry in _field(volume_info, "industryIdentifiers"):
        if not isinstance(entry, dict):
            continue
        id_type, value = entry.get("type"), entry.get("identifier")
        if isinstance(id_type, str) and isinstance(value, str):
            identifiers.append(IndustryIdentifier(type=id_type, identifier=value))
    return tuple(identifiers)


def derive_isbn(
    identifiers: tuple[IndustryIdentifier, ...],
    requested_isbn: Optional[str] = None,
) -> str:
    """Pick the record ISBN: ISBN_13, then ISBN_10, then the requested ISBN.

    Every candidate is normalized to ISBN-13; unusable candidates are skipped.

    Returns:
        13-digit ISBN, or "" when none can be derived
    """
    for id_type in PREFERRED_IDENTIFIER_TYPES:
        for identifier in identifiers:
            if identifier.type == id_type:
                normalized = normalize_isbn(identifier.identifier)
                if normalized:
                    return normalized

    return normalize_isbn(requested_isbn) or ""


def secure_thumbnail(url: Optional[str]) -> Optional[str]:
    """Rewrite ``http:`` to ``https:`` in a thumbnail URL."""
    if not url or not isinstance(url, str):
        return None
    return url.replace("http:", "https:", 1)


def shape_volume(volume: dict[str, Any], requested_isbn: Optional[str] = None) -> BookRecord:
    """Map one Google Books volume onto a BookRecord.

    Missing, empty or wrong-typed fields take their default from VOLUME_INFO_DEFAULTS.

    Args:
        volume: Raw volume object (``items[n]`` of the API response)
        requested_isbn: ISBN used for the lookup, if any

    Returns:
        Shaped, immutable BookRecord
    """
    volume_info = volume.get("volumeInfo") or {}
    if not isinstance(volume_info, dict):
        volume_info = {}

    identifiers = extract_identifiers(volume_info)
    image_links = volume_info.get("imageLinks") or {}
    thumbnail = image_links.get("thumbnail") if isinstance(image_links, dict) else None

    return BookRecord(
        isbn=derive_isbn(identifiers, requested_isbn),
        title=_field(volume_info, "title"),
        authors=tuple(_field(volume_info, "authors")),
        publisher=_field(volume_info, "publisher"),
        published_date=_field(volume_info, "publishedDate"),
        description=_field(volume_info, "description"),
        thumbnail=secure_thumbnail(thumbnail),
        industry_identifiers=identifiers,
        categories=tuple(_field(volume_info, "categories")),
        page_count=_field(volume_info, "pageCount"),
        language=_field(volume_info, "language"),
        maturity_rating=_field(volume_info, "maturityRating"),
    )
