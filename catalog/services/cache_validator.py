"""Confirm cached (typically bulk-imported) books against Google Books."""

import logging
import time

from catalog.constants import (
    UNKNOWN_AUTHOR,
    UNKNOWN_TITLE,
    VALIDATION_DELAY_SECONDS,
    VALIDATION_MAX_BATCH,
    VALIDATION_MIN_REMAINING_QUOTA,
)
from catalog.exceptions import UpstreamError
from catalog.models.schemas import BookRecord, ValidateCacheResponse
from catalog.services.book_cache import BookCache
from catalog.services.lookup_service import CatalogFetcher
from catalog.services.quota_tracker import QuotaTracker

logger = logging.getLogger(__name__)


class InsufficientQuotaError(Exception):
    """Too few Google Books calls remain today to start a batch."""

    def __init__(self, remaining: int):
        super().__init__(f"Insufficient quota remaining: {remaining}")
        self.remaining = remaining


def merge_records(cached: BookRecord, fetched: BookRecord) -> BookRecord:
    """Overlay fetched metadata on a cached record.

    A fetched value wins when present and not a placeholder; otherwise the
    cached value is kept.
    """
    return BookRecord(
        isbn=fetched.isbn or cached.isbn,
        title=fetched.title if fetched.title != UNKNOWN_TITLE else cached.title,
        authors=fetched.authors if fetched.authors != (UNKNOWN_AUTHOR,) else cached.authors,
        publisher=fetched.publisher or cached.publisher,
        published_date=fetched.published_date or cached.published_date,
        description=fetched.description or cached.description,
        thumbnail=fetched.thumbnail or cached.thumbnail,
        industry_identifiers=fetched.industry_identifiers or cached.industry_identifiers,
        categories=fetched.categories or cached.categories,
        page_count=fetched.page_count or cached.page_count,
        language=fetched.language or cached.language,
        maturity_rating=fetched.maturity_rating or cached.maturity_rating,
    )


def validate_cached_book(cache: BookCache, fetcher: CatalogFetcher, isbn: str) -> bool:
    """Re-fetch one cached ISBN and mark it validated.

    Args:
        cache: Book cache
        fetcher: Catalog search capability
        isbn: Cache key to validate

    Returns:
        True if the entry was updated; False if it isn't cached, the catalog
        has no match, or the catalog call failed
    """
    entry = cache.get(isbn)
    if entry is None:
        logger.info(f"Nothing cached for ISBN {isbn}, skipping validation")
        return False

    try:
        records = fetcher.search(f"isbn:{isbn}", max_results=1, requested_isbn=isbn)
    except UpstreamError as e:
        logger.error(f"Error validating ISBN {isbn}: {e.message}")
        return False

    if not records:
        logger.info(f"No results for ISBN {isbn}")
        return False

    merged = merge_records(entry.record, records[0])
    cache.put(isbn, merged, source="google_api", validated=True)
    logger.info(f"Validated and updated ISBN {isbn}")
    return True


def validate_unvalidated_books(
    cache: BookCache,
    fetcher: CatalogFetcher,
    quota: QuotaTracker,
    delay_seconds: float = VALIDATION_DELAY_SECONDS,
) -> ValidateCacheResponse:
    """Validate a batch of unvalidated entries within today's remaining quota.

    The batch is at most half of the remaining quota, capped at
    VALIDATION_MAX_BATCH.

    Raises:
        InsufficientQuotaError: Fewer than VALIDATION_MIN_REMAINING_QUOTA calls remain
    """
    remaining = quota.stats().remaining
    if remaining < VALIDATION_MIN_REMAINING_QUOTA:
        raise InsufficientQuotaError(remaining)

    limit = min(remaining // 2, VALIDATION_MAX_BATCH)
    pending = cache.unvalidated(limit)
    if not pending:
        return ValidateCacheResponse(message="No unvalidated books to process")

    validated = 0
    failed = 0
    for idx, entry in enumerate(pending):
        if idx and delay_seconds:
            time.sleep(delay_seconds)

        if validate_cached_book(cache, fetcher, entry.isbn):
            validated += 1
        else:
            failed += 1

    logger.info(f"Cache validation complete: {validated} validated, {failed} failed of {len(pending)}")
    return ValidateCacheResponse(
        message="Validation complete",
        validated=validated,
        failed=failed,
        processed=len(pending),
    )
