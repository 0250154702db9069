"""FastAPI dependencies wiring services to the shared key-value store."""

from fastapi import Depends

from catalog.core.kv_store import KeyValueStore
from catalog.core.redis_client import get_kv_store
from catalog.services.book_cache import BookCache
from catalog.services.google_books_api import GoogleBooksClient
from catalog.services.lookup_service import LookupService
from catalog.services.quota_tracker import QuotaTracker


def get_book_cache(store: KeyValueStore = Depends(get_kv_store)) -> BookCache:
    return BookCache(store)


def get_quota_tracker(store: KeyValueStore = Depends(get_kv_store)) -> QuotaTracker:
    return QuotaTracker(store)


def get_catalog_client(quota: QuotaTracker = Depends(get_quota_tracker)):
    """Google Books client for one request; the session is closed afterwards."""
    with GoogleBooksClient(quota_tracker=quota) as client:
        yield client


def get_lookup_service(
    cache: BookCache = Depends(get_book_cache),
    client: GoogleBooksClient = Depends(get_catalog_client),
) -> LookupService:
    """Dependency for getting the lookup service.

    Usage in FastAPI endpoints:
        @router.get("/lookup")
        def lookup(service: LookupService = Depends(get_lookup_service)):
            return service.lookup(isbn="9780134190440")
    """
    return LookupService(cache, client)
