"""Admin API routes for the book cache and Google Books quota."""

import logging
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from catalog.api.dependencies import get_book_cache, get_catalog_client, get_quota_tracker
from catalog.config import get_settings
from catalog.constants import UNVALIDATED_LISTING_LIMIT
from catalog.models.schemas import (
    DeleteCacheRequest,
    DeleteCacheResponse,
    QuotaReportResponse,
    TaskQueuedResponse,
    UnvalidatedBook,
    ValidateCacheRequest,
    ValidateCacheResponse,
)
from catalog.services.book_cache import BookCache
from catalog.services.cache_validator import (
    InsufficientQuotaError,
    validate_cached_book,
    validate_unvalidated_books,
)
from catalog.services.google_books_api import GoogleBooksClient
from catalog.services.quota_tracker import QuotaTracker
from catalog.workers.tasks import process_bulk_import, validate_cache

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()


@router.get("/quota-stats", response_model=QuotaReportResponse)
def quota_stats(
    include_books: bool = False,
    cache: BookCache = Depends(get_book_cache),
    quota: QuotaTracker = Depends(get_quota_tracker),
) -> QuotaReportResponse:
    """Report today's Google Books usage and the cache's validation state."""
    report = QuotaReportResponse(quota=quota.stats(), cache=cache.stats())

    if include_books:
        report.unvalidated_books = [
            UnvalidatedBook(isbn=entry.isbn, record=entry.record)
            for entry in cache.unvalidated(UNVALIDATED_LISTING_LIMIT)
        ]

    return report


@router.post("/delete-cache", response_model=DeleteCacheResponse)
def delete_cache(
    request: DeleteCacheRequest,
    cache: BookCache = Depends(get_book_cache),
) -> DeleteCacheResponse:
    """Delete one cached ISBN, or every unvalidated entry.

    The ISBN is used as the cache key verbatim; an empty string is a valid
    key and is deleted like any other.
    """
    if request.clear_all_unvalidated:
        deleted = cache.clear_unvalidated()
        return DeleteCacheResponse(
            success=True,
            message=f"Cleared {deleted} unvalidated books",
            deleted_count=deleted,
        )

    if request.isbn is None:
        raise HTTPException(status_code=400, detail={"error": "ISBN is required", "kind": "missing_parameter"})

    if not cache.delete(request.isbn):
        raise HTTPException(status_code=404, detail={"error": "Book not found", "kind": "not_found"})

    logger.info(f"Deleted cached book with ISBN: '{request.isbn}'")
    return DeleteCacheResponse(
        success=True,
        message=f"Deleted cached book with ISBN: {request.isbn}",
        deleted_count=1,
    )


@router.post("/validate-cache", response_model=ValidateCacheResponse)
def validate_cache_now(
    request: ValidateCacheRequest,
    cache: BookCache = Depends(get_book_cache),
    quota: QuotaTracker = Depends(get_quota_tracker),
    client: GoogleBooksClient = Depends(get_catalog_client),
) -> ValidateCacheResponse:
    """Validate one ISBN, or a quota-bounded batch of unvalidated entries."""
    if request.isbn:
        ok = validate_cached_book(cache, client, request.isbn)
        return ValidateCacheResponse(
            message="Validation complete" if ok else f"Could not validate ISBN {request.isbn}",
            validated=int(ok),
            failed=int(not ok),
            processed=1,
        )

    try:
        return validate_unvalidated_books(cache, client, quota)
    except InsufficientQuotaError as e:
        raise HTTPException(
            status_code=429,
            detail={"error": "Insufficient quota remaining", "remaining": e.remaining},
        )


@router.post("/validate-cache/async", response_model=TaskQueuedResponse)
def validate_cache_async() -> TaskQueuedResponse:
    """Queue batch validation on a Celery worker."""
    task = validate_cache.delay()
    logger.info(f"Queued cache validation task: {task.id}")
    return TaskQueuedResponse(task_id=task.id)


@router.post("/bulk-import", response_model=TaskQueuedResponse)
def bulk_import(csv_file: UploadFile = File(...)) -> TaskQueuedResponse:
    """Upload a CSV of classroom books and import it in the background."""
    if not csv_file.filename or not csv_file.filename.endswith(".csv"):
        raise HTTPException(
            status_code=400,
            detail={"error": "Invalid file type. Only .csv files are allowed.", "kind": "missing_parameter"},
        )

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    file_path = upload_dir / f"{uuid.uuid4()}.csv"

    try:
        file_path.write_bytes(csv_file.file.read())
        task = process_bulk_import.delay(str(file_path))
    except Exception as e:
        logger.error(f"Failed to queue bulk import {csv_file.filename}: {e}")
        # Clean up file if it was partially written
        if file_path.exists():
            file_path.unlink()
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to process CSV file. Please try again.", "kind": "upstream_error"},
        )

    logger.info(f"Queued bulk import {csv_file.filename} as task {task.id}")
    return TaskQueuedResponse(task_id=task.id)
