"""Celery tasks for async cache maintenance."""

import logging
from pathlib import Path

from catalog.core.redis_client import kv_store
from catalog.services.book_cache import BookCache
from catalog.services.bulk_import import import_rows
from catalog.services.cache_validator import InsufficientQuotaError, validate_unvalidated_books
from catalog.services.google_books_api import GoogleBooksClient
from catalog.services.quota_tracker import QuotaTracker
from catalog.utils.csv_processor import parse_bulk_import_csv, validate_csv_file
from catalog.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="catalog.workers.tasks.process_bulk_import")
def process_bulk_import(file_path: str) -> dict:
    """Import an uploaded CSV into the book cache.

    Args:
        file_path: Absolute path to the uploaded CSV file

    Returns:
        Dictionary with processing results:
        {
            'status': 'completed' | 'failed',
            'rows_processed': int,
            'books_cached': int,
            'books_existing': int,
            'books_skipped': int,
            'errors': list[str]
        }
    """
    csv_path = Path(file_path)

    try:
        validate_csv_file(csv_path)
        rows = parse_bulk_import_csv(csv_path)
        result = import_rows(BookCache(kv_store), rows)
        return {"status": "completed", **result.model_dump()}

    except Exception as e:
        logger.error(f"Critical error processing bulk import {csv_path.name}: {e}", exc_info=True)
        return {
            "status": "failed",
            "rows_processed": 0,
            "books_cached": 0,
            "books_existing": 0,
            "books_skipped": 0,
            "errors": [str(e)],
        }

    finally:
        # Clean up uploaded file
        if csv_path.exists():
            try:
                csv_path.unlink()
                logger.info(f"Deleted temporary CSV file: {csv_path}")
            except OSError as e:
                logger.warning(f"Failed to delete CSV file {csv_path}: {e}")


@celery_app.task(name="catalog.workers.tasks.validate_cache")
def validate_cache() -> dict:
    """Validate a quota-bounded batch of unvalidated cache entries.

    Returns:
        {'status': 'completed' | 'skipped', 'validated': int, 'failed': int,
         'processed': int, 'message': str}
    """
    quota = QuotaTracker(kv_store)
    cache = BookCache(kv_store)

    try:
        with GoogleBooksClient(quota_tracker=quota) as client:
            result = validate_unvalidated_books(cache, client, quota)
    except InsufficientQuotaError as e:
        logger.warning(f"Skipping cache validation: {e}")
        return {"status": "skipped", "validated": 0, "failed": 0, "processed": 0, "message": str(e)}

    return {"status": "completed", **result.model_dump()}
