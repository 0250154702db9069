"""Seed the book cache from bulk-import rows.

Imported books are cached unvalidated; cache validation later confirms them
against Google Books. Existing cache entries are left alone.
"""

import logging

from catalog.constants import UNKNOWN_AUTHOR
from catalog.models.schemas import BookRecord, BulkImportResult, BulkImportRow
from catalog.services.book_cache import BookCache
from catalog.utils.isbn_utils import normalize_isbn

logger = logging.getLogger(__name__)


def row_to_record(row: BulkImportRow, isbn: str) -> BookRecord:
    """Build a BookRecord from an imported row."""
    return BookRecord(
        isbn=isbn,
        title=row.title,
        authors=tuple(row.authors) or (UNKNOWN_AUTHOR,),
        publisher=row.publisher,
        published_date=row.published_date,
        description=row.description,
        categories=tuple(row.categories),
        page_count=row.page_count,
    )


def import_rows(cache: BookCache, rows: list[BulkImportRow]) -> BulkImportResult:
    """Cache every importable row.

    Rows without a usable ISBN are skipped and reported; a failure on one row
    does not stop the import.
    """
    result = BulkImportResult()

    for line_number, row in enumerate(rows, start=2):  # header is line 1
        result.rows_processed += 1

        isbn = normalize_isbn(row.isbn)
        if not isbn:
            result.books_skipped += 1
            result.errors.append(f"Row {line_number}: invalid or missing ISBN for '{row.title}'")
            continue

        try:
            if cache.get(isbn) is not None:
                result.books_existing += 1
                logger.debug(f"ISBN {isbn} already cached, keeping existing entry")
                continue

            cache.put(isbn, row_to_record(row, isbn), source="bulk_import", validated=False)
            result.books_cached += 1

        except Exception as e:
            result.books_skipped += 1
            result.errors.append(f"Row {line_number}: {e}")
            logger.error(f"Error importing row {line_number} ({row.title}): {e}", exc_info=True)

    logger.info(
        f"Bulk import finished: {result.rows_processed} rows, {result.books_cached} cached, "
        f"{result.books_existing} existing, {result.books_skipped} skipped"
    )
    return result
