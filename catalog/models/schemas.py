"""Pydantic schemas for book records, cache entries and API payloads."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from catalog.utils.isbn_utils import hyphenate_isbn, validate_isbn13


# ============================================================================
# Book Schemas
# ============================================================================


class IndustryIdentifier(BaseModel):
    """Alternate identifier reported by the catalog (e.g. ISBN_10, ISBN_13)."""

    model_config = ConfigDict(frozen=True)

    type: str
    identifier: str


class BookRecord(BaseModel):
    """Canonical, immutable representation of a catalog item."""

    model_config = ConfigDict(frozen=True)

    isbn: str = Field("", description="13-digit ISBN, empty when not derivable")
    title: str
    authors: tuple[str, ...] = Field(..., min_length=1)
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    industry_identifiers: tuple[IndustryIdentifier, ...] = ()

    # Rich metadata fields
    categories: tuple[str, ...] = ()
    page_count: Optional[int] = None
    language: Optional[str] = None
    maturity_rating: Optional[str] = None

    @field_validator("isbn")
    @classmethod
    def isbn_must_be_valid_isbn13(cls, value: str) -> str:
        if value and not validate_isbn13(value):
            raise ValueError(f"'{value}' is not a valid ISBN-13")
        return value

    @computed_field
    @property
    def display_isbn(self) -> str:
        return hyphenate_isbn(self.isbn)


BookSource = Literal["google_api", "bulk_import"]


class CacheEntry(BaseModel):
    """Cached lookup result stored under ("books:isbn", isbn)."""

    isbn: str
    record: BookRecord
    cached_at: datetime
    source: BookSource = "google_api"
    validated: bool = True


class DecodedSymbol(BaseModel):
    """Raw output of one barcode decode pass."""

    model_config = ConfigDict(frozen=True)

    format: str = Field(..., description="EAN13 | EAN8 | UPCA | UPCE")
    raw: str


# ============================================================================
# Lookup Schemas
# ============================================================================


class SearchResultsResponse(BaseModel):
    """Response schema for free-text lookups."""

    results: List[BookRecord]


class ScanOutcome(BaseModel):
    """Result of feeding one captured frame through the scan pipeline."""

    status: str = Field(
        ..., description="no_symbol | invalid_isbn | found | not_found | error"
    )
    symbol: Optional[DecodedSymbol] = None
    isbn: Optional[str] = None
    book: Optional[BookRecord] = None
    error: Optional[str] = None


# ============================================================================
# Admin Schemas
# ============================================================================


class QuotaStats(BaseModel):
    """Google Books calls used today against the daily limit."""

    date: str
    calls_used: int
    limit: int
    remaining: int


class CacheStats(BaseModel):
    """Counts of cached books by validation state."""

    total: int = 0
    validated: int = 0
    unvalidated: int = 0


class UnvalidatedBook(BaseModel):
    isbn: str
    record: BookRecord


class QuotaReportResponse(BaseModel):
    """Response schema for the admin quota report."""

    quota: QuotaStats
    cache: CacheStats
    unvalidated_books: Optional[List[UnvalidatedBook]] = None


class DeleteCacheRequest(BaseModel):
    """Request schema for removing cached books."""

    isbn: Optional[str] = None
    clear_all_unvalidated: bool = False


class DeleteCacheResponse(BaseModel):
    success: bool
    message: str
    deleted_count: int = 0


class ValidateCacheRequest(BaseModel):
    """Validate a single ISBN, or a batch of unvalidated entries when isbn is omitted."""

    isbn: Optional[str] = None


class ValidateCacheResponse(BaseModel):
    message: str
    validated: int = 0
    failed: int = 0
    processed: int = 0


class TaskQueuedResponse(BaseModel):
    """Response schema for work handed to a Celery worker."""

    task_id: str
    status: str = "queued"


class BulkImportRow(BaseModel):
    """One parsed row of a bulk-import CSV."""

    isbn: Optional[str] = None
    title: str
    authors: List[str] = Field(default_factory=list)
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    description: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    page_count: Optional[int] = None


class BulkImportResult(BaseModel):
    rows_processed: int = 0
    books_cached: int = 0
    books_existing: int = 0
    books_skipped: int = 0
    errors: List[str] = Field(default_factory=list)
