"""API routes for book lookup and barcode scanning."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from catalog.api.dependencies import get_lookup_service
from catalog.exceptions import CatalogError
from catalog.models.schemas import BookRecord, ScanOutcome, SearchResultsResponse
from catalog.services.lookup_service import LookupService
from catalog.services.scanner import scan_frame

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/lookup", response_model=BookRecord | SearchResultsResponse)
def lookup_book(
    isbn: Optional[str] = Query(None, description="ISBN to look up (cached)"),
    query: Optional[str] = Query(None, description="Free-text search (not cached)"),
    service: LookupService = Depends(get_lookup_service),
) -> BookRecord | SearchResultsResponse:
    """Look up a book by ISBN, or search by free text.

    An ISBN lookup is served from the cache when possible; on a miss the
    catalog result is cached. A free-text search returns up to 10 records
    and never touches the cache.

    Args:
        isbn: ISBN cache key
        query: Free-text search, used when isbn is absent
        service: Lookup service

    Returns:
        Single book for an ISBN, ``{"results": [...]}`` for free text
    """
    try:
        result = service.lookup(isbn=isbn, query=query)
    except CatalogError as e:
        if e.status_code >= 500:
            logger.error(f"Lookup failed (isbn={isbn!r}, query={query!r}): {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())

    if isinstance(result, list):
        return SearchResultsResponse(results=result)
    return result


@router.post("/scan", response_model=ScanOutcome)
def scan_book(
    frame: UploadFile = File(..., description="Captured camera frame (PNG/JPEG)"),
    service: LookupService = Depends(get_lookup_service),
) -> ScanOutcome:
    """Decode a captured frame and look up the book it shows.

    Scan failures are part of the outcome (status ``error``), not HTTP
    errors, so the client just captures the next frame and tries again.
    """
    content = frame.file.read()
    if not content:
        raise HTTPException(
            status_code=400,
            detail={"error": "Frame is required", "kind": "missing_parameter"},
        )

    return scan_frame(content, service)
