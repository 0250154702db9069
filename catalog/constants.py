# =============================================================================
# KEY-VALUE NAMESPACES
# =============================================================================

BOOK_CACHE_NAMESPACE = "books:isbn"
"""Cache entries are stored under ("books:isbn", <isbn>)."""

QUOTA_NAMESPACE = "quota:google-books"
"""Daily Google Books call counters are stored under ("quota:google-books", <YYYY-MM-DD>)."""

QUOTA_KEY_TTL_SECONDS = 2 * 24 * 3600
"""Counters outlive their day so yesterday's figure can still be read."""


# =============================================================================
# BOOK RECORD DEFAULTS
# =============================================================================

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_AUTHOR = "Unknown Author"

VOLUME_INFO_DEFAULTS = {
    "title": UNKNOWN_TITLE,
    "authors": [UNKNOWN_AUTHOR],
    "publisher": None,
    "publishedDate": None,
    "description": None,
    "categories": [],
    "pageCount": None,
    "language": None,
    "maturityRating": None,
    "industryIdentifiers": [],
}
"""
Default applied for each Google Books volumeInfo field when the upstream value
is missing or falsy (empty string, empty list).

Example:
    - {"title": ""}            -> title "Unknown Title"
    - {"authors": []}          -> authors ("Unknown Author",)
    - no "publisher" key       -> publisher None
"""

VOLUME_INFO_TYPES = {
    "title": str,
    "authors": list,
    "publisher": str,
    "publishedDate": str,
    "description": str,
    "categories": list,
    "pageCount": int,
    "language": str,
    "maturityRating": str,
    "industryIdentifiers": list,
}
"""
Expected JSON type of each volumeInfo field. A value of any other type is
treated as missing and takes its default.

Example:
    - {"title": 123}           -> title "Unknown Title"
    - {"authors": "Jane Doe"}  -> authors ("Unknown Author",)
    - {"pageCount": "256"}     -> page_count None
"""

STRING_LIST_FIELDS = ("authors", "categories")
"""List fields whose entries must be non-empty strings; other entries are dropped."""

PREFERRED_IDENTIFIER_TYPES = ("ISBN_13", "ISBN_10")
"""Identifier types tried in order when deriving a record's ISBN."""


# =============================================================================
# LOOKUP CONFIGURATION
# =============================================================================

GOOGLE_BOOKS_MAX_RESULTS = 40
"""Hard per-request limit imposed by the Google Books API."""


# =============================================================================
# BARCODE SCANNING
# =============================================================================

BARCODE_FORMAT_NAMES = ("EAN13", "EAN8", "UPCA", "UPCE")
"""Symbologies the decoder is configured to recognize."""


# =============================================================================
# CACHE VALIDATION
# =============================================================================

VALIDATION_MIN_REMAINING_QUOTA = 10
"""Batch validation is refused when fewer calls than this remain today."""

VALIDATION_MAX_BATCH = 100
"""Upper bound on entries validated in one batch."""

VALIDATION_DELAY_SECONDS = 0.1
"""Pause between Google Books calls during batch validation."""

UNVALIDATED_LISTING_LIMIT = 200
"""Unvalidated entries included in the admin quota report."""
