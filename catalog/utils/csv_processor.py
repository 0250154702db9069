"""CSV file processing utilities for classroom bulk imports."""

import logging
import re
from pathlib import Path
from typing import Any

import pandas as pd

from catalog.config import get_settings
from catalog.constants import UNKNOWN_TITLE
from catalog.models.schemas import BulkImportRow

logger = logging.getLogger(__name__)
settings = get_settings()

# Accepted header spellings (compared lower-cased) for each field
COLUMN_ALIASES = {
    "isbn": ("isbn", "isbn13", "isbn_13"),
    "title": ("title", "booktitle", "book_title"),
    "authors": ("authors", "author"),
    "publisher": ("publisher",),
    "published_date": ("published_date", "publisheddate"),
    "description": ("description",),
    "categories": ("categories", "category"),
    "page_count": ("page_count", "pagecount", "pages"),
}
REQUIRED_FIELDS = ("isbn", "title")


def clean_isbn(isbn_value: Any) -> str | None:
    """Clean an ISBN cell.

    Spreadsheet exports often wrap ISBNs as ="0451490827" to keep leading
    zeros; this strips that and any separators.

    Args:
        isbn_value: Raw ISBN value from CSV (can be string, float, or None)

    Returns:
        Cleaned ISBN string or None if empty/garbled
    """
    if pd.isna(isbn_value):
        return None

    isbn_str = str(isbn_value).strip()

    # Handle Excel formula format: ="0451490827"
    if isbn_str.startswith('="') and isbn_str.endswith('"'):
        isbn_str = isbn_str[2:-1]

    isbn_str = isbn_str.strip().strip('"').strip("'")
    isbn_str = re.sub(r"[\s\-]", "", isbn_str)

    if not isbn_str:
        return None

    if not re.fullmatch(r"[0-9]+X?", isbn_str, re.IGNORECASE):
        logger.warning(f"Invalid ISBN format: {isbn_str}")
        return None

    return isbn_str.upper()


def _split_list(value: Any) -> list[str]:
    """Split a comma- or semicolon-separated cell into trimmed parts."""
    if pd.isna(value):
        return []
    return [part.strip() for part in re.split(r"[;,]", str(value)) if part.strip()]


def _text(value: Any) -> str | None:
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _page_count(value: Any) -> int | None:
    if pd.isna(value):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        logger.warning(f"Invalid page count: {value}")
        return None


def _resolve_columns(columns: list[str]) -> dict[str, str]:
    """Map each known field to the CSV column that holds it."""
    lowered = {column.strip().lower(): column for column in columns}
    resolved = {}
    for field, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lowered:
                resolved[field] = lowered[alias]
                break
    return resolved


def parse_bulk_import_csv(file_path: Path) -> list[BulkImportRow]:
    """Parse a bulk-import CSV file.

    Args:
        file_path: Path to the CSV file

    Returns:
        One BulkImportRow per data row, in file order. Rows keep a None isbn
        when the cell is empty or garbled; the importer decides what to do.

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If CSV is empty, malformed or missing required columns
    """
    if not file_path.exists():
        raise FileNotFoundError(f"CSV file not found: {file_path}")

    try:
        # Keep ISBNs as strings so leading zeros survive
        df = pd.read_csv(file_path, dtype=str)
    except pd.errors.EmptyDataError:
        raise ValueError("CSV file is empty")
    except pd.errors.ParserError as e:
        raise ValueError(f"Failed to parse CSV: {e}")

    columns = _resolve_columns(list(df.columns))
    missing_columns = [field for field in REQUIRED_FIELDS if field not in columns]
    if missing_columns:
        raise ValueError(f"CSV missing required columns: {missing_columns}")

    def cell(row, field):
        return row[columns[field]] if field in columns else None

    rows = []
    for _, row in df.iterrows():
        rows.append(
            BulkImportRow(
                isbn=clean_isbn(cell(row, "isbn")),
                title=_text(cell(row, "title")) or UNKNOWN_TITLE,
                authors=_split_list(cell(row, "authors")),
                publisher=_text(cell(row, "publisher")),
                published_date=_text(cell(row, "published_date")),
                description=_text(cell(row, "description")),
                categories=_split_list(cell(row, "categories")),
                page_count=_page_count(cell(row, "page_count")),
            )
        )

    logger.info(f"Parsed {len(rows)} rows from bulk-import CSV {file_path.name}")
    return rows


def validate_csv_file(file_path: Path, max_size_mb: int = settings.bulk_import_max_size_mb) -> None:
    """Validate CSV file before processing.

    Args:
        file_path: Path to the CSV file
        max_size_mb: Maximum allowed file size in megabytes

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file is too large or has wrong extension
    """
    if not file_path.exists():
        raise FileNotFoundError(f"CSV file not found: {file_path}")

    if file_path.suffix.lower() != ".csv":
        raise ValueError(f"Invalid file extension: {file_path.suffix}. Expected .csv")

    file_size_mb = file_path.stat().st_size / (1024 * 1024)
    if file_size_mb > max_size_mb:
        raise ValueError(
            f"CSV file too large: {file_size_mb:.2f}MB. Maximum allowed: {max_size_mb}MB"
        )

    logger.info(f"CSV file validation passed: {file_path.name} ({file_size_mb:.2f}MB)")
