"""ISBN validation, normalization and barcode extraction.

Checksums are computed here directly so the scan path behaves exactly the same
for every input; isbnlib is only used for display hyphenation. None of these
functions raise: invalid or unrecognized input yields False or None.
"""

import logging
import re

import isbnlib

logger = logging.getLogger(__name__)

# Separators stripped before any check (hyphens and whitespace only)
_SEPARATORS = re.compile(r"[-\s]")
_ISBN13_PATTERN = re.compile(r"[0-9]{13}")
_DIGITS_12_PATTERN = re.compile(r"[0-9]{12}")
_ASCII_DIGITS = "0123456789"

BOOKLAND_PREFIXES = ("978", "979")


def _clean(value: str | None) -> str:
    """Strip hyphens and whitespace; non-strings clean to an empty string."""
    if not isinstance(value, str):
        return ""
    return _SEPARATORS.sub("", value)


def isbn13_check_digit(first_twelve: str) -> int:
    """Compute the EAN-13 check digit for twelve ASCII digits.

    Digits at even 0-based positions weigh 1, odd positions weigh 3.
    """
    total = sum(
        int(digit) if i % 2 == 0 else int(digit) * 3
        for i, digit in enumerate(first_twelve[:12])
    )
    return (10 - total % 10) % 10


def validate_isbn13(isbn: str | None) -> bool:
    """Check an ISBN-13 checksum.

    Args:
        isbn: Candidate string, hyphens and whitespace allowed

    Returns:
        True if the cleaned value is 13 ASCII digits with a matching check digit

    Examples:
        >>> validate_isbn13("978-0-13-419044-0")
        True
        >>> validate_isbn13("9780134190441")
        False
    """
    cleaned = _clean(isbn)
    if not _ISBN13_PATTERN.fullmatch(cleaned):
        return False

    return isbn13_check_digit(cleaned[:12]) == int(cleaned[12])


def validate_isbn10(isbn: str | None) -> bool:
    """Check an ISBN-10 checksum.

    The first nine characters must be digits; the last may be a digit or an
    upper-case ``X`` standing for 10.

    Args:
        isbn: Candidate string, hyphens and whitespace allowed

    Returns:
        True if the weighted sum is divisible by 11
    """
    cleaned = _clean(isbn)
    if len(cleaned) != 10:
        return False

    total = 0
    for i, char in enumerate(cleaned[:9]):
        if char not in _ASCII_DIGITS:
            return False
        total += int(char) * (10 - i)

    last = cleaned[9]
    if last == "X":
        check_value = 10
    elif last in _ASCII_DIGITS:
        check_value = int(last)
    else:
        return False

    return (total + check_value) % 11 == 0


def convert_isbn10_to_isbn13(isbn10: str | None) -> str | None:
    """Convert a valid ISBN-10 to ISBN-13.

    Args:
        isbn10: ISBN-10 string

    Returns:
        ISBN-13 string, or None if the input is not a valid ISBN-10

    Examples:
        >>> convert_isbn10_to_isbn13("0-13-419044-0")
        '9780134190440'
    """
    if not validate_isbn10(isbn10):
        return None

    base = "978" + _clean(isbn10)[:9]
    return f"{base}{isbn13_check_digit(base)}"


def normalize_isbn(isbn: str | None) -> str | None:
    """Normalize an ISBN to ISBN-13 format.

    No repair is attempted: anything other than a valid ISBN-13 or a valid
    ISBN-10 returns None.

    Args:
        isbn: ISBN string (10 or 13 characters, with or without formatting)

    Returns:
        Normalized ISBN-13 string, or None if invalid/empty

    Examples:
        >>> normalize_isbn("0134190440")
        '9780134190440'
        >>> normalize_isbn("978-0-13-419044-0")
        '9780134190440'
        >>> normalize_isbn("invalid")
    """
    cleaned = _clean(isbn)
    if not cleaned:
        return None

    if len(cleaned) == 13 and validate_isbn13(cleaned):
        return cleaned

    if len(cleaned) == 10:
        return convert_isbn10_to_isbn13(cleaned)

    return None


def extract_isbn_from_barcode(raw: str | None) -> str | None:
    """Extract a canonical ISBN from a decoded barcode payload.

    - A valid 978/979 EAN-13 is returned as-is.
    - A valid ISBN-10 is returned as-is, NOT converted to ISBN-13.
    - A 12-digit UPC/Bookland payload has "978" prefixed to its first nine
      digits and a fresh check digit appended.

    Args:
        raw: Raw payload from the barcode decoder

    Returns:
        ISBN string, or None if the payload is not a book barcode
    """
    cleaned = _clean(raw)

    if cleaned.startswith(BOOKLAND_PREFIXES) and len(cleaned) == 13 and validate_isbn13(cleaned):
        return cleaned

    if len(cleaned) == 10 and validate_isbn10(cleaned):
        return cleaned

    if _DIGITS_12_PATTERN.fullmatch(cleaned):
        base = "978" + cleaned[:9]
        candidate = f"{base}{isbn13_check_digit(base)}"
        if validate_isbn13(candidate):
            return candidate
        logger.debug(f"Synthesized ISBN '{candidate}' from '{raw}' failed validation")

    return None


def hyphenate_isbn(isbn: str | None) -> str:
    """Format an ISBN with registration-group hyphens for display.

    Falls back to the bare value when isbnlib has no range data for it.
    """
    if not isbn:
        return ""

    try:
        masked = isbnlib.mask(isbn)
    except isbnlib.NotValidISBNError:
        logger.debug(f"isbnlib could not mask '{isbn}'")
        return isbn

    return masked or isbn
