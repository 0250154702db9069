"""Frame -> decode -> ISBN -> lookup pipeline used by the scanner.

Every attempt is self-contained. Failures are logged and reported in the
outcome so the capture loop can simply try again on its next tick.
"""

import logging
import time
from collections.abc import Callable

from PIL import Image

from catalog.config import get_settings
from catalog.exceptions import BookNotFoundError, UpstreamError
from catalog.models.schemas import ScanOutcome
from catalog.services.barcode_decoder import decode_frame
from catalog.services.lookup_service import LookupService
from catalog.utils.isbn_utils import extract_isbn_from_barcode

logger = logging.getLogger(__name__)
settings = get_settings()


def scan_frame(frame: Image.Image | bytes, lookup_service: LookupService) -> ScanOutcome:
    """Run one scan attempt over a captured frame.

    Args:
        frame: Captured camera frame (PIL image or encoded bytes)
        lookup_service: Cache-or-fetch lookup

    Returns:
        ScanOutcome with status no_symbol, invalid_isbn, found, not_found or error
    """
    try:
        symbols = decode_frame(frame)
    except UpstreamError as e:
        logger.warning(f"Decode attempt failed, continuing: {e.message}")
        return ScanOutcome(status="error", error=e.message)

    if not symbols:
        return ScanOutcome(status="no_symbol")

    symbol = symbols[0]
    isbn = extract_isbn_from_barcode(symbol.raw)
    if isbn is None:
        logger.info(f"Scanned {symbol.format} '{symbol.raw}' is not a book ISBN")
        return ScanOutcome(status="invalid_isbn", symbol=symbol)

    try:
        book = lookup_service.lookup_isbn(isbn)
    except BookNotFoundError as e:
        return ScanOutcome(status="not_found", symbol=symbol, isbn=isbn, error=e.message)
    except UpstreamError as e:
        logger.warning(f"Lookup for scanned ISBN {isbn} failed: {e.message}")
        return ScanOutcome(status="error", symbol=symbol, isbn=isbn, error=e.message)

    return ScanOutcome(status="found", symbol=symbol, isbn=isbn, book=book)


class ScanSession:
    """Repeated-capture scanning with a debounce between accepted detections.

    A detection within ``debounce_seconds`` of the previously accepted one is
    ignored. Misses and failures never stop the session.
    """

    def __init__(
        self,
        lookup_service: LookupService,
        debounce_seconds: float = settings.scan_debounce_seconds,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.lookup_service = lookup_service
        self.debounce_seconds = debounce_seconds
        self.clock = clock
        self.last_scanned: str | None = None
        self._last_accepted_at: float | None = None

    def process(self, frame: Image.Image | bytes) -> ScanOutcome | None:
        """Feed one frame; returns None when the frame falls inside the debounce window."""
        now = self.clock()
        if self._last_accepted_at is not None and now - self._last_accepted_at < self.debounce_seconds:
            return None

        outcome = scan_frame(frame, self.lookup_service)
        if outcome.symbol is not None:
            self._last_accepted_at = now
            self.last_scanned = outcome.symbol.raw
        return outcome

    def reset(self) -> None:
        """Forget the last detection so the next frame is processed immediately."""
        self.last_scanned = None
        self._last_accepted_at = None
