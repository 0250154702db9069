"""Barcode decoding for captured camera frames (zxing-cpp)."""

import io
import logging

import zxingcpp
from PIL import Image, UnidentifiedImageError

from catalog.constants import BARCODE_FORMAT_NAMES
from catalog.exceptions import DecodeError
from catalog.models.schemas import DecodedSymbol

logger = logging.getLogger(__name__)


def _book_formats() -> list:
    """EAN-13, EAN-8, UPC-A and UPC-E as zxing-cpp formats."""
    return [getattr(zxingcpp.BarcodeFormat, name) for name in BARCODE_FORMAT_NAMES]


def load_frame(frame: Image.Image | bytes) -> Image.Image:
    """Open encoded image bytes; PIL images pass through.

    Raises:
        DecodeError: If the bytes are not a readable image
    """
    if isinstance(frame, Image.Image):
        return frame

    try:
        image = Image.open(io.BytesIO(frame))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeError(f"Unreadable frame: {e}") from e
    return image


def decode_frame(frame: Image.Image | bytes) -> list[DecodedSymbol]:
    """Run one decode pass over a single captured frame.

    The engine searches the whole frame for a symbol (not a pre-cropped
    barcode) and returns at most one result.

    Args:
        frame: PIL image or encoded image bytes

    Returns:
        Zero or one DecodedSymbol; an empty list means no symbol was found

    Raises:
        DecodeError: If the frame is unreadable or the engine fails
    """
    image = load_frame(frame).convert("RGB")

    try:
        result = zxingcpp.read_barcode(
            image,
            formats=_book_formats(),
            try_rotate=True,
            is_pure=False,
        )
    except Exception as e:
        logger.warning(f"Barcode engine failed on frame: {e}")
        raise DecodeError(f"Barcode decode failed: {e}") from e

    if result is None or not result.valid or not result.text:
        return []

    symbol = DecodedSymbol(format=result.format.name, raw=result.text)
    logger.debug(f"Decoded {symbol.format} symbol: {symbol.raw}")
    return [symbol]
