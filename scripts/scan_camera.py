"""Scan book barcodes from a local camera and print what they are.

Captures a frame on a fixed interval, decodes it, and looks the ISBN up
through the shared Redis cache (Google Books on a miss).

Requires the camera extra:
    pip install -e ".[camera]"

Usage:
    python scripts/scan_camera.py [--camera 0] [--interval 0.5]
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import cv2
from PIL import Image

from catalog.config import get_settings
from catalog.core.redis_client import kv_store
from catalog.services.book_cache import BookCache
from catalog.services.google_books_api import GoogleBooksClient
from catalog.services.lookup_service import LookupService
from catalog.services.quota_tracker import QuotaTracker
from catalog.services.scanner import ScanSession

settings = get_settings()
logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s - %(levelname)s - %(message)s")


def run(camera_index: int, interval: float) -> None:
    """Capture frames until interrupted."""
    camera = cv2.VideoCapture(camera_index)
    if not camera.isOpened():
        print(f"❌ Could not open camera {camera_index}")
        sys.exit(1)

    quota = QuotaTracker(kv_store)
    client = GoogleBooksClient(quota_tracker=quota)
    session = ScanSession(LookupService(BookCache(kv_store), client))

    print("=" * 70)
    print(f"SCANNING (camera {camera_index}, every {interval}s) - Ctrl+C to stop")
    print("=" * 70)

    try:
        while True:
            ok, frame = camera.read()
            if not ok:
                print("⚠️  Frame capture failed, retrying")
                time.sleep(interval)
                continue

            image = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
            outcome = session.process(image)

            if outcome is None or outcome.status == "no_symbol":
                pass
            elif outcome.status == "found":
                book = outcome.book
                print(f"\n✓ {book.display_isbn or outcome.isbn}  {book.title}")
                print(f"  by {', '.join(book.authors)}")
            elif outcome.status == "invalid_isbn":
                print(f"\n⚠️  {outcome.symbol.format} '{outcome.symbol.raw}' is not a book barcode")
            else:
                print(f"\n❌ {outcome.status}: {outcome.error}")

            time.sleep(interval)

    except KeyboardInterrupt:
        print("\nStopped.")
    finally:
        camera.release()
        client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--camera", type=int, default=0, help="Camera index")
    parser.add_argument("--interval", type=float, default=0.5, help="Seconds between frames")
    args = parser.parse_args()

    run(args.camera, args.interval)
