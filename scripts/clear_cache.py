"""Clear cached books from Redis.

By default only unvalidated (bulk-imported, never confirmed) entries are
removed. Pass --all to drop every cached book; the next lookup for each
ISBN will then go back to Google Books.

WARNING: --all is destructive and spends quota to rebuild!

Usage:
    python scripts/clear_cache.py [--all]
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog.core.redis_client import kv_store
from catalog.services.book_cache import BookCache


def clear_cache(clear_all: bool) -> None:
    """Delete cached books after confirmation."""
    cache = BookCache(kv_store)
    stats = cache.stats()

    print("=" * 70)
    print("CLEARING BOOK CACHE")
    print("=" * 70)
    print(f"  Cached books: {stats.total} ({stats.validated} validated, {stats.unvalidated} unvalidated)")

    target = "ALL cached books" if clear_all else "all unvalidated books"
    print(f"\n⚠️  WARNING: This will delete {target}!")
    response = input("Are you sure you want to continue? (yes/no): ")

    if response.lower() != "yes":
        print("\n❌ Aborted. No changes made.")
        return

    if clear_all:
        isbns = [entry.isbn for entry in cache.entries()]
        deleted = sum(1 for isbn in isbns if cache.delete(isbn))
    else:
        deleted = cache.clear_unvalidated()

    print("\n" + "=" * 70)
    print("CACHE CLEARED")
    print("=" * 70)
    print(f"Total entries deleted: {deleted}")
    print("=" * 70)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Clear cached books")
    parser.add_argument("--all", action="store_true", help="Delete validated entries too")
    args = parser.parse_args()

    clear_cache(args.all)
