"""Book lookup cache keyed by ISBN.

Entries are written whole and never patched in place. There is no expiry:
an entry lives as long as the underlying store keeps it.
"""

import logging
from collections.abc import Iterator
from datetime import datetime, timezone

from catalog.constants import BOOK_CACHE_NAMESPACE
from catalog.core.kv_store import Key, KeyValueStore
from catalog.models.schemas import BookRecord, BookSource, CacheEntry, CacheStats

logger = logging.getLogger(__name__)


class BookCache:
    """Maps an ISBN to a previously fetched BookRecord."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _key(self, isbn: str) -> Key:
        return (BOOK_CACHE_NAMESPACE, isbn)

    def get(self, isbn: str) -> CacheEntry | None:
        """Retrieve a cache entry by exact ISBN key.

        Args:
            isbn: Key as given by the caller (no normalization applied)

        Returns:
            CacheEntry or None on a miss
        """
        data = self.store.get(self._key(isbn))
        if data is None:
            return None
        return CacheEntry.model_validate(data)

    def put(
        self,
        isbn: str,
        record: BookRecord,
        source: BookSource = "google_api",
        validated: bool = True,
    ) -> CacheEntry:
        """Store a record under an ISBN, overwriting any previous entry.

        Args:
            isbn: Cache key
            record: Shaped book record
            source: Where the record came from
            validated: Whether the record was confirmed against Google Books

        Returns:
            The entry that was written
        """
        entry = CacheEntry(
            isbn=isbn,
            record=record,
            cached_at=datetime.now(timezone.utc),
            source=source,
            validated=validated,
        )
        self.store.set(self._key(isbn), entry.model_dump(mode="json"))
        logger.debug(f"Cached ISBN {isbn} ({source}, validated={validated})")
        return entry

    def delete(self, isbn: str) -> bool:
        """Remove an entry. Returns False if nothing was cached under the key."""
        return self.store.delete(self._key(isbn))

    def entries(self) -> Iterator[CacheEntry]:
        """Iterate over every cached entry."""
        for _, data in self.store.scan(BOOK_CACHE_NAMESPACE):
            yield CacheEntry.model_validate(data)

    def stats(self) -> CacheStats:
        """Count cached books by validation state."""
        stats = CacheStats()
        for entry in self.entries():
            stats.total += 1
            if entry.validated:
                stats.validated += 1
            else:
                stats.unvalidated += 1
        return stats

    def unvalidated(self, limit: int = 100) -> list[CacheEntry]:
        """Collect up to ``limit`` entries that still need validation."""
        found: list[CacheEntry] = []
        if limit <= 0:
            return found

        for entry in self.entries():
            if not entry.validated:
                found.append(entry)
                if len(found) >= limit:
                    break
        return found

    def clear_unvalidated(self) -> int:
        """Delete every unvalidated entry.

        Returns:
            Number of entries deleted
        """
        # Materialize first so deletes don't disturb the scan
        stale = [entry.isbn for entry in self.entries() if not entry.validated]
        deleted = 0
        for isbn in stale:
            if self.delete(isbn):
                deleted += 1
                logger.info(f"Deleted unvalidated cached book: {isbn or 'unknown'}")
        return deleted
