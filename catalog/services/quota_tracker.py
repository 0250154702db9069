"""Daily Google Books API call counter."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from catalog.config import get_settings
from catalog.constants import QUOTA_KEY_TTL_SECONDS, QUOTA_NAMESPACE
from catalog.core.kv_store import KeyValueStore
from catalog.models.schemas import QuotaStats

logger = logging.getLogger(__name__)
settings = get_settings()


def get_today_key() -> str:
    """Current UTC date as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


class QuotaTracker:
    """Counts Google Books calls per UTC day in the key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        daily_limit: int = settings.google_books_daily_quota,
        today: Callable[[], str] = get_today_key,
    ):
        self.store = store
        self.daily_limit = daily_limit
        self.today = today

    def increment(self) -> int:
        """Record one API call for today. Returns today's running total."""
        used = self.store.incr((QUOTA_NAMESPACE, self.today()), ttl=QUOTA_KEY_TTL_SECONDS)
        if used == self.daily_limit:
            logger.warning(f"Google Books daily quota reached ({used}/{self.daily_limit})")
        return used

    def stats(self) -> QuotaStats:
        """Calls used today and how many remain."""
        date = self.today()
        used = self.store.get_counter((QUOTA_NAMESPACE, date))
        return QuotaStats(
            date=date,
            calls_used=used,
            limit=self.daily_limit,
            remaining=max(0, self.daily_limit - used),
        )
