"""Redis-backed key-value store for the book cache and quota counters."""

import json
from collections.abc import Iterator
from typing import Any

import redis

from catalog.config import get_settings
from catalog.core.kv_store import Key

settings = get_settings()

# Create Redis client
redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=True,  # Automatically decode bytes to strings
)


class RedisKeyValueStore:
    """Stores JSON documents under ``namespace:id`` Redis keys."""

    def __init__(self, client: redis.Redis):
        self.client = client

    def _redis_key(self, key: Key) -> str:
        """Generate Redis key for a (namespace, id) pair."""
        namespace, item_id = key
        return f"{namespace}:{item_id}"

    def get(self, key: Key) -> dict[str, Any] | None:
        """Retrieve a JSON document.

        Args:
            key: (namespace, id) pair

        Returns:
            Stored document or None if absent
        """
        data = self.client.get(self._redis_key(key))
        return json.loads(data) if data else None

    def set(self, key: Key, value: dict[str, Any]) -> None:
        """Store a JSON document, replacing any previous value. No TTL."""
        self.client.set(self._redis_key(key), json.dumps(value))

    def delete(self, key: Key) -> bool:
        """Delete a key. Returns True if something was removed."""
        return bool(self.client.delete(self._redis_key(key)))

    def scan(self, namespace: str) -> Iterator[tuple[Key, dict[str, Any]]]:
        """Iterate over every document in a namespace.

        Uses SCAN so large caches are walked incrementally. Keys that vanish
        between SCAN and GET are skipped.
        """
        prefix = f"{namespace}:"
        for redis_key in self.client.scan_iter(match=f"{prefix}*"):
            data = self.client.get(redis_key)
            if not data:
                continue
            yield (namespace, redis_key[len(prefix):]), json.loads(data)

    def incr(self, key: Key, ttl: int | None = None) -> int:
        """Atomically increment a counter, optionally (re)setting its TTL."""
        redis_key = self._redis_key(key)
        pipe = self.client.pipeline()
        pipe.incr(redis_key)
        if ttl:
            pipe.expire(redis_key, ttl)
        value, *_ = pipe.execute()
        return int(value)

    def get_counter(self, key: Key) -> int:
        """Read a counter written by incr(); missing counters read as 0."""
        value = self.client.get(self._redis_key(key))
        return int(value) if value else 0


# Global store instance
kv_store = RedisKeyValueStore(redis_client)


def get_kv_store() -> RedisKeyValueStore:
    """Dependency for getting the key-value store.

    Usage in FastAPI endpoints:
        @app.get("/cache/{isbn}")
        def get_cached(
            isbn: str,
            store: RedisKeyValueStore = Depends(get_kv_store)
        ):
            return store.get(("books:isbn", isbn))
    """
    return kv_store
