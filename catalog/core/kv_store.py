"""Key-value store interface shared by the book cache and the quota tracker."""

from collections.abc import Iterator
from typing import Any, Protocol

Key = tuple[str, str]
"""Two-element key: (namespace, id)."""


class KeyValueStore(Protocol):
    """Opaque get/set/list backend with per-key atomicity."""

    def get(self, key: Key) -> dict[str, Any] | None:
        ...

    def set(self, key: Key, value: dict[str, Any]) -> None:
        ...

    def delete(self, key: Key) -> bool:
        ...

    def scan(self, namespace: str) -> Iterator[tuple[Key, dict[str, Any]]]:
        ...

    def incr(self, key: Key, ttl: int | None = None) -> int:
        ...

    def get_counter(self, key: Key) -> int:
        ...
