"""Shared fakes and fixtures: an in-memory key-value store and a scripted catalog."""

import json
from collections.abc import Iterator
from typing import Any, Optional

import pytest

from catalog.exceptions import UpstreamError
from catalog.models.schemas import BookRecord, IndustryIdentifier
from catalog.services.book_cache import BookCache
from catalog.services.lookup_service import LookupService
from catalog.services.quota_tracker import QuotaTracker


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStore that counts reads and writes."""

    def __init__(self):
        self.data: dict[tuple[str, str], str] = {}
        self.counters: dict[tuple[str, str], int] = {}
        self.gets = 0
        self.sets = 0

    def get(self, key) -> dict[str, Any] | None:
        self.gets += 1
        raw = self.data.get(tuple(key))
        return json.loads(raw) if raw is not None else None

    def set(self, key, value: dict[str, Any]) -> None:
        self.sets += 1
        self.data[tuple(key)] = json.dumps(value)

    def delete(self, key) -> bool:
        return self.data.pop(tuple(key), None) is not None

    def scan(self, namespace: str) -> Iterator[tuple[tuple[str, str], dict[str, Any]]]:
        for key, raw in list(self.data.items()):
            if key[0] == namespace:
                yield key, json.loads(raw)

    def incr(self, key, ttl: int | None = None) -> int:
        self.counters[tuple(key)] = self.counters.get(tuple(key), 0) + 1
        return self.counters[tuple(key)]

    def get_counter(self, key) -> int:
        return self.counters.get(tuple(key), 0)


class FakeCatalog:
    """CatalogFetcher returning scripted records and recording every call."""

    def __init__(self, results: Optional[dict[str, list[BookRecord]]] = None, error: Exception | None = None):
        self.results = results or {}
        self.error = error
        self.calls: list[tuple[str, int]] = []

    def search(self, query: str, max_results: int = 10, requested_isbn: Optional[str] = None) -> list[BookRecord]:
        self.calls.append((query, max_results))
        if self.error is not None:
            raise self.error
        return list(self.results.get(query, []))[:max_results]


def make_record(isbn: str = "9780134190440", title: str = "Effective Python", **overrides) -> BookRecord:
    fields = {
        "isbn": isbn,
        "title": title,
        "authors": ("Brett Slatkin",),
        "publisher": "Addison-Wesley Professional",
        "published_date": "2015-02-12",
        "thumbnail": "https://books.google.com/books/content?id=abc&img=1",
        "industry_identifiers": (IndustryIdentifier(type="ISBN_13", identifier=isbn),) if isbn else (),
    }
    fields.update(overrides)
    return BookRecord(**fields)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def cache(store) -> BookCache:
    return BookCache(store)


@pytest.fixture
def quota(store) -> QuotaTracker:
    return QuotaTracker(store, daily_limit=1000, today=lambda: "2026-10-18")


@pytest.fixture
def effective_python() -> BookRecord:
    return make_record()


@pytest.fixture
def catalog(effective_python) -> FakeCatalog:
    return FakeCatalog(
        results={
            "isbn:9780134190440": [effective_python],
            "python": [make_record(isbn="", title=f"Python Book {i}") for i in range(12)],
        }
    )


@pytest.fixture
def failing_catalog() -> FakeCatalog:
    return FakeCatalog(error=UpstreamError("Google Books API error: 503"))


@pytest.fixture
def lookup_service(cache, catalog) -> LookupService:
    return LookupService(cache, catalog, search_max_results=10)
