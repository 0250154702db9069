"""Tests for cache-or-fetch lookup."""

import pytest
from conftest import FakeCatalog, make_record

from catalog.exceptions import BookNotFoundError, MissingParameterError, UpstreamError
from catalog.services.lookup_service import LookupService


def test_first_lookup_fetches_once_and_caches(lookup_service, catalog, store, effective_python):
    record = lookup_service.lookup(isbn="9780134190440")

    assert record == effective_python
    assert catalog.calls == [("isbn:9780134190440", 1)]
    assert store.sets == 1


def test_second_lookup_is_served_from_cache(lookup_service, catalog, store):
    first = lookup_service.lookup(isbn="9780134190440")
    second = lookup_service.lookup(isbn="9780134190440")

    assert second == first
    assert len(catalog.calls) == 1
    assert store.sets == 1


def test_cache_entry_records_source_and_validation(lookup_service, cache):
    lookup_service.lookup(isbn="9780134190440")

    entry = cache.get("9780134190440")
    assert entry.source == "google_api"
    assert entry.validated is True
    assert entry.cached_at.tzinfo is not None


def test_cache_key_is_the_exact_isbn_given(cache, effective_python):
    catalog = FakeCatalog(results={"isbn:0134190440": [effective_python]})
    service = LookupService(cache, catalog)

    service.lookup(isbn="0134190440")

    assert cache.get("0134190440") is not None
    assert cache.get("9780134190440") is None


def test_cached_entry_is_never_refreshed(cache, catalog):
    stale = make_record(title="Old Title")
    cache.put("9780134190440", stale)

    record = LookupService(cache, catalog).lookup(isbn="9780134190440")

    assert record.title == "Old Title"
    assert catalog.calls == []


def test_unknown_isbn_raises_not_found_without_caching(lookup_service, store):
    with pytest.raises(BookNotFoundError) as exc_info:
        lookup_service.lookup(isbn="9781234567897")

    assert exc_info.value.kind == "not_found"
    assert store.sets == 0


def test_upstream_failure_propagates_without_caching(cache, failing_catalog, store):
    service = LookupService(cache, failing_catalog)

    with pytest.raises(UpstreamError) as exc_info:
        service.lookup(isbn="9780134190440")

    assert exc_info.value.kind == "upstream_error"
    assert store.sets == 0


def test_free_text_search_bypasses_cache(lookup_service, catalog, store):
    results = lookup_service.lookup(query="python")

    assert isinstance(results, list)
    assert len(results) == 10
    assert catalog.calls == [("python", 10)]
    assert store.sets == 0
    assert store.gets == 0


def test_free_text_search_with_no_results_writes_nothing(lookup_service, store):
    assert lookup_service.lookup(query="zzzz no such book") == []
    assert store.sets == 0


def test_isbn_takes_precedence_over_query(lookup_service, catalog):
    lookup_service.lookup(isbn="9780134190440", query="python")
    assert catalog.calls == [("isbn:9780134190440", 1)]


@pytest.mark.parametrize("isbn,query", [(None, None), ("", ""), ("   ", None)])
def test_missing_parameters(lookup_service, isbn, query):
    with pytest.raises(MissingParameterError) as exc_info:
        lookup_service.lookup(isbn=isbn, query=query)

    assert exc_info.value.kind == "missing_parameter"
    assert exc_info.value.to_detail() == {
        "error": "ISBN or search query is required",
        "kind": "missing_parameter",
    }
