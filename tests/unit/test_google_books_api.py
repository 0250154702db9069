"""Tests for Google Books querying and volume shaping."""

import pytest
import requests

from catalog.constants import UNKNOWN_AUTHOR, UNKNOWN_TITLE
from catalog.exceptions import UpstreamError
from catalog.models.schemas import BookRecord, DecodedSymbol
from catalog.services import google_books_api, scanner
from catalog.services.google_books_api import GoogleBooksClient, shape_volume
from catalog.services.lookup_service import LookupService


class FakeResponse:
    def __init__(self, status_code=200, payload=None, malformed=False):
        self.status_code = status_code
        self.payload = payload
        self.malformed = malformed

    def json(self):
        if self.malformed:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        pass


FULL_VOLUME = {
    "volumeInfo": {
        "title": "Effective Python",
        "authors": ["Brett Slatkin"],
        "publisher": "Addison-Wesley Professional",
        "publishedDate": "2015-02-12",
        "description": "59 specific ways to write better Python.",
        "imageLinks": {"thumbnail": "http://books.google.com/books/content?id=abc&img=1"},
        "industryIdentifiers": [
            {"type": "ISBN_10", "identifier": "0134190440"},
            {"type": "ISBN_13", "identifier": "9780134190440"},
        ],
        "categories": ["Computers"],
        "pageCount": 256,
        "language": "en",
        "maturityRating": "NOT_MATURE",
    }
}


# =============================================================================
# Shaping
# =============================================================================


def test_shape_full_volume():
    record = shape_volume(FULL_VOLUME)

    assert record.isbn == "9780134190440"
    assert record.title == "Effective Python"
    assert record.authors == ("Brett Slatkin",)
    assert record.publisher == "Addison-Wesley Professional"
    assert record.published_date == "2015-02-12"
    assert record.thumbnail == "https://books.google.com/books/content?id=abc&img=1"
    assert [i.type for i in record.industry_identifiers] == ["ISBN_10", "ISBN_13"]
    assert record.categories == ("Computers",)
    assert record.page_count == 256
    assert record.language == "en"
    assert record.maturity_rating == "NOT_MATURE"


def test_shape_empty_volume_uses_defaults():
    record = shape_volume({})

    assert record.isbn == ""
    assert record.title == UNKNOWN_TITLE
    assert record.authors == (UNKNOWN_AUTHOR,)
    assert record.publisher is None
    assert record.published_date is None
    assert record.description is None
    assert record.thumbnail is None
    assert record.industry_identifiers == ()
    assert record.categories == ()
    assert record.page_count is None


def test_shape_treats_empty_values_as_absent():
    record = shape_volume({"volumeInfo": {"title": "", "authors": []}})
    assert record.title == UNKNOWN_TITLE
    assert record.authors == (UNKNOWN_AUTHOR,)


def test_shape_falls_back_to_isbn10_converted_to_13():
    volume = {"volumeInfo": {"industryIdentifiers": [{"type": "ISBN_10", "identifier": "080442957X"}]}}
    assert shape_volume(volume).isbn == "9780804429573"


def test_shape_ignores_non_isbn_identifiers_and_uses_requested_isbn():
    volume = {"volumeInfo": {"industryIdentifiers": [{"type": "OTHER", "identifier": "UOM:39015"}]}}
    assert shape_volume(volume).isbn == ""
    assert shape_volume(volume, requested_isbn="0134190440").isbn == "9780134190440"


def test_shape_skips_invalid_isbn13_identifier():
    volume = {
        "volumeInfo": {
            "industryIdentifiers": [
                {"type": "ISBN_13", "identifier": "9780134190441"},
                {"type": "ISBN_10", "identifier": "0134190440"},
            ]
        }
    }
    assert shape_volume(volume).isbn == "9780134190440"


def test_thumbnail_is_upgraded_to_https():
    volume = {"volumeInfo": {"imageLinks": {"thumbnail": "http://example.com/x.jpg"}}}
    assert shape_volume(volume).thumbnail == "https://example.com/x.jpg"


def test_https_thumbnail_is_left_alone():
    volume = {"volumeInfo": {"imageLinks": {"thumbnail": "https://example.com/x.jpg"}}}
    assert shape_volume(volume).thumbnail == "https://example.com/x.jpg"


def test_shape_ignores_wrong_typed_fields():
    volume = {
        "volumeInfo": {
            "title": 123,
            "authors": "Jane Doe",
            "categories": "Fiction",
            "publisher": ["Penguin"],
            "pageCount": "256",
            "imageLinks": {"thumbnail": 5},
        }
    }

    record = shape_volume(volume)

    assert record.title == UNKNOWN_TITLE
    assert record.authors == (UNKNOWN_AUTHOR,)
    assert record.categories == ()
    assert record.publisher is None
    assert record.page_count is None
    assert record.thumbnail is None


def test_shape_drops_non_string_list_entries():
    record = shape_volume({"volumeInfo": {"authors": ["Ann One", 7, None, "", "Bob Two"], "categories": [1, 2]}})

    assert record.authors == ("Ann One", "Bob Two")
    assert record.categories == ()


def test_shape_boolean_page_count_is_absent():
    assert shape_volume({"volumeInfo": {"pageCount": True}}).page_count is None


# =============================================================================
# HTTP client
# =============================================================================


def test_search_sends_query_and_shapes_results():
    session = FakeSession(FakeResponse(payload={"totalItems": 1, "items": [FULL_VOLUME]}))
    client = GoogleBooksClient(api_key=None, session=session)

    records = client.search("isbn:9780134190440", max_results=1)

    assert len(records) == 1
    assert records[0].title == "Effective Python"
    params = session.requests[0]["params"]
    assert params["q"] == "isbn:9780134190440"
    assert params["maxResults"] == 1
    assert "key" not in params


def test_search_includes_api_key_when_configured():
    session = FakeSession(FakeResponse(payload={"totalItems": 0}))
    client = GoogleBooksClient(api_key="secret", session=session)

    client.search("the hobbit")

    assert session.requests[0]["params"]["key"] == "secret"


def test_max_results_capped_at_api_limit():
    session = FakeSession(FakeResponse(payload={"items": []}))
    GoogleBooksClient(api_key=None, session=session).search("python", max_results=100)
    assert session.requests[0]["params"]["maxResults"] == 40


def test_no_items_returns_empty_list():
    session = FakeSession(FakeResponse(payload={"kind": "books#volumes", "totalItems": 0}))
    assert GoogleBooksClient(api_key=None, session=session).search("isbn:9780000000002") == []


def test_non_2xx_raises_upstream_error():
    session = FakeSession(FakeResponse(status_code=503))
    with pytest.raises(UpstreamError, match="503"):
        GoogleBooksClient(api_key=None, session=session).search("python")


def test_transport_error_raises_upstream_error():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    with pytest.raises(UpstreamError, match="connection refused"):
        GoogleBooksClient(api_key=None, session=session).search("python")


def test_malformed_json_raises_upstream_error():
    session = FakeSession(FakeResponse(malformed=True))
    with pytest.raises(UpstreamError):
        GoogleBooksClient(api_key=None, session=session).search("python")


def test_items_not_a_list_raises_upstream_error():
    session = FakeSession(FakeResponse(payload={"items": "oops"}))
    with pytest.raises(UpstreamError):
        GoogleBooksClient(api_key=None, session=session).search("python")


def test_successful_call_counts_against_quota(quota):
    session = FakeSession(FakeResponse(payload={"items": [FULL_VOLUME]}))
    client = GoogleBooksClient(api_key=None, session=session, quota_tracker=quota)

    client.search("isbn:9780134190440", max_results=1)
    client.search("isbn:9780134190440", max_results=1)

    assert quota.stats().calls_used == 2


def test_failed_call_does_not_count_against_quota(quota):
    session = FakeSession(FakeResponse(status_code=500))
    client = GoogleBooksClient(api_key=None, session=session, quota_tracker=quota)

    with pytest.raises(UpstreamError):
        client.search("python")

    assert quota.stats().calls_used == 0


# =============================================================================
# Malformed volumes through lookup and scan
# =============================================================================


def test_wrong_typed_volume_is_still_a_lookup_hit(cache):
    volume = {"volumeInfo": {"title": 123, "imageLinks": {"thumbnail": 5}, "authors": "Jane Doe"}}
    session = FakeSession(FakeResponse(payload={"items": [volume]}))
    service = LookupService(cache, GoogleBooksClient(api_key=None, session=session))

    record = service.lookup_isbn("9780134190440")

    assert record.isbn == "9780134190440"
    assert record.title == UNKNOWN_TITLE
    assert cache.get("9780134190440").record == record


def test_scan_over_wrong_typed_volume_does_not_raise(cache, monkeypatch):
    monkeypatch.setattr(scanner, "decode_frame", lambda frame: [DecodedSymbol(format="EAN13", raw="9780134190440")])
    volume = {"volumeInfo": {"title": 123}}
    session = FakeSession(FakeResponse(payload={"items": [volume]}))
    service = LookupService(cache, GoogleBooksClient(api_key=None, session=session))

    outcome = scanner.scan_frame(b"frame", service)

    assert outcome.status == "found"
    assert outcome.book.title == UNKNOWN_TITLE


def test_unshapeable_volume_raises_upstream_error(monkeypatch):
    def reject(volume, requested_isbn=None):
        return BookRecord(title="x", authors=())

    monkeypatch.setattr(google_books_api, "shape_volume", reject)
    session = FakeSession(FakeResponse(payload={"items": [FULL_VOLUME]}))

    with pytest.raises(UpstreamError, match="Malformed Google Books response"):
        GoogleBooksClient(api_key=None, session=session).search("python")
