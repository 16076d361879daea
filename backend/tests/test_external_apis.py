"""Tests for the Google Books client."""

import asyncio

import httpx
import pytest

from app.services.errors import CatalogLookupError
from app.services.external_apis import GoogleBooksClient


def client_for(handler) -> GoogleBooksClient:
    return GoogleBooksClient(
        client=httpx.AsyncClient(base_url="https://books.test", transport=httpx.MockTransport(handler))
    )


class TestLookupByIsbn:
    def test_found(self, google_client, fake_google):
        fake_google.add(
            "vol-1",
            "Dune",
            ["Frank Herbert"],
            isbn10="0441013597",
            isbn13="9780441013593",
            thumbnail="http://books.google.com/cover.jpg",
        )

        book = asyncio.run(google_client.lookup_by_isbn("9780441013593"))

        assert book.source == "google"
        assert book.id == "vol-1"
        assert book.isbn10 == "0441013597"
        assert book.cover_image == "https://books.google.com/cover.jpg"
        assert fake_google.requests[0].url.params["q"] == "isbn:9780441013593"
        assert fake_google.requests[0].url.params["maxResults"] == "1"

    def test_not_found_returns_none(self, google_client):
        assert asyncio.run(google_client.lookup_by_isbn("9780000000000")) is None

    def test_error_status_raises(self, google_client, fake_google):
        fake_google.fail = True
        with pytest.raises(CatalogLookupError):
            asyncio.run(google_client.lookup_by_isbn("9780441013593"))

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CatalogLookupError, match="request failed"):
            asyncio.run(client_for(handler).lookup_by_isbn("9780441013593"))

    def test_invalid_json_raises(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(CatalogLookupError, match="invalid JSON"):
            asyncio.run(client_for(handler).lookup_by_isbn("9780441013593"))


class TestSearch:
    def test_caps_page_size_at_forty(self, google_client, fake_google):
        asyncio.run(google_client.search("dune", max_results=100))
        assert fake_google.requests[0].url.params["maxResults"] == "40"

    def test_zero_results_requested_skips_request(self, google_client, fake_google):
        books, total = asyncio.run(google_client.search("dune", max_results=0))

        assert (books, total) == ([], 0)
        assert fake_google.requests == []

    def test_returns_total_items(self, google_client, fake_google):
        fake_google.add("vol-1", "Dune", ["Frank Herbert"])
        fake_google.add("vol-2", "Dune Messiah", ["Frank Herbert"])

        books, total = asyncio.run(google_client.search("dune", max_results=1))

        assert total == 2
        assert [b.id for b in books] == ["vol-1"]


class TestGetVolume:
    def test_found(self, google_client, fake_google):
        fake_google.add("vol-1", "Dune", ["Frank Herbert"])
        book = asyncio.run(google_client.get_volume("vol-1"))
        assert book.title == "Dune"

    def test_missing_volume(self, google_client):
        assert asyncio.run(google_client.get_volume("nope")) is None


def test_map_volume_handles_sparse_data():
    book = GoogleBooksClient.map_volume({"id": "x", "volumeInfo": {"title": "Untitled"}})

    assert book.authors == []
    assert book.isbn10 is None
    assert book.isbn13 is None
    assert book.cover_image is None
