"""Tests for resolving import rows to catalog books."""

import asyncio
from unittest.mock import AsyncMock

from app.models.book import Book
from app.schemas.user_book import OwnershipStatus, ReadingStatus
from app.services.book_resolver import BookResolver
from app.services.catalog_store import CatalogStore
from app.services.collection_store import CollectionStore
from app.services.csv_parser import ImportRow


def make_row(title="Dune", isbn10=None, isbn13=None, authors=None) -> ImportRow:
    return ImportRow(
        title=title,
        authors=authors or ["Frank Herbert"],
        ownership_status=OwnershipStatus.OWNED,
        reading_status=ReadingStatus.COMPLETED,
        isbn10=isbn10,
        isbn13=isbn13,
    )


def make_resolver(db, lookup) -> BookResolver:
    return BookResolver(lookup, CatalogStore(db), CollectionStore(db))


class TestResolve:
    def test_google_match_by_isbn(self, db, google_client, fake_google):
        fake_google.add("vol-dune", "Dune", ["Frank Herbert"], isbn13="9780441013593")
        resolver = make_resolver(db, google_client)

        resolution = asyncio.run(resolver.resolve(make_row(isbn13="9780441013593")))

        assert resolution.book.source == "google"
        assert resolution.book.id == "vol-dune"
        assert resolution.match_method == "google_isbn"
        assert resolution.status == "new"
        # No local row for Google matches
        assert db.query(Book).count() == 0

    def test_local_match_by_isbn(self, db, google_client, test_books):
        resolver = make_resolver(db, google_client)

        resolution = asyncio.run(
            resolver.resolve(make_row(title="Different Title", isbn13="9781635575637"))
        )

        assert resolution.book.source == "libro"
        assert resolution.book.id == str(test_books[1].id)
        assert resolution.match_method == "local_isbn"

    def test_local_match_by_title_is_case_insensitive(self, db, google_client, test_books):
        resolver = make_resolver(db, google_client)

        resolution = asyncio.run(resolver.resolve(make_row(title="piranesi")))

        assert resolution.book.id == str(test_books[1].id)
        assert resolution.match_method == "local_title"

    def test_creates_book_when_nothing_matches(self, db, google_client):
        resolver = make_resolver(db, google_client)
        row = make_row(title="Hyperion", isbn13="9780385249492", authors=["Dan Simmons"])

        resolution = asyncio.run(resolver.resolve(row))

        assert resolution.match_method == "created"
        assert resolution.book.source == "libro"
        book = db.query(Book).one()
        assert str(book.id) == resolution.book.id
        assert book.title == "Hyperion"
        assert book.authors == ["Dan Simmons"]
        assert book.isbn_13 == "9780385249492"

    def test_same_isbn_different_titles_resolve_to_same_book(self, db, google_client):
        resolver = make_resolver(db, google_client)

        first = asyncio.run(resolver.resolve(make_row(title="Dune", isbn13="9780441013593")))
        second = asyncio.run(
            resolver.resolve(make_row(title="Dune (Deluxe Edition)", isbn13="9780441013593"))
        )

        assert first.book.id == second.book.id
        assert second.match_method == "local_isbn"
        assert db.query(Book).count() == 1

    def test_google_outage_falls_back_to_local(self, db, google_client, fake_google, test_books):
        fake_google.fail = True
        resolver = make_resolver(db, google_client)

        resolution = asyncio.run(resolver.resolve(make_row(isbn13="9780756404741")))

        assert resolution.book.id == str(test_books[0].id)
        assert resolution.match_method == "local_isbn"

    def test_any_lookup_exception_is_swallowed(self, db):
        lookup = AsyncMock()
        lookup.lookup_by_isbn.side_effect = RuntimeError("boom")
        resolver = make_resolver(db, lookup)

        resolution = asyncio.run(resolver.resolve(make_row(isbn13="9780441013593")))

        assert resolution.match_method == "created"
        lookup.lookup_by_isbn.assert_awaited_once_with("9780441013593")

    def test_no_isbn_skips_external_lookup(self, db):
        lookup = AsyncMock()
        resolver = make_resolver(db, lookup)

        asyncio.run(resolver.resolve(make_row()))

        lookup.lookup_by_isbn.assert_not_awaited()

    def test_reports_exists_for_book_in_collection(self, db, google_client, test_user, test_books):
        CollectionStore(db).add(
            test_user.id, str(test_books[1].id), "libro", "Owned", "Reading"
        )
        resolver = make_resolver(db, google_client)

        resolution = asyncio.run(resolver.resolve(make_row(title="Piranesi"), test_user.id))

        assert resolution.status == "exists"
        assert resolution.book.id == str(test_books[1].id)

    def test_without_user_status_is_new(self, db, google_client, test_user, test_books):
        CollectionStore(db).add(
            test_user.id, str(test_books[1].id), "libro", "Owned", "Reading"
        )
        resolver = make_resolver(db, google_client)

        resolution = asyncio.run(resolver.resolve(make_row(title="Piranesi")))

        assert resolution.status == "new"
