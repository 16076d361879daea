"""Tests for collection API endpoints, including CSV export."""

import csv
import io
import re

from fastapi.testclient import TestClient

from app.services.collection_store import CollectionStore
from app.services.csv_parser import Schema, detect_schema, parse_row, read_csv


def add_entry(client: TestClient, headers: dict, book_id: str, source: str = "libro", **statuses):
    return client.post(
        "/api/v1/collection",
        headers=headers,
        json={
            "book_id": book_id,
            "source": source,
            "ownership_status": statuses.get("ownership_status", "Owned"),
            "reading_status": statuses.get("reading_status", "Reading"),
        },
    )


class TestCollection:
    def test_add_and_list(self, client: TestClient, auth_headers, test_books):
        response = add_entry(client, auth_headers, str(test_books[0].id))
        assert response.status_code == 201

        response = client.get("/api/v1/collection", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        entry = data["books"][0]
        assert entry["ownership_status"] == "Owned"
        assert entry["book_details"]["title"] == "The Name of the Wind"

    def test_add_duplicate(self, client: TestClient, auth_headers, test_books):
        add_entry(client, auth_headers, str(test_books[0].id))

        response = add_entry(client, auth_headers, str(test_books[0].id))

        assert response.status_code == 409

    def test_add_invalid_status(self, client: TestClient, auth_headers, test_books):
        response = add_entry(
            client, auth_headers, str(test_books[0].id), ownership_status="Lost"
        )
        assert response.status_code == 422

    def test_google_entries_include_details(self, client: TestClient, auth_headers, fake_google):
        fake_google.add("vol-1", "Dune", ["Frank Herbert"])
        add_entry(client, auth_headers, "vol-1", source="google")

        data = client.get("/api/v1/collection", headers=auth_headers).json()

        assert data["books"][0]["book_details"]["title"] == "Dune"

    def test_entries_with_missing_books_are_skipped(
        self, client: TestClient, auth_headers, test_user, db
    ):
        CollectionStore(db).add(test_user.id, "gone", "google", "Owned", "Reading")

        data = client.get("/api/v1/collection", headers=auth_headers).json()

        assert data["books"] == []
        assert data["total"] == 1

    def test_status_update_and_remove(self, client: TestClient, auth_headers, test_books):
        book_id = str(test_books[0].id)
        add_entry(client, auth_headers, book_id)

        response = client.patch(
            f"/api/v1/collection/{book_id}",
            headers=auth_headers,
            json={"ownership_status": "Lent Out", "reading_status": "Completed"},
        )
        assert response.status_code == 200

        status = client.get(f"/api/v1/collection/{book_id}/status", headers=auth_headers).json()
        assert status == {"ownership_status": "Lent Out", "reading_status": "Completed"}

        assert client.delete(f"/api/v1/collection/{book_id}", headers=auth_headers).status_code == 204
        response = client.get(f"/api/v1/collection/{book_id}/status", headers=auth_headers)
        assert response.status_code == 404

    def test_update_missing_entry(self, client: TestClient, auth_headers):
        response = client.patch(
            "/api/v1/collection/nope",
            headers=auth_headers,
            json={"ownership_status": "Owned", "reading_status": "Reading"},
        )
        assert response.status_code == 404

    def test_requires_auth(self, client: TestClient):
        assert client.get("/api/v1/collection").status_code == 401


class TestExport:
    def test_export_csv(self, client: TestClient, auth_headers, test_books, fake_google):
        fake_google.add("vol-1", "Dune", ["Frank Herbert"], isbn13="9780441013593")
        add_entry(client, auth_headers, str(test_books[2].id), reading_status="Completed")
        add_entry(client, auth_headers, "vol-1", source="google", ownership_status="Digital")

        response = client.get("/api/v1/collection/export", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert re.search(r"libro_library_export_\d{12}\.csv", disposition)

        rows = list(csv.DictReader(io.StringIO(response.text)))
        by_title = {row["Title"]: row for row in rows}
        assert by_title["Good Omens"]["Authors"] == "Terry Pratchett; Neil Gaiman"
        assert by_title["Good Omens"]["Reading Status"] == "Completed"
        assert by_title["Dune"]["Ownership Status"] == "Digital"
        assert by_title["Dune"]["ISBN-13"] == "9780441013593"

    def test_every_field_is_quoted(self, client: TestClient, auth_headers, test_books):
        add_entry(client, auth_headers, str(test_books[1].id))

        text = client.get("/api/v1/collection/export", headers=auth_headers).text
        header, row = text.strip().split("\n")

        assert header.startswith('"Title","Authors"')
        assert row.startswith('"Piranesi","Susanna Clarke"')
        assert row.endswith('"Owned","Reading"')

    def test_export_is_importable(self, client: TestClient, auth_headers, test_books):
        add_entry(client, auth_headers, str(test_books[0].id), ownership_status="Lent Out")

        text = client.get("/api/v1/collection/export", headers=auth_headers).text
        headers, records = read_csv(text)
        layout = detect_schema(headers)
        row = parse_row(records[0], layout)

        assert layout.schema is Schema.NATIVE
        assert row.title == "The Name of the Wind"
        assert row.isbn13 == "9780756404741"
        assert row.categories == ["Fantasy"]
        assert row.ownership_status.value == "Lent Out"
