"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Keep the application's own engine off the default Postgres URL
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from typing import Generator  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.book import Book  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.auth_service import (  # noqa: E402
    SessionContext,
    create_access_token,
    get_password_hash,
)
from app.services.external_apis import GoogleBooksClient, get_google_books_client  # noqa: E402

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeGoogleBooks:
    """
    In-memory stand-in for the Google Books ``/volumes`` endpoints.

    Used as an ``httpx.MockTransport`` handler so the real client code runs.
    """

    def __init__(self):
        self.volumes: dict[str, dict] = {}
        self.fail = False
        self.requests: list[httpx.Request] = []

    def add(
        self,
        volume_id: str,
        title: str,
        authors: list[str] | None = None,
        isbn10: str | None = None,
        isbn13: str | None = None,
        thumbnail: str | None = None,
    ) -> dict:
        identifiers = []
        if isbn10:
            identifiers.append({"type": "ISBN_10", "identifier": isbn10})
        if isbn13:
            identifiers.append({"type": "ISBN_13", "identifier": isbn13})

        volume_info = {
            "title": title,
            "authors": authors or [],
            "industryIdentifiers": identifiers,
            "publisher": "Google Publisher",
            "pageCount": 300,
            "language": "en",
        }
        if thumbnail:
            volume_info["imageLinks"] = {"thumbnail": thumbnail}

        volume = {"id": volume_id, "volumeInfo": volume_info}
        self.volumes[volume_id] = volume
        return volume

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(503, json={"error": "unavailable"})

        path = request.url.path
        if path.startswith("/volumes/"):
            volume = self.volumes.get(path.rsplit("/", 1)[-1])
            if volume is None:
                return httpx.Response(404, json={"error": "not found"})
            return httpx.Response(200, json=volume)

        query = request.url.params.get("q", "")
        start = int(request.url.params.get("startIndex", 0))
        max_results = int(request.url.params.get("maxResults", 10))
        matches = [v for v in self.volumes.values() if self._matches(v, query)]

        data: dict = {"totalItems": len(matches)}
        page = matches[start : start + max_results]
        if page:
            data["items"] = page
        return httpx.Response(200, json=data)

    @staticmethod
    def _matches(volume: dict, query: str) -> bool:
        info = volume["volumeInfo"]
        if query.startswith("isbn:"):
            isbn = query[len("isbn:") :]
            return any(i["identifier"] == isbn for i in info["industryIdentifiers"])
        if query.startswith("inauthor:"):
            name = query[len("inauthor:") :].strip('"')
            return name in info["authors"]
        return query.lower() in info["title"].lower()


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    # Create all tables
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_google() -> FakeGoogleBooks:
    return FakeGoogleBooks()


@pytest.fixture
def google_client(fake_google: FakeGoogleBooks) -> GoogleBooksClient:
    """Real client wired to the in-memory Google Books fake."""
    http_client = httpx.AsyncClient(
        base_url="https://books.test",
        transport=httpx.MockTransport(fake_google.handler),
    )
    return GoogleBooksClient(client=http_client)


@pytest.fixture(scope="function")
def client(db: Session, google_client: GoogleBooksClient) -> Generator[TestClient, None, None]:
    """Create a test client with database and Google Books overrides."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    async def override_google_books_client():
        yield google_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_google_books_client] = override_google_books_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a test user."""
    user = User(
        email="test@example.com",
        hashed_password=get_password_hash("testpassword123"),
        first_name="Test",
        last_name="User",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def session_context(test_user: User) -> SessionContext:
    return SessionContext(user_id=test_user.id, email=test_user.email)


@pytest.fixture
def test_user_token(test_user: User) -> str:
    """Create an access token for the test user."""
    return create_access_token(data={"sub": str(test_user.id)})


@pytest.fixture
def auth_headers(test_user_token: str) -> dict:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {test_user_token}"}


@pytest.fixture
def test_books(db: Session) -> list[Book]:
    """Create local catalog books."""
    books = [
        Book(
            title="The Name of the Wind",
            authors=["Patrick Rothfuss"],
            isbn_10="0756404746",
            isbn_13="9780756404741",
            publisher="DAW Books",
            page_count=662,
            published_date="2007-03-27",
            language="en",
            categories=["Fantasy"],
            cover_image="covers/name-of-the-wind.jpg",
        ),
        Book(
            title="Piranesi",
            authors=["Susanna Clarke"],
            isbn_13="9781635575637",
            publisher="Bloomsbury",
            page_count=272,
        ),
        Book(
            title="Good Omens",
            authors=["Terry Pratchett", "Neil Gaiman"],
            isbn_13="9780060853983",
        ),
    ]

    for book in books:
        db.add(book)

    db.commit()

    for book in books:
        db.refresh(book)

    return books


# Sample CSV data for import tests
SAMPLE_NATIVE_CSV = """Title,Authors,Description,Published date,Publisher,Number of pages,Language,ISBN-10,ISBN-13,Categories,Ownership Status,Reading Status
"Dune","Frank Herbert","Desert planet, spice, politics","1965-08-01","Chilton Books","412","en","0441013597","9780441013593","Science Fiction; Classics","Owned","Completed"
"Hyperion","Dan Simmons","","1989","Doubleday","482","en","","9780385249492","Science Fiction","Wishlist","Not Started"
"""

SAMPLE_GOODREADS_CSV = """Book Id,Title,Author,Author l-f,Additional Authors,ISBN,ISBN13,My Rating,Average Rating,Publisher,Binding,Number of Pages,Year Published,Original Publication Year,Date Read,Date Added,Bookshelves,Bookshelves with positions,Exclusive Shelf,My Review,Spoiler,Private Notes
12345,Good Omens,Terry Pratchett,"Pratchett, Terry",Neil Gaiman,="0060853980",="9780060853983",5,4.25,William Morrow,Paperback,432,2006,1990,2024/01/15,2023/12/01,favorites,favorites (#1),read,Great book!,false,
67890,The Left Hand of Darkness,Ursula K. Le Guin,"Le Guin, Ursula K.",,="",="",0,4.08,Ace,Paperback,304,2000,1969,,2024/01/10,to-read,to-read (#1),to-read,,false,
"""


@pytest.fixture
def native_csv() -> str:
    return SAMPLE_NATIVE_CSV


@pytest.fixture
def goodreads_csv() -> str:
    return SAMPLE_GOODREADS_CSV
