"""Pytest configuration and fixtures."""

import json
import os
from collections.abc import Callable, Generator

# Set test environment before importing the package
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from booklists.catalog.schemas import BookRecord
from booklists.catalog.store import SqlCatalogStore
from booklists.db.models import Base, generate_uuid

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db: Session) -> SqlCatalogStore:
    """Catalog store over the test database."""
    return SqlCatalogStore(db)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    # Import here to ensure env vars are set
    from booklists.db.database import get_db
    from booklists.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def add_book(store: SqlCatalogStore) -> Callable[..., str]:
    """Insert a catalog book and return its ID."""

    def _add_book(title: str, author: str = "Author", **fields) -> str:
        return store.create_book(
            BookRecord(id=generate_uuid(), title=title, author=author, **fields)
        )

    return _add_book


@pytest.fixture
def add_list(store: SqlCatalogStore) -> Callable[..., str]:
    """Create a catalog list with (book_id, comment) members and return its ID."""

    def _add_list(name: str, members: list[tuple[str, str | None]] = (), description=None) -> str:
        list_id = store.create_list(name, description)
        for book_id, comment in members:
            store.add_book_to_list(list_id, book_id, comment)
        return list_id

    return _add_list


def exported_book(title: str, author: str = "Author", **fields) -> dict:
    """Build an exported book entry in wire format."""
    book = {"title": title, "author": author, "addedAt": "2026-01-02T10:00:00.000Z"}
    book.update(fields)
    return book


def exported_list(name: str, books: list[dict], **fields) -> dict:
    """Build an exported list entry in wire format."""
    data = {
        "id": f"src-{name}",
        "name": name,
        "createdAt": "2026-01-01T09:00:00.000Z",
        "updatedAt": "2026-01-03T09:00:00.000Z",
        "books": books,
    }
    data.update(fields)
    return data


def export_document(lists: list[dict], version: int = 3) -> dict:
    """Build a full export document."""
    return {
        "version": version,
        "exportedAt": "2026-01-05T12:00:00.000Z",
        "lists": lists,
    }


def export_text(lists: list[dict], version: int = 3) -> str:
    return json.dumps(export_document(lists, version=version))


class FailingStore(SqlCatalogStore):
    """Store that fails when asked to create a list or book with a given name."""

    def __init__(self, db: Session, fail_on: str | None = None, fail_on_book: str | None = None):
        super().__init__(db)
        self.fail_on = fail_on
        self.fail_on_book = fail_on_book

    def create_book(self, book: BookRecord) -> str:
        if book.title == self.fail_on_book:
            raise RuntimeError("disk full")
        return super().create_book(book)

    def create_list(self, name: str, description: str | None = None) -> str:
        if name == self.fail_on:
            raise RuntimeError("disk full")
        return super().create_list(name, description)
