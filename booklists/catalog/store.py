"""Catalog store used by the list import engine.

The import engine only talks to the ``CatalogStore`` protocol. ``SqlCatalogStore``
is the SQLAlchemy-backed implementation used by the API and the CLI. Every
write is committed on its own: there is no transaction spanning an import, so
undo relies on the import snapshot instead of a rollback.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booklists.catalog.schemas import BookListRecord, BookRecord, ListMembership
from booklists.db.models import Book, BookList, BookListItem, generate_uuid

logger = logging.getLogger(__name__)

# Book attributes that may be changed through update_book()
PATCHABLE_BOOK_FIELDS = frozenset(
    {
        "isbn",
        "title",
        "author",
        "publisher",
        "publish_date",
        "cover",
        "status",
        "categories",
        "tags",
        "source",
        "notes",
        "recommendation",
    }
)


class CatalogError(Exception):
    """Base error raised by catalog stores."""


class NotFoundError(CatalogError):
    """Raised when a book or list does not exist."""


class CatalogStore(Protocol):
    """Catalog operations required by the list import engine."""

    def list_books(self) -> list[BookRecord]: ...

    def get_book(self, book_id: str) -> BookRecord | None: ...

    def create_book(self, book: BookRecord) -> str: ...

    def update_book(self, book_id: str, patch: dict[str, Any]) -> None: ...

    def delete_book(self, book_id: str) -> None: ...

    def list_lists(self) -> list[BookListRecord]: ...

    def get_list(self, list_id: str) -> BookListRecord | None: ...

    def create_list(self, name: str, description: str | None = None) -> str: ...

    def delete_list(self, list_id: str) -> None: ...

    def add_book_to_list(self, list_id: str, book_id: str, comment: str | None = None) -> bool: ...

    def remove_book_from_list(self, list_id: str, book_id: str) -> None: ...

    def update_book_comment(self, list_id: str, book_id: str, comment: str | None) -> None: ...

    def put_list(self, record: BookListRecord) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class SqlCatalogStore:
    """Catalog store backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        """Initialize the store.

        Args:
            db: Database session.
        """
        self.db = db

    # --- Books ---

    def list_books(self) -> list[BookRecord]:
        books = self.db.query(Book).order_by(Book.added_at, Book.id).all()
        return [BookRecord.model_validate(book) for book in books]

    def get_book(self, book_id: str) -> BookRecord | None:
        book = self.db.get(Book, book_id)
        return BookRecord.model_validate(book) if book else None

    def create_book(self, book: BookRecord) -> str:
        """Insert a new book row.

        Args:
            book: Record to insert. An empty ``id`` gets a fresh UUID.

        Returns:
            ID of the created book.
        """
        data = book.model_dump(exclude={"added_at", "updated_at"})
        if not data["id"]:
            data["id"] = generate_uuid()
        self.db.add(Book(**data))
        self._commit()
        return data["id"]

    def update_book(self, book_id: str, patch: dict[str, Any]) -> None:
        """Apply a partial field patch to a book.

        Args:
            book_id: Book to update.
            patch: Field name -> new value. Only these fields are written.

        Raises:
            NotFoundError: If the book does not exist.
            ValueError: If the patch names a field that cannot be changed.
        """
        unknown = set(patch) - PATCHABLE_BOOK_FIELDS
        if unknown:
            raise ValueError(f"Cannot patch book fields: {', '.join(sorted(unknown))}")

        book = self.db.get(Book, book_id)
        if not book:
            raise NotFoundError(f"Book '{book_id}' not found")

        for field, value in patch.items():
            setattr(book, field, value)
        book.updated_at = _utcnow()
        self._commit()

    def delete_book(self, book_id: str) -> None:
        """Delete a book and every list membership pointing at it."""
        book = self.db.get(Book, book_id)
        if not book:
            logger.debug(f"Book {book_id} already deleted")
            return
        self.db.delete(book)
        self._commit()

    # --- Lists ---

    def list_lists(self) -> list[BookListRecord]:
        lists = self.db.query(BookList).order_by(BookList.created_at, BookList.id).all()
        return [self._to_list_record(book_list) for book_list in lists]

    def get_list(self, list_id: str) -> BookListRecord | None:
        book_list = self.db.get(BookList, list_id)
        return self._to_list_record(book_list) if book_list else None

    def create_list(self, name: str, description: str | None = None) -> str:
        book_list = BookList(id=generate_uuid(), name=name, description=description)
        self.db.add(book_list)
        self._commit()
        return book_list.id

    def delete_list(self, list_id: str) -> None:
        book_list = self.db.get(BookList, list_id)
        if not book_list:
            logger.debug(f"List {list_id} already deleted")
            return
        self.db.delete(book_list)
        self._commit()

    def add_book_to_list(self, list_id: str, book_id: str, comment: str | None = None) -> bool:
        """Append a book to a list.

        Args:
            list_id: Target list.
            book_id: Book to add.
            comment: Optional membership comment.

        Returns:
            False if the book was already a member (nothing changed).

        Raises:
            NotFoundError: If the list or the book does not exist.
        """
        book_list = self._require_list(list_id)
        if not self.db.get(Book, book_id):
            raise NotFoundError(f"Book '{book_id}' not found")
        if self.db.get(BookListItem, (list_id, book_id)):
            return False

        last_position = (
            self.db.query(func.max(BookListItem.position))
            .filter(BookListItem.list_id == list_id)
            .scalar()
        )
        self.db.add(
            BookListItem(
                list_id=list_id,
                book_id=book_id,
                position=0 if last_position is None else last_position + 1,
                comment=comment,
                added_at=_utcnow(),
            )
        )
        book_list.updated_at = _utcnow()
        self._commit()
        return True

    def remove_book_from_list(self, list_id: str, book_id: str) -> None:
        item = self.db.get(BookListItem, (list_id, book_id))
        if item:
            self.db.delete(item)
            self._commit()

    def update_book_comment(self, list_id: str, book_id: str, comment: str | None) -> None:
        """Set or replace a book's membership comment.

        Raises:
            NotFoundError: If the book is not in the list.
        """
        item = self.db.get(BookListItem, (list_id, book_id))
        if not item:
            raise NotFoundError(f"Book '{book_id}' is not in list '{list_id}'")
        item.comment = comment
        self._commit()

    def put_list(self, record: BookListRecord) -> None:
        """Write a full list record back, replacing whatever is stored under its ID.

        The membership is rebuilt in record order with the captured comments and
        timestamps. Entries for books that no longer exist are skipped.

        Args:
            record: Complete list record, typically taken from an import snapshot.
        """
        book_list = self.db.get(BookList, record.id)
        if not book_list:
            book_list = BookList(id=record.id)
            self.db.add(book_list)

        book_list.name = record.name
        book_list.description = record.description
        if record.created_at:
            book_list.created_at = record.created_at
        if record.updated_at:
            book_list.updated_at = record.updated_at

        # Flush the removal first so re-added memberships don't collide on the key
        book_list.items.clear()
        self.db.flush()

        wanted_ids = [entry.book_id for entry in record.books]
        existing_book_ids = {
            book_id for (book_id,) in self.db.query(Book.id).filter(Book.id.in_(wanted_ids)).all()
        }
        for position, entry in enumerate(record.books):
            if entry.book_id not in existing_book_ids:
                logger.warning(
                    f"Skipping membership of missing book {entry.book_id} in list '{record.name}'"
                )
                continue
            book_list.items.append(
                BookListItem(
                    book_id=entry.book_id,
                    position=position,
                    comment=entry.comment,
                    added_at=entry.added_at or _utcnow(),
                )
            )
        self._commit()

    # --- Helpers ---

    def _require_list(self, list_id: str) -> BookList:
        book_list = self.db.get(BookList, list_id)
        if not book_list:
            raise NotFoundError(f"List '{list_id}' not found")
        return book_list

    def _to_list_record(self, book_list: BookList) -> BookListRecord:
        return BookListRecord(
            id=book_list.id,
            name=book_list.name,
            description=book_list.description,
            books=[ListMembership.model_validate(item) for item in book_list.items],
            created_at=book_list.created_at,
            updated_at=book_list.updated_at,
        )

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
