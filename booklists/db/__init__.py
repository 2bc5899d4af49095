"""Database module."""

from booklists.db.database import SessionLocal, engine, get_db, init_db
from booklists.db.models import Base, Book, BookList, BookListItem, ReadingStatus

__all__ = [
    "SessionLocal",
    "engine",
    "get_db",
    "init_db",
    "Base",
    "Book",
    "BookList",
    "BookListItem",
    "ReadingStatus",
]
