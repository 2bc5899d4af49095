"""SQLAlchemy database models."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.mysql import CHAR
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys.

    Returns:
        str: UUID as 36-character string.
    """
    return str(uuid4())


class ReadingStatus(str, enum.Enum):
    """Reading status enumeration."""

    WANT = "want"  # On the wishlist
    READING = "reading"
    READ = "read"


class Book(Base):
    """Book model for the local catalog.

    Attributes:
        id: Primary key UUID.
        isbn: ISBN, empty string when unknown.
        title: Book title.
        author: Author string as entered.
        publisher: Publisher name.
        publish_date: Free-form publication date.
        cover: Cover image URL.
        status: Reading status.
        categories: Category names (JSON list).
        tags: Tag names (JSON list).
        source: Where the record came from (JSON list, e.g. ["manual"]).
        notes: Private notes, never exported.
        recommendation: Private recommendation, never exported.
        added_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "books"
    __table_args__ = (
        Index("ix_books_isbn", "isbn"),
        Index("ix_books_title", "title", mysql_length=100),
    )

    id: Mapped[str] = mapped_column(CHAR(36), primary_key=True, default=generate_uuid)
    isbn: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    publisher: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    publish_date: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    cover: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[ReadingStatus] = mapped_column(
        Enum(ReadingStatus, values_callable=lambda x: [e.value for e in x]),
        default=ReadingStatus.WANT,
    )
    categories: Mapped[list] = mapped_column(JSON, default=list)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    source: Mapped[list] = mapped_column(JSON, default=lambda: ["manual"])
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    recommendation: Mapped[str] = mapped_column(Text, nullable=False, default="")
    added_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    memberships: Mapped[list["BookListItem"]] = relationship(
        "BookListItem", back_populates="book", cascade="all, delete-orphan"
    )


class BookList(Base):
    """A named, ordered collection of books.

    Attributes:
        id: Primary key UUID.
        name: Display name. Not unique; imports detect collisions by exact match.
        description: Optional description.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "book_lists"
    __table_args__ = (Index("ix_book_lists_name", "name"),)

    id: Mapped[str] = mapped_column(CHAR(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    items: Mapped[list["BookListItem"]] = relationship(
        "BookListItem",
        back_populates="book_list",
        cascade="all, delete-orphan",
        order_by="BookListItem.position",
    )


class BookListItem(Base):
    """Membership of a book in a list.

    Carries its own comment and timestamp, independent of the book's fields.
    """

    __tablename__ = "book_list_items"
    __table_args__ = (Index("ix_book_list_items_book_id", "book_id"),)

    list_id: Mapped[str] = mapped_column(
        CHAR(36),
        ForeignKey("book_lists.id", ondelete="CASCADE"),
        primary_key=True,
    )
    book_id: Mapped[str] = mapped_column(
        CHAR(36),
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    added_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    # Relationships
    book_list: Mapped["BookList"] = relationship("BookList", back_populates="items")
    book: Mapped["Book"] = relationship("Book", back_populates="memberships")
