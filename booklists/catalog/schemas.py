"""Pydantic records exchanged with the catalog store."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from booklists.db.models import ReadingStatus


class ListMembership(BaseModel):
    """A book's entry in a list.

    Attributes:
        book_id: ID of the member book.
        comment: Membership comment, independent of the book's own fields.
        added_at: When the book was added to the list.
    """

    book_id: str
    comment: str | None = None
    added_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class BookRecord(BaseModel):
    """Full catalog book record."""

    id: str
    isbn: str = ""
    title: str
    author: str = ""
    publisher: str = ""
    publish_date: str = ""
    cover: str = ""
    status: ReadingStatus = ReadingStatus.WANT
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    source: list[str] = Field(default_factory=lambda: ["manual"])
    notes: str = ""
    recommendation: str = ""
    added_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class BookListRecord(BaseModel):
    """Full list record including ordered membership.

    This is the unit captured by import snapshots and written back by
    ``CatalogStore.put_list``.
    """

    id: str
    name: str
    description: str | None = None
    books: list[ListMembership] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def membership(self, book_id: str) -> ListMembership | None:
        """Return the membership entry for ``book_id``, if any."""
        for entry in self.books:
            if entry.book_id == book_id:
                return entry
        return None
