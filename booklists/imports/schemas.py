"""Pydantic schemas for the book list import system."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from booklists.catalog.schemas import BookListRecord, BookRecord

# --- Export payload (wire format, camelCase keys) ---


class ExportedBook(BaseModel):
    """A book as it appears inside an exported list.

    Only public catalog fields travel in an export; private fields such as
    ``notes`` and ``recommendation`` are dropped if present.

    Attributes:
        title: Book title.
        author: Author string.
        isbn: ISBN, may be missing or empty.
        publisher: Publisher name.
        publish_date: Free-form publication date (``publishDate``).
        cover_url: Cover image URL (``coverUrl``).
        rating: Optional rating carried by newer exporters.
        comment: Membership comment from the source list.
        added_at: ISO-8601 time the book was added to the source list (``addedAt``).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str
    author: str = ""
    isbn: str | None = None
    publisher: str | None = None
    publish_date: str | None = Field(default=None, alias="publishDate")
    cover_url: str | None = Field(default=None, alias="coverUrl")
    rating: float | None = None
    comment: str | None = None
    added_at: str | None = Field(default=None, alias="addedAt")


class ExportedList(BaseModel):
    """An exported book list."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    name: str
    description: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
    books: list[ExportedBook] = Field(default_factory=list)


class ExportPayload(BaseModel):
    """Top-level list export document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: int
    exported_at: str = Field(alias="exportedAt")
    lists: list[ExportedList]

    @property
    def book_count(self) -> int:
        """Number of book entries across all lists (duplicates included)."""
        return sum(len(imported_list.books) for imported_list in self.lists)


# --- Conflict detection ---


class BookField(str, Enum):
    """Book fields subject to field-level merging."""

    ISBN = "isbn"
    PUBLISHER = "publisher"
    PUBLISH_DATE = "publish_date"
    COVER = "cover"


class MatchType(str, Enum):
    """How an imported book was matched to an existing one."""

    ISBN = "isbn"
    TITLE_AUTHOR = "title-author"


class ListNameConflict(BaseModel):
    """An imported list whose name is already used locally.

    Attributes:
        imported_name: Name of the imported list.
        existing_id: ID of the local list with the same name.
        existing_list: Local list record.
        suggested_name: First free "<name> (n)" among existing list names.
    """

    model_config = ConfigDict(frozen=True)

    imported_name: str
    existing_id: str
    existing_list: BookListRecord
    suggested_name: str


class BookConflict(BaseModel):
    """An imported book that matches a book already in the catalog.

    Attributes:
        book_key: Identity key of the imported book.
        imported_book: The imported entry (first occurrence in the payload).
        existing_book: The matching catalog book.
        match_type: Whether the match was by ISBN or by title and author.
        differing_fields: Mergeable fields whose values differ.
    """

    model_config = ConfigDict(frozen=True)

    book_key: str
    imported_book: ExportedBook
    existing_book: BookRecord
    match_type: MatchType
    differing_fields: list[BookField] = Field(default_factory=list)


class ConflictInfo(BaseModel):
    """All conflicts found between a payload and the current catalog."""

    model_config = ConfigDict(frozen=True)

    list_name_conflicts: list[ListNameConflict] = Field(default_factory=list)
    book_conflicts: list[BookConflict] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.list_name_conflicts or self.book_conflicts)


# --- Strategy ---


class ListAction(str, Enum):
    """What to do with an imported list."""

    RENAME = "rename"  # Create under a free "<name> (n)" if the name is taken
    MERGE = "merge"  # Add books into the existing same-named list
    REPLACE = "replace"  # Delete the existing list and recreate it from the import
    SKIP = "skip"  # Ignore the list and its books


class BookAction(str, Enum):
    """What to do with an imported book that matches an existing one."""

    MERGE = "merge"  # Reuse the existing book and merge fields
    SKIP = "skip"  # Reuse the existing book without touching its fields
    DUPLICATE = "duplicate"  # Always create a new book


class CommentMerge(str, Enum):
    """How to combine membership comments when merging into a list."""

    LOCAL = "local"
    IMPORT = "import"
    BOTH = "both"


class FieldMerge(str, Enum):
    """Field merge mode for merged books."""

    DETAILED = "detailed"  # Per-field choices required
    NON_EMPTY = "non-empty"  # Fill only empty local fields
    LOCAL = "local"  # Keep local values
    IMPORT = "import"  # Take imported values


class FieldChoice(str, Enum):
    """Per-field resolution chosen in detailed mode."""

    UNRESOLVED = "unresolved"
    LOCAL = "local"
    IMPORT = "import"
    NON_EMPTY = "non-empty"


class ListConflictResolution(BaseModel):
    """Per-list override, keyed by imported list name."""

    action: ListAction | None = None
    comment_merge: CommentMerge | None = None


class BookConflictResolution(BaseModel):
    """Per-book override, keyed by book identity key."""

    action: BookAction | None = None
    field_merge: FieldMerge | None = None
    field_strategies: dict[BookField, FieldChoice] = Field(default_factory=dict)


class ImportStrategy(BaseModel):
    """Global defaults plus per-list and per-book overrides."""

    default_list_action: ListAction = ListAction.RENAME
    default_book_action: BookAction = BookAction.MERGE
    default_comment_merge: CommentMerge = CommentMerge.BOTH
    default_field_merge: FieldMerge = FieldMerge.NON_EMPTY
    list_overrides: dict[str, ListConflictResolution] = Field(default_factory=dict)
    book_resolutions: dict[str, BookConflictResolution] = Field(default_factory=dict)


# --- Snapshot and result ---


class ReplacedList(BaseModel):
    """A list deleted by a "replace" action, captured before deletion."""

    id: str
    full_data: BookListRecord


class ModifiedList(BaseModel):
    """A list as it was before the import started."""

    id: str
    full_data_before: BookListRecord


class ModifiedBook(BaseModel):
    """Field values of a merged book before it was first patched."""

    id: str
    fields_before: dict[BookField, str] = Field(default_factory=dict)


class ImportSnapshot(BaseModel):
    """Everything needed to undo one import run.

    Attributes:
        created_at: When the snapshot was taken.
        added_list_ids: Lists created by the import.
        added_book_ids: Books created by the import.
        replaced_lists: Lists deleted by "replace", with their full prior record.
        modified_lists: Every list that existed before the import.
        modified_books: Prior values of fields patched by book merges.
    """

    created_at: datetime
    added_list_ids: list[str] = Field(default_factory=list)
    added_book_ids: list[str] = Field(default_factory=list)
    replaced_lists: list[ReplacedList] = Field(default_factory=list)
    modified_lists: list[ModifiedList] = Field(default_factory=list)
    modified_books: list[ModifiedBook] = Field(default_factory=list)


class ImportCounts(BaseModel):
    """Counters reported by an import run."""

    lists: int = 0
    books_added: int = 0
    books_merged: int = 0


class ImportResult(BaseModel):
    """Outcome of an import run.

    On failure ``success`` is False and ``snapshot`` still describes every
    change applied before the failing step.
    """

    success: bool = True
    imported: ImportCounts = Field(default_factory=ImportCounts)
    errors: list[str] = Field(default_factory=list)
    snapshot: ImportSnapshot


# --- API request/response ---


class PayloadSummary(BaseModel):
    """Short description of an uploaded export file."""

    version: int
    exported_at: str
    list_count: int
    book_count: int


class ImportPreview(BaseModel):
    """Preview returned before executing an import."""

    summary: PayloadSummary
    conflicts: ConflictInfo


class ImportExecuteRequest(BaseModel):
    """Request to run an import.

    Attributes:
        payload: Raw export document; validated like an uploaded file.
        strategy: Resolution strategy chosen by the user.
    """

    payload: dict[str, Any]
    strategy: ImportStrategy = Field(default_factory=ImportStrategy)


class UnresolvedCount(BaseModel):
    """Outstanding detailed-mode field conflicts for a strategy."""

    unresolved: int
    can_execute: bool


class RestoreSummary(BaseModel):
    """What an undo reverted."""

    books_removed: int = 0
    lists_removed: int = 0
    lists_restored: int = 0
    books_restored: int = 0
