"""Field and comment merge rules."""

from booklists.catalog.schemas import BookRecord
from booklists.imports.schemas import (
    BookField,
    CommentMerge,
    ExportedBook,
    FieldChoice,
    FieldMerge,
)

# BookField -> attribute on ExportedBook carrying the imported value.
# The catalog attribute always equals the BookField value.
IMPORTED_ATTRIBUTES = {
    BookField.ISBN: "isbn",
    BookField.PUBLISHER: "publisher",
    BookField.PUBLISH_DATE: "publish_date",
    BookField.COVER: "cover_url",
}


def local_value(book: BookRecord, field: BookField) -> str:
    """Current catalog value of a mergeable field ("" when unset)."""
    return getattr(book, field.value) or ""


def imported_value(book: ExportedBook, field: BookField) -> str:
    """Imported value of a mergeable field ("" when missing)."""
    return getattr(book, IMPORTED_ATTRIBUTES[field]) or ""


def differing_fields(existing: BookRecord, imported: ExportedBook) -> list[BookField]:
    """Mergeable fields whose local and imported values differ."""
    return [
        field
        for field in BookField
        if local_value(existing, field) != imported_value(imported, field)
    ]


def merge_field(local: str, imported: str, mode: FieldMerge | FieldChoice) -> str:
    """Resolve one field value.

    ``detailed`` and ``unresolved`` have no value of their own here and fall
    back to ``non-empty``.

    Args:
        local: Current catalog value.
        imported: Imported value.
        mode: Merge mode or per-field choice.

    Returns:
        The value the field should have after the merge.
    """
    if mode in (FieldMerge.LOCAL, FieldChoice.LOCAL):
        return local
    if mode in (FieldMerge.IMPORT, FieldChoice.IMPORT):
        return imported

    # non-empty: a non-empty local value always wins
    if local.strip():
        return local
    if imported.strip():
        return imported
    return local


def merge_comments(local: str | None, imported: str | None, strategy: CommentMerge) -> str | None:
    """Combine an existing membership comment with an imported one.

    Args:
        local: Existing membership comment.
        imported: Imported membership comment.
        strategy: Comment merge policy.

    Returns:
        The merged comment, or None when there is nothing to write.
    """
    local = (local or "").strip()
    imported = (imported or "").strip()

    if strategy == CommentMerge.LOCAL:
        return local or None
    if strategy == CommentMerge.IMPORT:
        return imported or None

    if not local and not imported:
        return None
    if not local:
        return imported
    if not imported:
        return local
    return f"{local}\n\n{imported}"
