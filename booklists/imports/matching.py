"""Identity matching shared by conflict detection, strategy checks and execution.

The identity key decides what counts as "the same book". Detection, the
unresolved-conflict count and the executor must all derive it here.
"""

from collections.abc import Iterable

from booklists.catalog.schemas import BookRecord
from booklists.imports.schemas import ExportedBook, MatchType


def book_key(book: ExportedBook) -> str:
    """Identity key of an imported book: its ISBN, else "title|author"."""
    if book.isbn:
        return book.isbn
    return f"{book.title}|{book.author}"


def find_existing_book(
    imported: ExportedBook, existing_books: Iterable[BookRecord]
) -> tuple[BookRecord, MatchType] | None:
    """Find the catalog book an imported book refers to.

    ISBN equality wins when the imported book has an ISBN; otherwise (or when
    no ISBN matches) the exact (title, author) pair is used.

    Args:
        imported: Imported book entry.
        existing_books: Catalog books to search.

    Returns:
        The match and how it was found, or None for a new book.
    """
    books = list(existing_books)

    if imported.isbn:
        for book in books:
            if book.isbn == imported.isbn:
                return book, MatchType.ISBN

    for book in books:
        if book.title == imported.title and book.author == imported.author:
            return book, MatchType.TITLE_AUTHOR

    return None


def generate_unique_name(base_name: str, taken_names: Iterable[str]) -> str:
    """Append " (2)", " (3)", ... until the name is not taken.

    Args:
        base_name: Name of the imported list.
        taken_names: Names that must not be reused.

    Returns:
        First free alternate name.
    """
    taken = set(taken_names)
    counter = 2
    candidate = f"{base_name} ({counter})"
    while candidate in taken:
        counter += 1
        candidate = f"{base_name} ({counter})"
    return candidate
