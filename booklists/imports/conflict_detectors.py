"""Conflict detection for book list imports.

Detection is read-only: it queries the catalog store once for lists and books
and compares the payload against that state. It can be run any number of
times without side effects.

Example usage:
    detector = ConflictDetector(store)
    conflicts = detector.detect(payload)
"""

import logging
from dataclasses import dataclass, field

from booklists.catalog.schemas import BookListRecord, BookRecord
from booklists.catalog.store import CatalogStore
from booklists.imports.matching import book_key, find_existing_book, generate_unique_name
from booklists.imports.merging import differing_fields
from booklists.imports.schemas import (
    BookConflict,
    ConflictInfo,
    ExportPayload,
    ListNameConflict,
)

logger = logging.getLogger(__name__)


@dataclass
class DetectionContext:
    """Catalog state compared against the payload.

    Attributes:
        existing_lists: All lists currently in the catalog.
        existing_books: All books currently in the catalog.
    """

    existing_lists: list[BookListRecord] = field(default_factory=list)
    existing_books: list[BookRecord] = field(default_factory=list)

    @property
    def list_names(self) -> set[str]:
        return {book_list.name for book_list in self.existing_lists}

    def find_list(self, name: str) -> BookListRecord | None:
        """First existing list with exactly this name."""
        for book_list in self.existing_lists:
            if book_list.name == name:
                return book_list
        return None


class ConflictDetector:
    """Detects list-name and book-identity conflicts."""

    def __init__(self, store: CatalogStore):
        """Initialize detector.

        Args:
            store: Catalog store to read current state from.
        """
        self.store = store

    def load_context(self) -> DetectionContext:
        return DetectionContext(
            existing_lists=self.store.list_lists(),
            existing_books=self.store.list_books(),
        )

    def detect(self, payload: ExportPayload) -> ConflictInfo:
        """Compare a payload with the current catalog.

        Args:
            payload: Validated export payload.

        Returns:
            Fresh ConflictInfo; the store is not modified.
        """
        context = self.load_context()
        list_conflicts = self._check_list_names(payload, context)
        book_conflicts = self._check_books(payload, context)

        logger.info(
            f"Detected {len(list_conflicts)} list name conflict(s) and "
            f"{len(book_conflicts)} book conflict(s) in {len(payload.lists)} list(s)"
        )
        return ConflictInfo(list_name_conflicts=list_conflicts, book_conflicts=book_conflicts)

    def _check_list_names(
        self, payload: ExportPayload, context: DetectionContext
    ) -> list[ListNameConflict]:
        """Find imported lists whose name is already used locally.

        Suggested names only avoid names that exist now, not names this import
        would create.
        """
        conflicts = []
        taken_names = context.list_names

        for imported_list in payload.lists:
            existing = context.find_list(imported_list.name)
            if not existing:
                continue
            conflicts.append(
                ListNameConflict(
                    imported_name=imported_list.name,
                    existing_id=existing.id,
                    existing_list=existing,
                    suggested_name=generate_unique_name(imported_list.name, taken_names),
                )
            )

        return conflicts

    def _check_books(self, payload: ExportPayload, context: DetectionContext) -> list[BookConflict]:
        """Match every distinct imported book against the catalog.

        A book referenced from several imported lists is evaluated once, using
        its first occurrence.
        """
        conflicts = []
        seen_keys: set[str] = set()

        for imported_list in payload.lists:
            for imported_book in imported_list.books:
                key = book_key(imported_book)
                if key in seen_keys:
                    continue
                seen_keys.add(key)

                match = find_existing_book(imported_book, context.existing_books)
                if not match:
                    continue

                existing_book, match_type = match
                conflicts.append(
                    BookConflict(
                        book_key=key,
                        imported_book=imported_book,
                        existing_book=existing_book,
                        match_type=match_type,
                        differing_fields=differing_fields(existing_book, imported_book),
                    )
                )

        return conflicts


def detect_conflicts(payload: ExportPayload, store: CatalogStore) -> ConflictInfo:
    """Detect conflicts between ``payload`` and the catalog in ``store``."""
    return ConflictDetector(store).detect(payload)
