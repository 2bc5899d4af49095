"""Execution of a book list import.

Lists are processed strictly in payload order. Each logical book (same
identity key) is created or merged at most once per run and then reused by
every later list that references it. Writes are not wrapped in a transaction:
the first failing step stops the run, and the snapshot accumulated so far is
returned so the partial import can still be undone.
"""

import logging
from dataclasses import dataclass, field

from booklists.catalog.schemas import BookListRecord, BookRecord
from booklists.catalog.store import CatalogStore
from booklists.db.models import generate_uuid
from booklists.imports.matching import book_key, find_existing_book, generate_unique_name
from booklists.imports.merging import imported_value, local_value, merge_comments, merge_field
from booklists.imports.schemas import (
    BookAction,
    BookField,
    CommentMerge,
    ExportedBook,
    ExportedList,
    ExportPayload,
    ImportResult,
    ImportSnapshot,
    ImportStrategy,
    ListAction,
)
from booklists.imports.snapshot import SnapshotBuilder
from booklists.imports.strategy import (
    resolve_book_action,
    resolve_comment_merge,
    resolve_field_strategy,
    resolve_list_action,
)

logger = logging.getLogger(__name__)


@dataclass
class ImportRun:
    """State scoped to a single execute() call.

    Attributes:
        existing_lists: Lists present when the run started (minus replaced ones).
        existing_books: Books present when the run started.
        taken_names: List names that alternate names must avoid.
        book_ids: Identity key -> book ID created or reused in this run.
    """

    existing_lists: list[BookListRecord]
    existing_books: list[BookRecord]
    taken_names: set[str] = field(default_factory=set)
    book_ids: dict[str, str] = field(default_factory=dict)

    def find_list(self, name: str) -> BookListRecord | None:
        for book_list in self.existing_lists:
            if book_list.name == name:
                return book_list
        return None

    def forget_list(self, list_id: str) -> None:
        self.existing_lists = [bl for bl in self.existing_lists if bl.id != list_id]


class ImportExecutor:
    """Applies an import strategy against the catalog store."""

    def __init__(self, store: CatalogStore):
        """Initialize executor.

        Args:
            store: Catalog store receiving the writes.
        """
        self.store = store

    def execute(
        self,
        payload: ExportPayload,
        strategy: ImportStrategy,
        snapshot: ImportSnapshot,
    ) -> ImportResult:
        """Run the import.

        Args:
            payload: Validated export payload.
            strategy: Resolution strategy. In detailed mode every differing
                field must already have a per-field choice.
            snapshot: Snapshot from create_snapshot(), taken before this call.
                It is updated in place.

        Returns:
            ImportResult with counters, errors and the (possibly partial) snapshot.
        """
        result = ImportResult(snapshot=snapshot)
        builder = SnapshotBuilder(snapshot)

        try:
            existing_lists = self.store.list_lists()
            run = ImportRun(
                existing_lists=existing_lists,
                existing_books=self.store.list_books(),
                taken_names={book_list.name for book_list in existing_lists},
            )

            for imported_list in payload.lists:
                self._import_list(imported_list, strategy, run, builder, result)

        except Exception as e:
            logger.exception("List import failed")
            result.success = False
            result.errors.append(str(e) or e.__class__.__name__)

        logger.info(
            f"List import finished (success={result.success}): "
            f"{result.imported.lists} list(s) created, {result.imported.books_added} book(s) "
            f"added, {result.imported.books_merged} book(s) merged"
        )
        return result

    def _import_list(
        self,
        imported_list: ExportedList,
        strategy: ImportStrategy,
        run: ImportRun,
        builder: SnapshotBuilder,
        result: ImportResult,
    ) -> None:
        """Resolve the list action, then import the list's books."""
        name = imported_list.name
        action = resolve_list_action(strategy, name)
        existing = run.find_list(name)

        if action == ListAction.SKIP:
            # Books of skipped lists are not registered for later lists either
            logger.info(f"Skipping list '{name}'")
            return

        merge_target: BookListRecord | None = None

        if action == ListAction.MERGE and existing:
            list_id = existing.id
            merge_target = existing
            logger.info(f"Merging into existing list '{name}' ({list_id})")
        else:
            list_name = name
            if action == ListAction.REPLACE and existing:
                current = self.store.get_list(existing.id) or existing
                builder.record_replaced_list(current)
                self.store.delete_list(existing.id)
                run.forget_list(existing.id)
                logger.info(f"Replaced existing list '{name}' ({existing.id})")
            elif action == ListAction.RENAME and existing:
                list_name = generate_unique_name(name, run.taken_names)

            list_id = self.store.create_list(list_name, imported_list.description)
            builder.record_added_list(list_id)
            run.taken_names.add(list_name)
            result.imported.lists += 1
            logger.info(f"Created list '{list_name}' ({list_id}) for imported list '{name}'")

        comment_merge = resolve_comment_merge(strategy, name)
        for imported_book in imported_list.books:
            book_id = self._resolve_book(imported_book, strategy, run, builder, result)
            self._add_membership(list_id, book_id, imported_book, merge_target, comment_merge)

    def _resolve_book(
        self,
        imported_book: ExportedBook,
        strategy: ImportStrategy,
        run: ImportRun,
        builder: SnapshotBuilder,
        result: ImportResult,
    ) -> str:
        """Return the catalog book ID an imported book maps to, creating or merging it."""
        key = book_key(imported_book)
        if key in run.book_ids:
            logger.debug(f"Reusing book {run.book_ids[key]} for '{key}'")
            return run.book_ids[key]

        match = find_existing_book(imported_book, run.existing_books)
        action = resolve_book_action(strategy, key)

        if match and action == BookAction.MERGE:
            existing_book, match_type = match
            self._merge_book(existing_book, imported_book, key, strategy, builder)
            book_id = existing_book.id
            result.imported.books_merged += 1
            logger.debug(f"Merged '{key}' into book {book_id} (matched by {match_type.value})")
        elif match and action == BookAction.SKIP:
            book_id = match[0].id
            result.imported.books_merged += 1
            logger.debug(f"Reusing book {book_id} for '{key}' without changes")
        else:
            book_id = self._create_book(imported_book)
            builder.record_added_book(book_id)
            result.imported.books_added += 1
            logger.debug(f"Created book {book_id} for '{key}'")

        run.book_ids[key] = book_id
        return book_id

    def _merge_book(
        self,
        existing_book: BookRecord,
        imported_book: ExportedBook,
        key: str,
        strategy: ImportStrategy,
        builder: SnapshotBuilder,
    ) -> None:
        """Patch only the fields whose merged value differs from the stored one."""
        current = self.store.get_book(existing_book.id) or existing_book

        patch: dict[BookField, str] = {}
        for book_field in BookField:
            local = local_value(current, book_field)
            mode = resolve_field_strategy(strategy, key, book_field)
            merged = merge_field(local, imported_value(imported_book, book_field), mode)
            if merged != local:
                patch[book_field] = merged

        if not patch:
            return

        builder.record_modified_book_fields(
            current.id, {book_field: local_value(current, book_field) for book_field in patch}
        )
        self.store.update_book(
            current.id, {book_field.value: value for book_field, value in patch.items()}
        )

    def _create_book(self, imported_book: ExportedBook) -> str:
        book = BookRecord(
            id=generate_uuid(),
            title=imported_book.title,
            author=imported_book.author,
            isbn=imported_book.isbn or "",
            publisher=imported_book.publisher or "",
            publish_date=imported_book.publish_date or "",
            cover=imported_book.cover_url or "",
        )
        return self.store.create_book(book)

    def _add_membership(
        self,
        list_id: str,
        book_id: str,
        imported_book: ExportedBook,
        merge_target: BookListRecord | None,
        comment_merge: CommentMerge,
    ) -> None:
        """Add the book to the list if absent and settle its membership comment.

        When merging into an existing list the comment is always combined per
        ``comment_merge``, a book new to the list having an empty prior
        comment. Other lists take the trimmed imported comment.
        """
        prior_comment = None
        if merge_target:
            entry = merge_target.membership(book_id)
            prior_comment = entry.comment if entry else None
            comment = merge_comments(prior_comment, imported_book.comment, comment_merge)
        else:
            comment = (imported_book.comment or "").strip() or None

        if self.store.add_book_to_list(list_id, book_id, comment):
            return
        if comment and comment != prior_comment:
            self.store.update_book_comment(list_id, book_id, comment)


def execute_import(
    payload: ExportPayload,
    strategy: ImportStrategy,
    snapshot: ImportSnapshot,
    store: CatalogStore,
) -> ImportResult:
    """Run an import against ``store``; see ImportExecutor.execute."""
    return ImportExecutor(store).execute(payload, strategy, snapshot)
