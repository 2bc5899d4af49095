"""Import snapshots: the undo record for one import run.

A snapshot is created before any write and captures every existing list by
value. The executor then appends what it creates or changes through
``SnapshotBuilder``, whose record_* methods ignore repeated entries.
"""

import logging
from datetime import UTC, datetime

from booklists.catalog.schemas import BookListRecord
from booklists.catalog.store import CatalogStore
from booklists.imports.schemas import (
    BookField,
    ExportPayload,
    ImportSnapshot,
    ImportStrategy,
    ListAction,
    ModifiedBook,
    ModifiedList,
    ReplacedList,
)
from booklists.imports.strategy import resolve_list_action

logger = logging.getLogger(__name__)


class SnapshotBuilder:
    """Append-only view over an ImportSnapshot used during execution."""

    def __init__(self, snapshot: ImportSnapshot):
        self.snapshot = snapshot

    def record_added_list(self, list_id: str) -> None:
        if list_id not in self.snapshot.added_list_ids:
            self.snapshot.added_list_ids.append(list_id)

    def record_added_book(self, book_id: str) -> None:
        if book_id not in self.snapshot.added_book_ids:
            self.snapshot.added_book_ids.append(book_id)

    def record_replaced_list(self, record: BookListRecord) -> None:
        """Keep the full record of a list about to be deleted by "replace"."""
        if any(replaced.id == record.id for replaced in self.snapshot.replaced_lists):
            return
        self.snapshot.replaced_lists.append(
            ReplacedList(id=record.id, full_data=record.model_copy(deep=True))
        )

    def record_modified_list(self, record: BookListRecord) -> None:
        if any(modified.id == record.id for modified in self.snapshot.modified_lists):
            return
        self.snapshot.modified_lists.append(
            ModifiedList(id=record.id, full_data_before=record.model_copy(deep=True))
        )

    def record_modified_book_fields(
        self, book_id: str, fields_before: dict[BookField, str]
    ) -> None:
        """Remember prior values of fields about to be patched.

        Values captured by an earlier patch in the same run are kept, so the
        snapshot always holds the pre-import value of each field.
        """
        for modified in self.snapshot.modified_books:
            if modified.id == book_id:
                for field, value in fields_before.items():
                    modified.fields_before.setdefault(field, value)
                return
        self.snapshot.modified_books.append(
            ModifiedBook(id=book_id, fields_before=dict(fields_before))
        )


def create_snapshot(
    payload: ExportPayload, strategy: ImportStrategy, store: CatalogStore
) -> ImportSnapshot:
    """Capture the pre-import state needed to undo an import.

    Every existing list is captured (name, description and ordered membership
    with comments and timestamps) so that lists merged into or replaced by the
    import can be put back exactly. Created lists and books are filled in by
    the executor.

    Args:
        payload: Payload about to be imported.
        strategy: Strategy about to be used.
        store: Catalog store, only read.

    Returns:
        A new snapshot.
    """
    builder = SnapshotBuilder(ImportSnapshot(created_at=datetime.now(UTC)))

    existing_lists = store.list_lists()
    for record in existing_lists:
        builder.record_modified_list(record)

    existing_names = {record.name for record in existing_lists}
    touched = [
        imported_list.name
        for imported_list in payload.lists
        if imported_list.name in existing_names
        and resolve_list_action(strategy, imported_list.name)
        in (ListAction.MERGE, ListAction.REPLACE)
    ]
    logger.info(
        f"Snapshot captured {len(existing_lists)} list(s); "
        f"{len(touched)} will be merged into or replaced: {touched}"
    )
    return builder.snapshot
