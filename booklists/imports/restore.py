"""Undo of an import run from its snapshot.

A snapshot must be restored at most once, against the store that performed
the import. Restoring twice is not guarded against.
"""

import logging

from booklists.catalog.store import CatalogStore, NotFoundError
from booklists.imports.schemas import ImportSnapshot, RestoreSummary

logger = logging.getLogger(__name__)


def restore_snapshot(snapshot: ImportSnapshot, store: CatalogStore) -> RestoreSummary:
    """Return the catalog to the state captured in ``snapshot``.

    Steps, in order:
    1. delete books created by the import (their memberships go with them);
    2. delete lists created by the import, including "replace" recreations;
    3. put back replaced lists under their original ID;
    4. put back every list captured before the import (membership, comments,
       timestamps and order);
    5. write back prior values of merged book fields as a targeted patch, so
       edits to other fields made after the import survive.

    Args:
        snapshot: Snapshot returned with the ImportResult.
        store: Catalog store the import ran against.

    Returns:
        Summary of what was reverted.
    """
    summary = RestoreSummary()

    for book_id in snapshot.added_book_ids:
        store.delete_book(book_id)
        summary.books_removed += 1

    for list_id in snapshot.added_list_ids:
        store.delete_list(list_id)
        summary.lists_removed += 1

    for replaced in snapshot.replaced_lists:
        logger.info(f"[Undo] Restoring replaced list '{replaced.full_data.name}' ({replaced.id})")
        store.put_list(replaced.full_data)
        summary.lists_restored += 1

    for modified in snapshot.modified_lists:
        logger.debug(f"[Undo] Restoring list '{modified.full_data_before.name}' ({modified.id})")
        store.put_list(modified.full_data_before)

    for modified_book in snapshot.modified_books:
        patch = {field.value: value for field, value in modified_book.fields_before.items()}
        if not patch:
            continue
        try:
            store.update_book(modified_book.id, patch)
        except NotFoundError:
            logger.warning(f"[Undo] Book {modified_book.id} no longer exists, not restored")
            continue
        summary.books_restored += 1

    logger.info(
        f"[Undo] Removed {summary.books_removed} book(s) and {summary.lists_removed} list(s), "
        f"restored {summary.lists_restored} replaced list(s) and "
        f"{summary.books_restored} book(s)"
    )
    return summary
