"""Catalog store: books, lists and list membership."""

from booklists.catalog.schemas import BookListRecord, BookRecord, ListMembership
from booklists.catalog.store import (
    CatalogError,
    CatalogStore,
    NotFoundError,
    SqlCatalogStore,
)

__all__ = [
    "BookRecord",
    "BookListRecord",
    "ListMembership",
    "CatalogStore",
    "SqlCatalogStore",
    "CatalogError",
    "NotFoundError",
]
