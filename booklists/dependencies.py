"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from booklists.catalog.store import SqlCatalogStore
from booklists.config import Settings, get_settings
from booklists.db.database import get_db

# Type aliases for cleaner route signatures
DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def get_catalog_store(db: DbSession) -> SqlCatalogStore:
    """Get the catalog store bound to the request's database session.

    Args:
        db: Database session.

    Returns:
        SqlCatalogStore: Catalog store.
    """
    return SqlCatalogStore(db)


CatalogStoreDep = Annotated[SqlCatalogStore, Depends(get_catalog_store)]
