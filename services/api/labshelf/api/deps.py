from __future__ import annotations

from labshelf.db.session import get_db
from labshelf.services.catalog_store import CatalogStore
from labshelf.services.columns import ColumnSettings
from fastapi import Depends
from sqlalchemy.orm import Session


def get_store(db: Session = Depends(get_db)) -> CatalogStore:
    return CatalogStore(db)


def get_column_settings(db: Session = Depends(get_db)) -> ColumnSettings:
    return ColumnSettings(db)
