from __future__ import annotations

from typing import Optional

from labshelf.models.storage_entry import StorageEntry
from sqlalchemy.orm import Session


def get_payload(db: Session, *, key: str) -> Optional[str]:
    entry = db.get(StorageEntry, key)
    return entry.payload if entry is not None else None


def put_payload(db: Session, *, key: str, payload: str) -> StorageEntry:
    """Overwrite the document stored under ``key`` in one transaction."""
    try:
        entry = db.get(StorageEntry, key)
        if entry is None:
            entry = StorageEntry(key=key, payload=payload)
            db.add(entry)
        else:
            entry.payload = payload
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(entry)
    return entry
