"""
CRUD functions for the key/value table.

Kept separate from the store class so they can be called with any Session.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from . import models


def get_entry(db: Session, key: str) -> models.KeyValueEntry | None:
    """Fetch a single entry by key."""
    return db.get(models.KeyValueEntry, key)


def upsert_entry(db: Session, key: str, value: str) -> models.KeyValueEntry:
    """Create the entry or overwrite its value."""
    entry = get_entry(db, key)
    if entry is None:
        entry = models.KeyValueEntry(key=key, value=value)
    else:
        entry.value = value
    entry.updated_at = datetime.now(timezone.utc)

    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry

