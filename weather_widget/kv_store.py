"""
Key/value storage capability.

The recent-search list is persisted through this small interface rather
than a global, so tests can swap in the in-memory version.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Protocol

from sqlalchemy.orm import Session

from .crud import get_entry, upsert_entry


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    """Dict-backed store, lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class SqlKeyValueStore:
    """SQLite-backed store; opens a short-lived session per call."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            entry = get_entry(db, key)
            return entry.value if entry is not None else None
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self.session_factory()
        try:
            upsert_entry(db, key, value)
        finally:
            db.close()
