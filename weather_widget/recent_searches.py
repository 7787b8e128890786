"""Recent-search history: up to three distinct city names, most recent first."""

from __future__ import annotations

import json
import logging
from typing import Tuple

from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_KEY = "recentSearches"
MAX_ENTRIES = 3


class RecentSearchStore:
    def __init__(self, kv: KeyValueStore, key: str = DEFAULT_KEY, limit: int = MAX_ENTRIES):
        self.kv = kv
        self.key = key
        self.limit = limit
        self._entries: Tuple[str, ...] = ()

    @property
    def entries(self) -> Tuple[str, ...]:
        return self._entries

    def load(self) -> Tuple[str, ...]:
        """
        Read the persisted list.

        Missing or unreadable content is treated as an empty history rather
        than an error; the store is rewritten on the next record().
        """
        raw = self.kv.get(self.key)
        if raw is None:
            self._entries = ()
            return self._entries

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable recent searches under %r", self.key)
            data = []

        if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
            logger.warning("Ignoring malformed recent searches under %r: %r", self.key, data)
            data = []

        self._entries = tuple(data[: self.limit])
        return self._entries

    def record(self, name: str) -> Tuple[str, ...]:
        """Move `name` to the front (no duplicates), cap the list and persist it."""
        history = [name] + [x for x in self._entries if x != name]
        self._entries = tuple(history[: self.limit])
        self.kv.set(self.key, json.dumps(list(self._entries)))
        return self._entries
