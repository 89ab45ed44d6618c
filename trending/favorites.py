"""
Device-local favorites.

Favorites live in a small JSON key-value file, one entry holding a JSON-encoded
array of repository names. The list is read once when the store is built and
the whole array is written back on every change.
"""

import logging
import os
from pathlib import Path
from typing import Iterable

import ujson

from .models import RepositoryRecord

FAVORITES_KEY = "favoriteRepos"


class LocalStorage:
    """String to string key-value entries persisted as a single JSON object."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            entries = ujson.loads(self.path.read_text(encoding="utf-8"))
        except ValueError:
            logging.warning(f"Ignoring unreadable storage file {self.path}")
            return {}
        return entries if isinstance(entries, dict) else {}

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str):
        entries = self._read()
        entries[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Atomic replace
        partial = self.path.with_name(self.path.name + ".tmp")
        partial.write_text(ujson.dumps(entries), encoding="utf-8")
        os.replace(partial, self.path)


class FavoritesStore:
    def __init__(self, storage: LocalStorage, key: str = FAVORITES_KEY):
        self.storage = storage
        self.key = key
        self._names = self._load()

    def _load(self) -> list[str]:
        raw = self.storage.get_item(self.key)
        if raw is None:
            return []
        if not isinstance(raw, str):
            logging.warning(f"Ignoring malformed favorites entry {self.key!r}")
            return []
        try:
            names = ujson.loads(raw)
        except ValueError:
            logging.warning(f"Ignoring malformed favorites entry {self.key!r}")
            return []
        if not isinstance(names, list):
            return []
        # Drop duplicates but keep insertion order
        return list(dict.fromkeys(name for name in names if isinstance(name, str)))

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def is_favorite(self, name: str) -> bool:
        return name in self._names

    def set_favorite(self, name: str, value: bool):
        if value and name not in self._names:
            self._names.append(name)
        elif not value and name in self._names:
            self._names.remove(name)
        else:
            return
        self.storage.set_item(self.key, ujson.dumps(self._names))


def annotate_favorites(
    records: Iterable[RepositoryRecord], store: FavoritesStore
) -> list[RepositoryRecord]:
    records = list(records)
    for record in records:
        record.favorite = store.is_favorite(record.name)
    return records


def toggle_favorite(record: RepositoryRecord, store: FavoritesStore) -> bool:
    """Flip the favorite flag, persist it, and update the record in place."""
    new_value = not record.favorite
    store.set_favorite(record.name, new_value)
    record.favorite = new_value
    return new_value
