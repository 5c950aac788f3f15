# Overview: In-process entity store used by tests and the demo backend.

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import fields, replace
from datetime import timedelta
from typing import Optional

from ..domain import RECORD_TYPES
from ..time_utils import utcnow
from ..validation import NotFoundError
from .base import EntityStore, PersistenceError, new_record_id


class MemoryEntityStore(EntityStore):
    """
    Dict-backed store.

    Each instance owns its collections; nothing is shared between instances.
    atomic() snapshots the collections and restores them on any exception.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._collections: dict[str, dict] = {t.collection: {} for t in RECORD_TYPES}
        self._depth = 0
        self._last_created = None

    def _collection(self, record_type: type) -> dict:
        try:
            return self._collections[record_type.collection]
        except (AttributeError, KeyError):
            raise PersistenceError(f"Unsupported record type: {record_type!r}")

    def _next_created_at(self):
        # Strictly increasing so created_at ordering is total even within one tick
        now = utcnow()
        if self._last_created is not None and now <= self._last_created:
            now = self._last_created + timedelta(microseconds=1)
        self._last_created = now
        return now

    def create(self, record):
        with self._lock:
            collection = self._collection(type(record))
            stored = replace(
                record,
                id=record.id or new_record_id(),
                created_at=record.created_at or self._next_created_at(),
            )
            if stored.id in collection:
                raise PersistenceError(f"Duplicate id {stored.id}")
            collection[stored.id] = stored
            return stored

    def get(self, record_type, record_id):
        with self._lock:
            return self._collection(record_type).get(record_id)

    def update(self, record):
        with self._lock:
            collection = self._collection(type(record))
            if record.id not in collection:
                raise NotFoundError(f"{type(record).__name__} not found")
            collection[record.id] = record
            return record

    def delete(self, record_type, record_id):
        with self._lock:
            return self._collection(record_type).pop(record_id, None) is not None

    def find(
        self,
        record_type,
        *,
        date_from=None,
        date_to=None,
        date_field="date",
        limit: Optional[int] = None,
        **equals,
    ):
        known = {f.name for f in fields(record_type)}
        for key in list(equals) + ([date_field] if (date_from or date_to) else []):
            if key not in known:
                raise PersistenceError(f"Unknown field {key} for {record_type.__name__}")

        with self._lock:
            rows = list(self._collection(record_type).values())

        rows = [r for r in rows if all(getattr(r, k) == v for k, v in equals.items())]
        if date_from is not None:
            rows = [r for r in rows if getattr(r, date_field) >= date_from]
        if date_to is not None:
            rows = [r for r in rows if getattr(r, date_field) <= date_to]

        # Stable sorts applied from the least significant key up
        for name, descending in reversed(record_type.ordering):
            rows.sort(key=lambda r: getattr(r, name), reverse=descending)

        if limit is not None:
            rows = rows[:limit]
        return rows

    @contextmanager
    def atomic(self):
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            snapshot = {name: dict(records) for name, records in self._collections.items()}
            self._depth = 1
            try:
                yield self
            except Exception:
                self._collections = snapshot
                raise
            finally:
                self._depth = 0
