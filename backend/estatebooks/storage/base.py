# Overview: Entity store contract shared by the SQL and in-memory backends.

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from typing import Optional, TypeVar

from ..validation import NotFoundError

"""
Entity Store invariants (authoritative)

- Six record collections: transactions, inventory items, movements, projects,
  project costs, project sales (see estatebooks.domain).
- create() assigns id (opaque UUID string) and created_at; callers never do.
- Every write outside atomic() is committed on its own.
- Writes inside atomic() become visible together or not at all; nesting joins
  the outermost unit.
- Store failures surface as PersistenceError; the store never retries.
- Date-range filters are inclusive on calendar dates.
"""

R = TypeVar("R")


class PersistenceError(Exception):
    """Raised when the backing store fails to read or write."""


def new_record_id() -> str:
    return str(uuid.uuid4())


class EntityStore(ABC):
    """Row-oriented CRUD over the domain record collections."""

    @abstractmethod
    def create(self, record: R) -> R:
        """Persist a new record and return it with id/created_at assigned."""

    @abstractmethod
    def get(self, record_type: type[R], record_id: str) -> Optional[R]:
        """Return the record or None."""

    @abstractmethod
    def update(self, record: R) -> R:
        """Replace a stored record (matched by id). Raises NotFoundError if absent."""

    @abstractmethod
    def delete(self, record_type: type, record_id: str) -> bool:
        """Delete by id. Returns False if nothing was deleted."""

    @abstractmethod
    def find(
        self,
        record_type: type[R],
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        date_field: str = "date",
        limit: Optional[int] = None,
        **equals,
    ) -> list[R]:
        """
        List records in the record type's default order.

        equals: field=value equality filters.
        date_from/date_to: inclusive bounds on date_field.
        """

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Unit of work: all writes inside commit together or roll back together."""

    def get_or_raise(self, record_type: type[R], record_id: str, label: Optional[str] = None) -> R:
        record = self.get(record_type, record_id) if record_id else None
        if record is None:
            raise NotFoundError(f"{label or record_type.__name__} not found")
        return record
