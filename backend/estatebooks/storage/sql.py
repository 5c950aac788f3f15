# Overview: SQLAlchemy-backed entity store (production backend).

from __future__ import annotations

from contextlib import contextmanager
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..domain import InventoryItem, Movement, Project, ProjectCost, ProjectSale, Transaction
from ..models import (
    InventoryItemRow,
    MovementRow,
    ProjectCostRow,
    ProjectRow,
    ProjectSaleRow,
    TransactionRow,
)
from ..time_utils import utcnow
from ..validation import NotFoundError
from .base import EntityStore, PersistenceError, new_record_id

ROW_MODELS = {
    Transaction: TransactionRow,
    InventoryItem: InventoryItemRow,
    Movement: MovementRow,
    Project: ProjectRow,
    ProjectCost: ProjectCostRow,
    ProjectSale: ProjectSaleRow,
}

# Unit-of-work nesting depth, kept per scoped session
_ATOMIC_DEPTH_KEY = "estatebooks_atomic_depth"


class SqlEntityStore(EntityStore):
    """
    EntityStore over the Flask-SQLAlchemy session.

    Outside atomic() every write commits immediately. Inside atomic() writes
    are flushed (ids assigned, constraints checked) and committed once when the
    outermost unit exits cleanly.
    """

    def __init__(self):
        self._last_created = None

    def _next_created_at(self):
        # Strictly increasing so rows created in one request keep their order
        now = utcnow()
        if self._last_created is not None and now <= self._last_created:
            now = self._last_created + timedelta(microseconds=1)
        self._last_created = now
        return now

    def _model(self, record_type: type):
        try:
            return ROW_MODELS[record_type]
        except KeyError:
            raise PersistenceError(f"Unsupported record type: {record_type!r}")

    def _in_unit(self) -> bool:
        return db.session.info.get(_ATOMIC_DEPTH_KEY, 0) > 0

    @contextmanager
    def _write(self):
        try:
            yield
            db.session.flush()
            if not self._in_unit():
                db.session.commit()
        except SQLAlchemyError as exc:
            if not self._in_unit():
                db.session.rollback()
            raise PersistenceError(str(exc)) from exc

    def create(self, record):
        model = self._model(type(record))
        row = model.from_record(record)
        row.id = record.id or new_record_id()
        row.created_at = record.created_at or self._next_created_at()
        with self._write():
            db.session.add(row)
        return row.to_record()

    def get(self, record_type, record_id):
        model = self._model(record_type)
        try:
            row = db.session.get(model, record_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc
        return row.to_record() if row is not None else None

    def update(self, record):
        model = self._model(type(record))
        with self._write():
            row = db.session.get(model, record.id)
            if row is None:
                raise NotFoundError(f"{type(record).__name__} not found")
            row.apply_record(record)
        return row.to_record()

    def delete(self, record_type, record_id):
        model = self._model(record_type)
        with self._write():
            row = db.session.get(model, record_id)
            if row is None:
                return False
            db.session.delete(row)
        return True

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
        model = self._model(record_type)
        try:
            query = model.query
            for name, value in equals.items():
                column = getattr(model, name, None)
                if column is None:
                    raise PersistenceError(f"Unknown field {name} for {record_type.__name__}")
                query = query.filter(column == value)
            if date_from is not None:
                query = query.filter(getattr(model, date_field) >= date_from)
            if date_to is not None:
                query = query.filter(getattr(model, date_field) <= date_to)

            order = []
            for name, descending in record_type.ordering:
                column = getattr(model, name)
                order.append(column.desc() if descending else column.asc())
            query = query.order_by(*order)

            if limit is not None:
                query = query.limit(limit)
            return [row.to_record() for row in query.all()]
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    @contextmanager
    def atomic(self):
        info = db.session.info
        depth = info.get(_ATOMIC_DEPTH_KEY, 0)
        info[_ATOMIC_DEPTH_KEY] = depth + 1
        try:
            yield self
            if depth == 0:
                db.session.commit()
        except SQLAlchemyError as exc:
            if depth == 0:
                db.session.rollback()
            raise PersistenceError(str(exc)) from exc
        except Exception:
            if depth == 0:
                db.session.rollback()
            raise
        finally:
            info[_ATOMIC_DEPTH_KEY] = depth
