"""
Entity store tests, run against both backends.

Verifies:
- create assigns id and created_at; get/update/delete round trip
- find filters, inclusive date ranges and default ordering
- atomic() commits together, rolls back together, and nests
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from estatebooks.domain import InventoryItem, Transaction
from estatebooks.storage import PersistenceError, build_entity_store, MemoryEntityStore, SqlEntityStore
from estatebooks.validation import NotFoundError


def _tx(day=1, tx_type="expense", description="x", amount="10"):
    return Transaction(
        date=date(2025, 1, day),
        type=tx_type,
        description=description,
        amount=Decimal(amount),
    )


class TestCrud:

    def test_create_assigns_identity(self, store):
        created = store.create(_tx())
        assert created.id
        assert created.created_at is not None
        assert store.get(Transaction, created.id) == created

    def test_ids_are_unique(self, store):
        ids = {store.create(_tx()).id for _ in range(5)}
        assert len(ids) == 5

    def test_update(self, store):
        created = store.create(_tx())
        store.update(replace(created, approved=True))
        assert store.get(Transaction, created.id).approved is True

    def test_update_missing(self, store):
        with pytest.raises(NotFoundError):
            store.update(replace(_tx(), id="missing"))

    def test_delete(self, store):
        created = store.create(_tx())
        assert store.delete(Transaction, created.id) is True
        assert store.delete(Transaction, created.id) is False
        assert store.get(Transaction, created.id) is None

    def test_get_or_raise(self, store):
        with pytest.raises(NotFoundError, match="Transaction not found"):
            store.get_or_raise(Transaction, "missing", "Transaction")


class TestFind:

    def test_equality_filters(self, store):
        store.create(_tx(tx_type="revenue"))
        store.create(_tx(tx_type="expense"))
        assert [t.type for t in store.find(Transaction, type="revenue")] == ["revenue"]

    def test_date_range_inclusive(self, store):
        for day in (1, 10, 20, 31):
            store.create(_tx(day=day))
        found = store.find(Transaction, date_from=date(2025, 1, 10), date_to=date(2025, 1, 20))
        assert sorted(t.date.day for t in found) == [10, 20]

    def test_default_ordering(self, store):
        store.create(_tx(day=2, description="older date"))
        store.create(_tx(day=5, description="first on the 5th"))
        store.create(_tx(day=5, description="second on the 5th"))
        assert [t.description for t in store.find(Transaction)] == [
            "second on the 5th", "first on the 5th", "older date",
        ]

    def test_item_ordering(self, store):
        store.create(InventoryItem(name="B", quantity=Decimal("1"), unit="kg",
                                   min_quantity=Decimal("0"), updated_at=date(2025, 1, 1)))
        store.create(InventoryItem(name="A", quantity=Decimal("1"), unit="kg",
                                   min_quantity=Decimal("0"), updated_at=date(2025, 1, 1)))
        store.create(InventoryItem(name="C", quantity=Decimal("1"), unit="kg",
                                   min_quantity=Decimal("0"), updated_at=date(2025, 3, 1)))
        assert [i.name for i in store.find(InventoryItem)] == ["C", "A", "B"]

    def test_limit(self, store):
        for day in range(1, 6):
            store.create(_tx(day=day))
        assert len(store.find(Transaction, limit=2)) == 2

    def test_unknown_field(self, store):
        with pytest.raises(PersistenceError):
            store.find(Transaction, colour="red")


class TestAtomic:

    def test_commit(self, store):
        with store.atomic():
            store.create(_tx(description="a"))
            store.create(_tx(description="b"))
        assert len(store.find(Transaction)) == 2

    def test_rollback_on_error(self, store):
        kept = store.create(_tx(description="kept"))
        with pytest.raises(RuntimeError):
            with store.atomic():
                store.create(_tx(description="lost"))
                store.delete(Transaction, kept.id)
                raise RuntimeError("boom")
        assert [t.description for t in store.find(Transaction)] == ["kept"]

    def test_nested_units_join_outer(self, store):
        with pytest.raises(RuntimeError):
            with store.atomic():
                with store.atomic():
                    store.create(_tx(description="inner"))
                store.create(_tx(description="outer"))
                raise RuntimeError("boom")
        assert store.find(Transaction) == []

    def test_store_usable_after_rollback(self, store):
        with pytest.raises(ValueError):
            with store.atomic():
                store.create(_tx())
                raise ValueError("nope")
        store.create(_tx(description="after"))
        assert [t.description for t in store.find(Transaction)] == ["after"]


class TestFactory:

    def test_backends(self):
        assert isinstance(build_entity_store("memory"), MemoryEntityStore)
        assert isinstance(build_entity_store("SQL"), SqlEntityStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_entity_store("redis")

    def test_memory_instances_are_isolated(self):
        first, second = MemoryEntityStore(), MemoryEntityStore()
        first.create(_tx())
        assert second.find(Transaction) == []
