# Overview: Plain records exchanged between services and the entity store.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Optional

from .decimal_utils import to_json_number
from .time_utils import to_iso_date, to_utc_z

"""
Record conventions (authoritative)

- Records are immutable; updates go through dataclasses.replace() and EntityStore.update().
- id and created_at are assigned by the store on create (None before that).
- Calendar dates are datetime.date; system timestamps are UTC-naive datetimes.
- Money and quantities are Decimal, never float.
- `collection` names the backing table/collection; `ordering` is the default
  list order as (field, descending) pairs, primary key first.
"""

TRANSACTION_TYPES = ("revenue", "expense")
MOVEMENT_KINDS = ("in", "out")
PROJECT_COST_TYPES = ("construction", "operation", "expense")

# Values of Transaction.source_kind for ledger rows generated from domain events
SOURCE_RECEIPT = "receipt"
SOURCE_ISSUE = "issue"
SOURCE_PROJECT_COST = "project_cost"
SOURCE_PROJECT_SALE = "project_sale"
SOURCE_KINDS = (SOURCE_RECEIPT, SOURCE_ISSUE, SOURCE_PROJECT_COST, SOURCE_PROJECT_SALE)


@dataclass(frozen=True)
class Transaction:
    collection: ClassVar[str] = "transactions"
    ordering: ClassVar[tuple] = (("date", True), ("created_at", True))

    date: date
    type: str
    description: str
    amount: Decimal
    approved: bool = False
    created_by: Optional[str] = None
    source_kind: Optional[str] = None
    source_id: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_iso_date(self.date),
            "type": self.type,
            "description": self.description,
            "amount": to_json_number(self.amount),
            "approved": self.approved,
            "createdBy": self.created_by,
            "sourceKind": self.source_kind,
            "sourceId": self.source_id,
            "approvedBy": self.approved_by,
            "approvedAt": to_utc_z(self.approved_at),
            "createdAt": to_utc_z(self.created_at),
        }


@dataclass(frozen=True)
class InventoryItem:
    collection: ClassVar[str] = "inventory_items"
    ordering: ClassVar[tuple] = (("updated_at", True), ("name", False))

    name: str
    quantity: Decimal
    unit: str
    min_quantity: Decimal
    updated_at: date
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_low(self) -> bool:
        return self.quantity < self.min_quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": to_json_number(self.quantity),
            "unit": self.unit,
            "min": to_json_number(self.min_quantity),
            "updatedAt": to_iso_date(self.updated_at),
            "lowStock": self.is_low,
        }


@dataclass(frozen=True)
class Movement:
    collection: ClassVar[str] = "inventory_movements"
    ordering: ClassVar[tuple] = (("date", True), ("created_at", True))

    item_id: str
    kind: str
    qty: Decimal
    unit_price: Decimal
    total: Decimal
    party: str
    date: date
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "itemId": self.item_id,
            "kind": self.kind,
            "qty": to_json_number(self.qty),
            "unitPrice": to_json_number(self.unit_price),
            "total": to_json_number(self.total),
            "party": self.party,
            "date": to_iso_date(self.date),
        }


@dataclass(frozen=True)
class Project:
    collection: ClassVar[str] = "projects"
    ordering: ClassVar[tuple] = (("created_at", True), ("name", False))

    name: str
    location: str
    floors: int
    units: int
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "floors": self.floors,
            "units": self.units,
            "createdAt": to_utc_z(self.created_at),
        }


@dataclass(frozen=True)
class ProjectCost:
    collection: ClassVar[str] = "project_costs"
    ordering: ClassVar[tuple] = (("date", True), ("created_at", True))

    project_id: str
    type: str
    amount: Decimal
    date: date
    note: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "type": self.type,
            "amount": to_json_number(self.amount),
            "date": to_iso_date(self.date),
            "note": self.note or "",
        }


@dataclass(frozen=True)
class ProjectSale:
    collection: ClassVar[str] = "project_sales"
    ordering: ClassVar[tuple] = (("date", True), ("created_at", True))

    project_id: str
    unit_no: str
    buyer: str
    price: Decimal
    date: date
    terms: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "unitNo": self.unit_no,
            "buyer": self.buyer,
            "price": to_json_number(self.price),
            "date": to_iso_date(self.date),
            "terms": self.terms,
        }


RECORD_TYPES = (Transaction, InventoryItem, Movement, Project, ProjectCost, ProjectSale)
