# Overview: Service-layer operations for inventory; stock adjustment and the paired ledger rows.

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from ..decimal_utils import format_number, quantize_money, quantize_quantity
from ..domain import SOURCE_ISSUE, SOURCE_RECEIPT, InventoryItem, Movement, Transaction
from ..notifications import LoggingNotifier, Notifier
from ..permissions import Actor
from ..storage import EntityStore
from ..time_utils import today
from ..validation import (
    ValidationError,
    coerce_date,
    coerce_non_negative_decimal,
    coerce_positive_decimal,
    coerce_text,
)
from . import ledger_service
"""
Inventory Invariants (authoritative)

- InventoryItem.quantity is stored and only changes through receive_inventory
  and issue_inventory.
- Receipt: quantity + qty. Issue: max(0, quantity - qty). Issuing more than is
  on hand clamps to zero instead of failing.
- Every receipt/issue appends one Movement and one paired expense Transaction
  of qty * unit_price, all inside one store.atomic() unit.
- All input validation happens before the first write.
- Low stock means quantity < min_quantity (strictly below).
"""

logger = logging.getLogger(__name__)

MOVEMENT_IN = "in"
MOVEMENT_OUT = "out"


@dataclass(frozen=True)
class StockResult:
    item: InventoryItem
    movement: Movement
    transaction: Transaction

    def to_dict(self) -> dict:
        return {
            "item": self.item.to_dict(),
            "movement": self.movement.to_dict(),
            "transaction": self.transaction.to_dict(),
        }


def adjusted_quantity(current: Decimal, kind: str, qty: Decimal) -> Decimal:
    """New on-hand quantity after a movement; issues floor at zero."""
    if kind == MOVEMENT_IN:
        return quantize_quantity(current + qty)
    if kind == MOVEMENT_OUT:
        return quantize_quantity(max(Decimal("0"), current - qty))
    raise ValueError(f"unknown movement kind {kind!r}")


def is_low_stock(item: InventoryItem) -> bool:
    return item.quantity < item.min_quantity


# =============================================================================
# ITEMS
# =============================================================================

def create_item(
    store: EntityStore,
    *,
    name: str,
    unit: str,
    quantity=0,
    min_quantity=0,
    updated_at: Optional[date] = None,
) -> InventoryItem:
    item = InventoryItem(
        name=coerce_text(name, "name"),
        unit=coerce_text(unit, "unit"),
        quantity=quantize_quantity(coerce_non_negative_decimal(quantity, "quantity")),
        min_quantity=quantize_quantity(coerce_non_negative_decimal(min_quantity, "min")),
        updated_at=coerce_date(updated_at, "updated_at") if updated_at is not None else today(),
    )
    return store.create(item)


def get_item(store: EntityStore, item_id: str) -> InventoryItem:
    return store.get_or_raise(InventoryItem, item_id, "Item")


def list_items(store: EntityStore, *, low_only: bool = False) -> list[InventoryItem]:
    items = store.find(InventoryItem)
    if low_only:
        items = [i for i in items if is_low_stock(i)]
    return items


def list_movements(store: EntityStore, *, item_id: Optional[str] = None) -> list[Movement]:
    if item_id:
        get_item(store, item_id)
        return store.find(Movement, item_id=item_id)
    return store.find(Movement)


def delete_item(store: EntityStore, item_id: str) -> None:
    """
    Delete an item and its movement history.

    Paired ledger transactions are financial history and stay.
    """
    item = get_item(store, item_id)
    with store.atomic():
        movements = store.find(Movement, item_id=item_id)
        for movement in movements:
            store.delete(Movement, movement.id)
        store.delete(InventoryItem, item_id)
    logger.info("Deleted item %s (%s) and %d movements", item.id, item.name, len(movements))


# =============================================================================
# STOCK ADJUSTMENT
# =============================================================================

def _apply_movement(
    store: EntityStore,
    actor: Actor,
    *,
    kind: str,
    item_id: str,
    qty,
    unit_price,
    party,
    party_label: str,
    movement_date,
    notifier: Optional[Notifier],
) -> StockResult:
    qty = quantize_quantity(coerce_positive_decimal(qty, "qty"))
    unit_price = quantize_money(coerce_positive_decimal(unit_price, "unit_price"))
    if qty <= 0:
        raise ValidationError("qty must be > 0")
    if unit_price <= 0:
        raise ValidationError("unit_price must be > 0")
    party = coerce_text(party, party_label)
    movement_date = coerce_date(movement_date, "date") if movement_date is not None else today()
    notifier = notifier or LoggingNotifier()

    item = get_item(store, item_id)
    total = quantize_money(qty * unit_price)

    if kind == MOVEMENT_IN:
        description = ledger_service.describe_receipt(
            item=item.name, supplier=party, qty=qty, unit=item.unit, unit_price=unit_price,
        )
        source_kind = SOURCE_RECEIPT
    else:
        description = ledger_service.describe_issue(
            item=item.name, project=party, qty=qty, unit=item.unit, unit_price=unit_price,
        )
        source_kind = SOURCE_ISSUE

    with store.atomic():
        updated = store.update(replace(
            item,
            quantity=adjusted_quantity(item.quantity, kind, qty),
            updated_at=movement_date,
        ))
        movement = store.create(Movement(
            item_id=item.id,
            kind=kind,
            qty=qty,
            unit_price=unit_price,
            total=total,
            party=party,
            date=movement_date,
        ))
        tx = ledger_service.post_paired_transaction(
            store,
            actor,
            tx_type="expense",
            description=description,
            amount=total,
            tx_date=movement_date,
            source_kind=source_kind,
            source_id=movement.id,
        )

    if is_low_stock(updated):
        notifier.notify("warning", f"low stock: {updated.name}")
    else:
        verb = "received" if kind == MOVEMENT_IN else "issued"
        notifier.notify("success", f"{verb} {format_number(qty)} {updated.unit} of {updated.name}")

    return StockResult(item=updated, movement=movement, transaction=tx)


def receive_inventory(
    store: EntityStore,
    actor: Actor,
    *,
    item_id: str,
    qty,
    unit_price,
    supplier: str,
    date=None,
    notifier: Optional[Notifier] = None,
) -> StockResult:
    """Stock in from a supplier; books an expense of qty * unit_price."""
    return _apply_movement(
        store,
        actor,
        kind=MOVEMENT_IN,
        item_id=item_id,
        qty=qty,
        unit_price=unit_price,
        party=supplier,
        party_label="supplier",
        movement_date=date,
        notifier=notifier,
    )


def issue_inventory(
    store: EntityStore,
    actor: Actor,
    *,
    item_id: str,
    qty,
    unit_price,
    project: str,
    date=None,
    notifier: Optional[Notifier] = None,
) -> StockResult:
    """Stock out to a project; quantity floors at zero, the expense is booked in full."""
    return _apply_movement(
        store,
        actor,
        kind=MOVEMENT_OUT,
        item_id=item_id,
        qty=qty,
        unit_price=unit_price,
        party=project,
        party_label="project",
        movement_date=date,
        notifier=notifier,
    )
