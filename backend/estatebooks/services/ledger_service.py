# Overview: Service-layer operations for the ledger; paired-transaction sync and manual entries.

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from ..decimal_utils import format_number, quantize_money
from ..domain import SOURCE_KINDS, TRANSACTION_TYPES, Transaction
from ..permissions import Actor, auto_approves, can_approve, can_manage_ledger, require
from ..storage import EntityStore
from ..time_utils import utcnow
from ..validation import (
    ValidationError,
    coerce_choice,
    coerce_date,
    coerce_positive_decimal,
)
"""
Ledger Invariants (authoritative)

- Every receipt, issue, project cost and project sale has exactly one paired
  Transaction, written in the same store.atomic() unit as its source record.
- Paired rows carry (source_kind, source_id); manual rows carry neither.
- Descriptions of paired rows are deterministic (see describe_* below).
- approved is decided once, at creation, by permissions.auto_approves; only a
  manager may flip it later, and only from False to True.
- amount is always > 0; type decides the sign in totals.
"""

logger = logging.getLogger(__name__)


# =============================================================================
# DESCRIPTIONS
# =============================================================================

def describe_receipt(*, item: str, supplier: str, qty: Decimal, unit: str, unit_price: Decimal) -> str:
    return f"purchase of {item} from {supplier} ({format_number(qty)} {unit} × {format_number(unit_price)})"


def describe_issue(*, item: str, project: str, qty: Decimal, unit: str, unit_price: Decimal) -> str:
    return f"issue of {item} to project {project} ({format_number(qty)} {unit} × {format_number(unit_price)})"


def describe_project_cost(*, cost_type: str, project_name: str) -> str:
    return f"{cost_type} cost for project {project_name}"


def describe_project_sale(*, unit_no: str, project_name: str, buyer: str) -> str:
    return f"sale of unit {unit_no} of project {project_name} to {buyer}"


# =============================================================================
# WRITES
# =============================================================================

MAX_DESCRIPTION_LENGTH = 500


def _clean_description(value) -> str:
    if not isinstance(value, str):
        raise ValidationError("description must be a string")
    text = value.strip()
    if not text:
        raise ValidationError("description cannot be blank")
    if len(text) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"description exceeds max length {MAX_DESCRIPTION_LENGTH}")
    return text


def _new_transaction(
    actor: Actor,
    *,
    tx_type: str,
    description: str,
    amount,
    tx_date,
    source_kind: Optional[str] = None,
    source_id: Optional[str] = None,
) -> Transaction:
    tx_type = coerce_choice(*TRANSACTION_TYPES)(tx_type, "type")
    description = _clean_description(description)
    amount = quantize_money(coerce_positive_decimal(amount, "amount"))
    if amount <= 0:
        raise ValidationError("amount must be > 0")
    tx_date = coerce_date(tx_date, "date")

    approved = auto_approves(actor)
    return Transaction(
        date=tx_date,
        type=tx_type,
        description=description,
        amount=amount,
        approved=approved,
        created_by=actor.id,
        source_kind=source_kind,
        source_id=source_id,
        approved_by=actor.id if approved else None,
        approved_at=utcnow() if approved else None,
    )


def record_transaction(
    store: EntityStore,
    actor: Actor,
    *,
    tx_date,
    tx_type: str,
    description: str,
    amount,
) -> Transaction:
    """
    Manual quick entry. Any authenticated role may record one; whether it
    starts approved depends on the actor's role.
    """
    tx = _new_transaction(
        actor,
        tx_type=tx_type,
        description=description,
        amount=amount,
        tx_date=tx_date,
    )
    return store.create(tx)


def post_paired_transaction(
    store: EntityStore,
    actor: Actor,
    *,
    tx_type: str,
    description: str,
    amount,
    tx_date,
    source_kind: str,
    source_id: str,
) -> Transaction:
    """Create the ledger row paired with a domain record. Call inside store.atomic()."""
    if source_kind not in SOURCE_KINDS:
        raise ValueError(f"unknown source_kind {source_kind!r}")
    tx = _new_transaction(
        actor,
        tx_type=tx_type,
        description=description,
        amount=amount,
        tx_date=tx_date,
        source_kind=source_kind,
        source_id=source_id,
    )
    return store.create(tx)


def find_paired_transaction(
    store: EntityStore,
    *,
    source_kind: str,
    source_id: str,
    tx_type: str,
    description: str,
    amount: Decimal,
    tx_date: date,
) -> Optional[Transaction]:
    """
    Locate the ledger row paired with a source record.

    The explicit (source_kind, source_id) link wins. Rows written before the
    link existed are matched on (type, description, amount, date), considering
    unlinked rows only.
    """
    linked = store.find(Transaction, source_kind=source_kind, source_id=source_id, limit=1)
    if linked:
        return linked[0]

    amount = quantize_money(amount)
    for tx in store.find(Transaction, type=tx_type, date_from=tx_date, date_to=tx_date):
        if tx.source_id is None and tx.description == description and quantize_money(tx.amount) == amount:
            return tx
    return None


def remove_paired_transaction(
    store: EntityStore,
    *,
    source_kind: str,
    source_id: str,
    tx_type: str,
    description: str,
    amount: Decimal,
    tx_date: date,
) -> bool:
    """
    Delete the single ledger row paired with a source record.

    Returns False (and logs a warning) when no row matches; the caller's
    deletion of the source record still goes ahead.
    """
    tx = find_paired_transaction(
        store,
        source_kind=source_kind,
        source_id=source_id,
        tx_type=tx_type,
        description=description,
        amount=amount,
        tx_date=tx_date,
    )
    if tx is None:
        logger.warning(
            "No paired transaction for %s %s (%s, %r, %s, %s)",
            source_kind, source_id, tx_type, description, amount, tx_date,
        )
        return False
    return store.delete(Transaction, tx.id)


def approve_transaction(store: EntityStore, actor: Actor, transaction_id: str) -> Transaction:
    """Manager-only, one-way. Approving an approved row returns it unchanged."""
    require(can_approve, actor, "approve transactions")
    tx = store.get_or_raise(Transaction, transaction_id, "Transaction")
    if tx.approved:
        return tx
    return store.update(replace(tx, approved=True, approved_by=actor.id, approved_at=utcnow()))


def delete_transaction(store: EntityStore, actor: Actor, transaction_id: str) -> None:
    require(can_manage_ledger, actor, "delete transactions")
    store.get_or_raise(Transaction, transaction_id, "Transaction")
    store.delete(Transaction, transaction_id)


# =============================================================================
# READS
# =============================================================================

def list_transactions(
    store: EntityStore,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    tx_type: Optional[str] = None,
    approved: Optional[bool] = None,
    limit: Optional[int] = None,
) -> list[Transaction]:
    if date_from and date_to and date_from > date_to:
        raise ValidationError("from must be on or before to")
    filters = {}
    if tx_type is not None:
        filters["type"] = coerce_choice(*TRANSACTION_TYPES)(tx_type, "type")
    if approved is not None:
        filters["approved"] = bool(approved)
    return store.find(Transaction, date_from=date_from, date_to=date_to, limit=limit, **filters)


@dataclass(frozen=True)
class LedgerTotals:
    revenue: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.revenue - self.expense

    def to_dict(self) -> dict:
        return {
            "revenue": float(self.revenue),
            "expense": float(self.expense),
            "net": float(self.net),
        }


def sum_transactions(transactions) -> LedgerTotals:
    revenue = Decimal("0")
    expense = Decimal("0")
    for tx in transactions:
        if tx.type == "revenue":
            revenue += tx.amount
        elif tx.type == "expense":
            expense += tx.amount
    return LedgerTotals(revenue=quantize_money(revenue), expense=quantize_money(expense))


def ledger_totals(
    store: EntityStore,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> LedgerTotals:
    """Revenue, expense and net over the ledger; approval status is ignored."""
    return sum_transactions(list_transactions(store, date_from=date_from, date_to=date_to))
