from __future__ import annotations

from ..extensions import db
from ..domain import Transaction
from .base import RecordRowMixin


class TransactionRow(RecordRowMixin, db.Model):
    """
    Ledger row: one revenue or expense.

    PAIRING: rows generated from a receipt, issue, project cost or project sale
    carry source_kind/source_id pointing back at the originating record.
    Manual entries leave both NULL. Rows created before the link existed are
    matched on (type, description, amount, date) instead.

    APPROVAL: approved is one-way (False -> True); approved_by/approved_at
    record who flipped it.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_date_created", "date", "created_at"),
        db.Index("ix_transactions_source", "source_kind", "source_id"),
        db.Index("ix_transactions_match", "type", "date", "amount"),
    )
    record_type = Transaction

    id = db.Column(db.String(36), primary_key=True)

    date = db.Column(db.Date, nullable=False, index=True)
    type = db.Column(db.String(16), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    amount = db.Column(db.Numeric(14, 2), nullable=False)

    approved = db.Column(db.Boolean, nullable=False, default=False)
    created_by = db.Column(db.String(36), nullable=True)

    source_kind = db.Column(db.String(32), nullable=True)
    source_id = db.Column(db.String(36), nullable=True)

    approved_by = db.Column(db.String(36), nullable=True)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<TransactionRow id={self.id} type={self.type} amount={self.amount} date={self.date}>"
