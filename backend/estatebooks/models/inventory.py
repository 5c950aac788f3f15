from __future__ import annotations

from ..extensions import db
from ..domain import InventoryItem, Movement
from .base import RecordRowMixin


class InventoryItemRow(RecordRowMixin, db.Model):
    """
    Stock item with a mutable on-hand quantity.

    quantity changes only through inventory_service (receipts add, issues
    subtract and floor at zero). min_quantity is the reorder threshold.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.Index("ix_inventory_items_updated_name", "updated_at", "name"),
    )
    record_type = InventoryItem

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Numeric(14, 3), nullable=False, default=0)
    unit = db.Column(db.String(32), nullable=False)
    min_quantity = db.Column("min", db.Numeric(14, 3), nullable=False, default=0)
    updated_at = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    movements = db.relationship(
        "MovementRow",
        backref=db.backref("item", lazy=True),
        lazy=True,
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<InventoryItemRow id={self.id} name={self.name!r} quantity={self.quantity}>"


class MovementRow(RecordRowMixin, db.Model):
    """
    Append-only audit of one stock change.

    kind='in' is a receipt (party = supplier); kind='out' is an issue
    (party = project name). total = qty * unit_price, stored.
    """
    __tablename__ = "inventory_movements"
    __table_args__ = (
        db.Index("ix_inventory_movements_item_date", "item_id", "date"),
    )
    record_type = Movement

    id = db.Column(db.String(36), primary_key=True)
    item_id = db.Column(
        db.String(36),
        db.ForeignKey("inventory_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind = db.Column(db.String(8), nullable=False)
    qty = db.Column(db.Numeric(14, 3), nullable=False)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False)
    total = db.Column(db.Numeric(16, 2), nullable=False)
    party = db.Column(db.String(255), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<MovementRow id={self.id} kind={self.kind} qty={self.qty} item_id={self.item_id}>"
