# backend/estatebooks/routes/inventory.py
"""
Inventory routes.

SECURITY: All routes require authentication; every role handles stock.
Receipts and issues also book an expense in the ledger, approved or pending
according to the caller's role.

Responses to receive/issue carry "notifications" (low-stock warning or a
success message) for the client to display.
"""
from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth
from ..extensions import get_entity_store
from ..notifications import CollectingNotifier
from ..services import inventory_service
from ..validation import (
    PayloadPolicy,
    ValidationError,
    coerce_date,
    coerce_non_negative_decimal,
    coerce_positive_decimal,
    coerce_text,
    validate_payload,
)


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")

ITEM_CREATE_POLICY = PayloadPolicy(
    coercers={
        "name": coerce_text,
        "unit": coerce_text,
        "quantity": coerce_non_negative_decimal,
        "min_quantity": coerce_non_negative_decimal,
    },
    required={"name", "unit"},
    aliases={"min": "min_quantity"},
)

RECEIVE_POLICY = PayloadPolicy(
    coercers={
        "item_id": coerce_text,
        "qty": coerce_positive_decimal,
        "unit_price": coerce_positive_decimal,
        "supplier": coerce_text,
        "date": coerce_date,
    },
    required={"item_id", "qty", "unit_price", "supplier"},
    aliases={"itemId": "item_id", "unitPrice": "unit_price"},
)

ISSUE_POLICY = PayloadPolicy(
    coercers={
        "item_id": coerce_text,
        "qty": coerce_positive_decimal,
        "unit_price": coerce_positive_decimal,
        "project": coerce_text,
        "date": coerce_date,
    },
    required={"item_id", "qty", "unit_price", "project"},
    aliases={"itemId": "item_id", "unitPrice": "unit_price"},
)


@inventory_bp.get("/items")
@require_auth
def list_items_route():
    low_only = request.args.get("low", "false").lower() == "true"
    items = inventory_service.list_items(get_entity_store(), low_only=low_only)
    return jsonify({"items": [i.to_dict() for i in items]}), 200


@inventory_bp.post("/items")
@require_auth
def create_item_route():
    try:
        patch = validate_payload(payload=request.get_json(silent=True), policy=ITEM_CREATE_POLICY)
        item = inventory_service.create_item(
            get_entity_store(),
            name=patch["name"],
            unit=patch["unit"],
            quantity=patch.get("quantity") or 0,
            min_quantity=patch.get("min_quantity") or 0,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"item": item.to_dict()}), 201


@inventory_bp.delete("/items/<item_id>")
@require_auth
def delete_item_route(item_id: str):
    inventory_service.delete_item(get_entity_store(), item_id)
    return jsonify({"deleted": item_id}), 200


@inventory_bp.post("/receive")
@require_auth
def receive_inventory_route():
    """Receive stock from a supplier; books the purchase as an expense."""
    notifier = CollectingNotifier()
    try:
        patch = validate_payload(payload=request.get_json(silent=True), policy=RECEIVE_POLICY)
        result = inventory_service.receive_inventory(
            get_entity_store(),
            g.actor,
            item_id=patch["item_id"],
            qty=patch["qty"],
            unit_price=patch["unit_price"],
            supplier=patch["supplier"],
            date=patch.get("date"),
            notifier=notifier,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({**result.to_dict(), "notifications": notifier.to_list()}), 201


@inventory_bp.post("/issue")
@require_auth
def issue_inventory_route():
    """Issue stock to a project; quantity never goes below zero."""
    notifier = CollectingNotifier()
    try:
        patch = validate_payload(payload=request.get_json(silent=True), policy=ISSUE_POLICY)
        result = inventory_service.issue_inventory(
            get_entity_store(),
            g.actor,
            item_id=patch["item_id"],
            qty=patch["qty"],
            unit_price=patch["unit_price"],
            project=patch["project"],
            date=patch.get("date"),
            notifier=notifier,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({**result.to_dict(), "notifications": notifier.to_list()}), 201


@inventory_bp.get("/movements")
@require_auth
def list_movements_route():
    item_id = request.args.get("item_id") or None
    movements = inventory_service.list_movements(get_entity_store(), item_id=item_id)
    return jsonify({"movements": [m.to_dict() for m in movements]}), 200
