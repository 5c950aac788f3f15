# Overview: Flask API routes for ledger transactions; parses input and returns JSON responses.

"""
Ledger routes.

SECURITY: All routes require authentication.
- Listing, totals and deletion require can_manage_ledger (manager, accountant)
- Any authenticated user may record a manual entry; approval follows the role
- Approval requires can_approve (manager)

Date semantics: from/to are inclusive calendar dates (YYYY-MM-DD).
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_policy
from ..domain import TRANSACTION_TYPES
from ..extensions import get_entity_store
from ..permissions import can_approve, can_manage_ledger
from ..services import ledger_service
from ..time_utils import parse_calendar_date
from ..validation import (
    PayloadPolicy,
    ValidationError,
    coerce_choice,
    coerce_date,
    coerce_positive_decimal,
    coerce_text,
    validate_payload,
)

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")

TRANSACTION_CREATE_POLICY = PayloadPolicy(
    coercers={
        "date": coerce_date,
        "type": coerce_choice(*TRANSACTION_TYPES),
        "description": coerce_text,
        "amount": coerce_positive_decimal,
    },
    required={"date", "type", "description", "amount"},
)


def _date_range_args():
    try:
        date_from = parse_calendar_date(request.args.get("from"))
        date_to = parse_calendar_date(request.args.get("to"))
    except ValueError:
        raise ValidationError("from/to must be YYYY-MM-DD dates")
    return date_from, date_to


@transactions_bp.get("")
@require_auth
@require_policy(can_manage_ledger, "view the ledger")
def list_transactions_route():
    try:
        date_from, date_to = _date_range_args()
        approved_raw = request.args.get("approved")
        approved = None if approved_raw is None else approved_raw.lower() in ("1", "true", "yes")
        transactions = ledger_service.list_transactions(
            get_entity_store(),
            date_from=date_from,
            date_to=date_to,
            tx_type=request.args.get("type") or None,
            approved=approved,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"transactions": [t.to_dict() for t in transactions]}), 200


@transactions_bp.get("/summary")
@require_auth
@require_policy(can_manage_ledger, "view the ledger")
def transactions_summary_route():
    try:
        date_from, date_to = _date_range_args()
        totals = ledger_service.ledger_totals(get_entity_store(), date_from=date_from, date_to=date_to)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(totals.to_dict()), 200


@transactions_bp.post("")
@require_auth
def create_transaction_route():
    """
    Manual quick entry.

    Managers and accountants get an approved row; employees' rows wait for a manager.
    """
    try:
        patch = validate_payload(
            payload=request.get_json(silent=True),
            policy=TRANSACTION_CREATE_POLICY,
        )
        tx = ledger_service.record_transaction(
            get_entity_store(),
            g.actor,
            tx_date=patch["date"],
            tx_type=patch["type"],
            description=patch["description"],
            amount=patch["amount"],
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"transaction": tx.to_dict()}), 201


@transactions_bp.post("/<transaction_id>/approve")
@require_auth
@require_policy(can_approve, "approve transactions")
def approve_transaction_route(transaction_id: str):
    tx = ledger_service.approve_transaction(get_entity_store(), g.actor, transaction_id)
    return jsonify({"transaction": tx.to_dict()}), 200


@transactions_bp.delete("/<transaction_id>")
@require_auth
@require_policy(can_manage_ledger, "delete transactions")
def delete_transaction_route(transaction_id: str):
    ledger_service.delete_transaction(get_entity_store(), g.actor, transaction_id)
    return jsonify({"deleted": transaction_id}), 200
