# Overview: Flask API routes for projects, project costs and unit sales.

"""
Project routes.

SECURITY: All routes require authentication.
Costs book an expense and sales book a revenue in the ledger; deleting either
removes its paired ledger row. Deleting a project cascades through both.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth
from ..domain import PROJECT_COST_TYPES
from ..extensions import get_entity_store
from ..services import project_service
from ..validation import (
    PayloadPolicy,
    ValidationError,
    coerce_choice,
    coerce_date,
    coerce_optional_text,
    coerce_positive_decimal,
    coerce_positive_int,
    coerce_text,
    validate_payload,
)

projects_bp = Blueprint("projects", __name__, url_prefix="/api/projects")

PROJECT_CREATE_POLICY = PayloadPolicy(
    coercers={
        "name": coerce_text,
        "location": coerce_text,
        "floors": coerce_positive_int,
        "units": coerce_positive_int,
    },
    required={"name", "location", "floors", "units"},
)

COST_CREATE_POLICY = PayloadPolicy(
    coercers={
        "type": coerce_choice(*PROJECT_COST_TYPES),
        "amount": coerce_positive_decimal,
        "date": coerce_date,
        "note": coerce_optional_text,
    },
    required={"type", "amount"},
)

SALE_CREATE_POLICY = PayloadPolicy(
    coercers={
        "unit_no": coerce_text,
        "buyer": coerce_text,
        "price": coerce_positive_decimal,
        "date": coerce_date,
        "terms": coerce_optional_text,
    },
    required={"unit_no", "buyer", "price"},
    aliases={"unitNo": "unit_no"},
)


@projects_bp.get("")
@require_auth
def list_projects_route():
    projects = project_service.list_projects(get_entity_store())
    return jsonify({"projects": [p.to_dict() for p in projects]}), 200


@projects_bp.post("")
@require_auth
def create_project_route():
    try:
        patch = validate_payload(payload=request.get_json(silent=True), policy=PROJECT_CREATE_POLICY)
        project = project_service.create_project(get_entity_store(), **patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"project": project.to_dict()}), 201


@projects_bp.get("/<project_id>")
@require_auth
def get_project_route(project_id: str):
    summary = project_service.project_summary(get_entity_store(), project_id)
    return jsonify(summary.to_dict()), 200


@projects_bp.delete("/<project_id>")
@require_auth
def delete_project_route(project_id: str):
    project_service.delete_project(get_entity_store(), project_id)
    return jsonify({"deleted": project_id}), 200


@projects_bp.get("/<project_id>/costs")
@require_auth
def list_costs_route(project_id: str):
    costs = project_service.list_project_costs(get_entity_store(), project_id)
    return jsonify({"costs": [c.to_dict() for c in costs]}), 200


@projects_bp.post("/<project_id>/costs")
@require_auth
def add_cost_route(project_id: str):
    try:
        patch = validate_payload(payload=request.get_json(silent=True), policy=COST_CREATE_POLICY)
        cost, tx = project_service.add_project_cost(
            get_entity_store(),
            g.actor,
            project_id=project_id,
            cost_type=patch["type"],
            amount=patch["amount"],
            date=patch.get("date"),
            note=patch.get("note"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"cost": cost.to_dict(), "transaction": tx.to_dict()}), 201


@projects_bp.delete("/costs/<cost_id>")
@require_auth
def delete_cost_route(cost_id: str):
    project_service.delete_project_cost(get_entity_store(), cost_id)
    return jsonify({"deleted": cost_id}), 200


@projects_bp.get("/<project_id>/sales")
@require_auth
def list_sales_route(project_id: str):
    sales = project_service.list_project_sales(get_entity_store(), project_id)
    return jsonify({"sales": [s.to_dict() for s in sales]}), 200


@projects_bp.post("/<project_id>/sales")
@require_auth
def add_sale_route(project_id: str):
    try:
        patch = validate_payload(payload=request.get_json(silent=True), policy=SALE_CREATE_POLICY)
        sale, tx = project_service.add_project_sale(
            get_entity_store(),
            g.actor,
            project_id=project_id,
            unit_no=patch["unit_no"],
            buyer=patch["buyer"],
            price=patch["price"],
            date=patch.get("date"),
            terms=patch.get("terms"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"sale": sale.to_dict(), "transaction": tx.to_dict()}), 201


@projects_bp.delete("/sales/<sale_id>")
@require_auth
def delete_sale_route(sale_id: str):
    project_service.delete_project_sale(get_entity_store(), sale_id)
    return jsonify({"deleted": sale_id}), 200
