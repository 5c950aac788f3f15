# Overview: Bulk loader endpoint returning every collection in its default order.

from flask import Blueprint, jsonify

from ..decorators import require_auth
from ..extensions import get_entity_store
from ..services import inventory_service, ledger_service, project_service

data_bp = Blueprint("data", __name__, url_prefix="/api")


@data_bp.get("/data")
@require_auth
def load_all_route():
    """Initial client load: the six collections, each in its default ordering."""
    store = get_entity_store()
    return jsonify({
        "transactions": [t.to_dict() for t in ledger_service.list_transactions(store)],
        "inventory": [i.to_dict() for i in inventory_service.list_items(store)],
        "movements": [m.to_dict() for m in inventory_service.list_movements(store)],
        "projects": [p.to_dict() for p in project_service.list_projects(store)],
        "projectCosts": [c.to_dict() for c in project_service.list_project_costs(store)],
        "projectSales": [s.to_dict() for s in project_service.list_project_sales(store)],
    }), 200
