from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_policy
from ..extensions import get_entity_store
from ..permissions import can_manage_ledger
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/<kind>")
@require_auth
@require_policy(can_manage_ledger, "view reports")
def report_route(kind: str):
    """
    Tabular report: profit-loss, revenue, expense, salary, inventory or project.

    Query args: from, to (YYYY-MM-DD, default first of month .. today),
    project_id (project report only).
    """
    try:
        report = reporting_service.build_report(
            get_entity_store(),
            kind,
            date_from=request.args.get("from"),
            date_to=request.args.get("to"),
            project_id=request.args.get("project_id"),
            currency=current_app.config.get("CURRENCY_LABEL", reporting_service.DEFAULT_CURRENCY),
        )
        return jsonify(report.to_dict()), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
