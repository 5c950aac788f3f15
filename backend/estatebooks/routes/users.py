# Overview: Flask API routes for listing user accounts (manager only).

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_policy
from ..permissions import can_manage_users
from ..services import auth_service

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_policy(can_manage_users, "list users")
def list_users_route():
    users = auth_service.list_users()
    return jsonify({"users": [u.to_dict() for u in users]}), 200
