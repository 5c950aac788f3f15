# Overview: Request and policy decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .permissions import Actor, PermissionDeniedError, require
from .services import session_service


def request_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header:
        if not auth_header.startswith("Bearer "):
            return None
        return auth_header.split(" ", 1)[1].strip() or None
    # Query-string fallback for download links opened outside the SPA
    return request.args.get("token") or None


def require_auth(f):
    """
    Require a valid session token.

    Sets the following Flask g attributes:
    - g.current_user: the authenticated User row
    - g.actor: Actor(id, role) handed to the services
    - g.session_context: the full SessionContext

    Returns 401 if the token is missing, invalid, expired, or the user is inactive.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = request_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.actor = Actor.from_user(context.user)
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_policy(check, action: str | None = None):
    """
    Require a policy check from estatebooks.permissions to pass for g.actor.

    Must be stacked under @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            actor = getattr(g, "actor", None)
            if actor is None:
                return jsonify({"error": "Authentication required"}), 401

            try:
                require(check, actor, action or check.__name__.replace("_", " "))
            except PermissionDeniedError as e:
                return jsonify({
                    "error": "Permission denied",
                    "required_policy": check.__name__,
                    "message": str(e)
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
