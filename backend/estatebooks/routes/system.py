# backend/estatebooks/routes/system.py
"""
System health endpoints.

/api/ping is a liveness probe; /api/health checks the database and the
configured entity store.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db, get_entity_store
from ..domain import Transaction
from ..models import User, SessionToken
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        user_count = db.session.query(User).count()
        active_sessions = db.session.query(SessionToken).filter_by(is_revoked=False).count()

        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "users": user_count,
                "active_sessions": active_sessions,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_entity_store_health() -> dict:
    start_time = time.time()
    try:
        get_entity_store().find(Transaction, limit=1)
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"backend": current_app.config.get("STORAGE_BACKEND", "sql")},
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Entity store health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Entity store error"
        }


@system_bp.get("/ping")
def ping():
    return {"status": "ok"}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: all checks healthy
    - 503: one or more checks unhealthy
    """
    start_time = time.time()

    database_health = check_database_health()
    store_health = check_entity_store_health()

    all_checks = [database_health, store_health]
    unhealthy = any(check["status"] == "unhealthy" for check in all_checks)

    response = {
        "status": "unhealthy" if unhealthy else "healthy",
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {
            "database": database_health,
            "entity_store": store_health,
        }
    }
    return response, 503 if unhealthy else 200
