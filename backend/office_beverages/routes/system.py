# backend/office_beverages/routes/system.py
"""
System health endpoint.

Reports database connectivity and latency and the state of the
notification hub. No authentication; intended for load balancers.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services.notification_service import get_hub
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    """Run a trivial query and time it."""
    start_time = time.perf_counter()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_notification_health() -> dict:
    hub = get_hub()
    if hub is None:
        return {"status": "unavailable", "running": False, "connected": 0}
    return {
        "status": "healthy" if hub.is_running else "stopped",
        "running": hub.is_running,
        "connected": hub.connected_count(),
    }


@system_bp.get("/health")
def health():
    database = check_database_health()
    notifications = check_notification_health()

    healthy = database["status"] == "healthy"
    body = {
        "success": healthy,
        "message": "Service healthy" if healthy else "Service degraded",
        "data": {
            "status": "ok" if healthy else "degraded",
            "database": database,
            "notifications": notifications,
            "timestamp": to_utc_z(utcnow()),
        },
    }
    return body, 200 if healthy else 503
