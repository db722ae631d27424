# Overview: Server-Sent Events stream for real-time notifications, plus hub status.

"""
Notification routes.

GET /api/notifications/stream keeps the response open and writes one SSE
frame per hub event:

    event: notification
    data: {"type": "new_order", ...}

A "connected" event is written first. While idle, a comment line is sent
every NOTIFICATION_KEEPALIVE_SECONDS so proxies keep the connection open.
EventSource cannot set headers, so the token may be passed as ?token=.
"""

import json

from flask import Blueprint, Response, current_app, g, stream_with_context

from ..decorators import require_auth, require_permission, require_stream_auth
from ..errors import AppError
from ..responses import success
from ..services.notification_hub import CLOSE
from ..services.notification_service import get_hub
from ..time_utils import to_utc_z, utcnow

notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")

CONNECTED_EVENT = "connected"
KEEPALIVE_FRAME = ": keepalive\n\n"


def sse_frame(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload, default=str)}\n\n"


@notifications_bp.get("/stream")
@require_stream_auth
def stream_route():
    hub = get_hub()
    if hub is None or not hub.is_running:
        raise AppError("Notification service unavailable", 503)

    user = g.current_user
    sub = hub.subscribe(user.id, user.role)
    keepalive = current_app.config.get("NOTIFICATION_KEEPALIVE_SECONDS", 15)

    greeting = {
        "message": "Connected to notification stream",
        "userId": user.id,
        "role": user.role,
        "rooms": sorted(sub.rooms),
        "timestamp": to_utc_z(utcnow()),
    }

    def generate():
        try:
            yield sse_frame(CONNECTED_EVENT, greeting)
            while True:
                item = sub.next_event(timeout=keepalive)
                if item is None:
                    yield KEEPALIVE_FRAME
                    continue
                if item is CLOSE:
                    break
                event, payload = item
                yield sse_frame(event, payload)
        finally:
            hub.unsubscribe(sub)

    return Response(
        stream_with_context(generate()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@notifications_bp.get("/status")
@require_auth
@require_permission("VIEW_NOTIFICATION_STATUS")
def status_route():
    hub = get_hub()
    if hub is None:
        return success({"running": False, "connected": 0, "byRole": {}}, "Notification status")

    return success(hub.stats(), "Notification status")
