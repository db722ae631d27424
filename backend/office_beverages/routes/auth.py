# Overview: Flask API routes for auth operations; login, logout and the current user.

"""
Authentication API routes

Tokens are opaque bearer strings returned by /login. Every other route
here requires the token in the Authorization header.
"""

from flask import Blueprint, g, request

from ..decorators import require_auth
from ..errors import ValidationError
from ..responses import success
from ..services import auth_service, session_service
from ..validation import PASSWORD_MIN_LENGTH, USERNAME_MAX_LENGTH, USERNAME_MIN_LENGTH

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _validate_login_payload(data: dict) -> tuple[str, str]:
    username = data.get("username")
    password = data.get("password")
    errors = []

    if not isinstance(username, str) or not username.strip():
        errors.append({"field": "username", "message": "Username is required"})
    elif not USERNAME_MIN_LENGTH <= len(username.strip()) <= USERNAME_MAX_LENGTH:
        errors.append({
            "field": "username",
            "message": f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters",
        })

    if not isinstance(password, str) or not password:
        errors.append({"field": "password", "message": "Password is required"})
    elif len(password) < PASSWORD_MIN_LENGTH:
        errors.append({
            "field": "password",
            "message": f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
        })

    if errors:
        raise ValidationError("Validation failed", errors=errors)
    return username.strip(), password


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and open a session.

    Body: {"username": str, "password": str}
    Returns {token, user, sessionId, expiresAt}.
    """
    data = request.get_json(silent=True) or {}
    username, password = _validate_login_payload(data)

    result = auth_service.login(
        username,
        password,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    return success(result, "Login successful")


@auth_bp.get("/me")
@require_auth
def me_route():
    return success(g.current_user.to_dict(), "User profile retrieved")


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """End the session behind the presented token and record its duration."""
    session = auth_service.logout(g.auth_token)
    return success({"session": session}, "Logout successful")


@auth_bp.post("/logout-all")
@require_auth
def logout_all_route():
    ended = session_service.end_all_user_sessions(g.current_user.id)
    return success({"sessionsEnded": ended}, "Logged out from all sessions")
