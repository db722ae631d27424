# Overview: Flask API routes for user administration; admin only.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..models import User
from ..permissions import Role
from ..responses import created, paginated, success
from ..services import user_service
from ..validation import USER_POLICY, enforce_rules_user, validate_payload

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _bool_arg(name: str) -> bool | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    return raw.lower() in ("1", "true", "yes")


def _role_arg() -> str | None:
    role = request.args.get("role") or None
    if role is not None and role not in Role.values():
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "role", "message": "Invalid role"}],
        )
    return role


@users_bp.get("")
@require_auth
@require_permission("MANAGE_USERS")
def list_users_route():
    """
    List users.

    Query params:
    - role: admin | employee | office_boy
    - page, limit: switch to the paginated form
    - is_active, department: paginated filters
    """
    role = _role_arg()
    page = request.args.get("page", type=int)
    limit = request.args.get("limit", type=int)

    if page is None and limit is None:
        users = user_service.list_users(role=role)
        return success([u.to_dict() for u in users], "Users retrieved")

    users, meta = user_service.list_users_paginated(
        page,
        limit,
        role=role,
        is_active=_bool_arg("is_active"),
        department=request.args.get("department") or None,
    )
    return paginated([u.to_dict() for u in users], meta, "Users retrieved")


@users_bp.get("/search")
@require_auth
@require_permission("MANAGE_USERS")
def search_users_route():
    term = (request.args.get("q") or "").strip()
    if not term:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "q", "message": "Search term is required"}],
        )
    users = user_service.search_users(term)
    return success([u.to_dict() for u in users], "Search results")


@users_bp.get("/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def get_user_route(user_id: int):
    return success(user_service.get_user(user_id).to_dict(), "User retrieved")


@users_bp.post("")
@require_auth
@require_permission("MANAGE_USERS")
def create_user_route():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=False)
    enforce_rules_user(patch, creating=True)

    user = user_service.create_user(patch)
    return created(user.to_dict(), "User created successfully")


@users_bp.put("/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def update_user_route(user_id: int):
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=True)
    enforce_rules_user(patch, creating=False)

    user = user_service.update_user(user_id, patch)
    return success(user.to_dict(), "User updated successfully")


@users_bp.delete("/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def delete_user_route(user_id: int):
    user_service.delete_user(user_id, actor_id=g.current_user.id)
    return success(message="User deleted successfully")
