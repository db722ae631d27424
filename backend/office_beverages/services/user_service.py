# Overview: Service-layer operations for user administration.

from __future__ import annotations

from flask import current_app

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import User
from . import session_service
from .auth_service import hash_password
from .pagination import paginate_query

USER_MUTABLE_FIELDS = {
    "username", "full_name", "email", "department", "role",
    "is_active", "work_start_time", "work_end_time",
}


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def _ensure_unique(username: str | None, email: str | None, *, exclude_id: int | None = None) -> None:
    if username is not None:
        query = db.session.query(User).filter(User.username == username)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ConflictError("Username already exists")

    if email is not None:
        query = db.session.query(User).filter(db.func.lower(User.email) == email.lower())
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ConflictError("Email already exists")


def list_users(*, role: str | None = None) -> list[User]:
    query = db.session.query(User)
    if role:
        query = query.filter(User.role == role)
    return query.order_by(User.full_name.asc(), User.id.asc()).all()


def list_users_paginated(
    page: int | None = None,
    limit: int | None = None,
    *,
    role: str | None = None,
    is_active: bool | None = None,
    department: str | None = None,
) -> tuple[list[User], dict]:
    query = db.session.query(User)
    if role:
        query = query.filter(User.role == role)
    if is_active is not None:
        query = query.filter(User.is_active.is_(is_active))
    if department:
        query = query.filter(User.department == department)
    query = query.order_by(User.created_at.desc(), User.id.desc())
    return paginate_query(query, page, limit)


def search_users(term: str) -> list[User]:
    pattern = f"%{term.strip()}%"
    return (
        db.session.query(User)
        .filter(db.or_(User.username.ilike(pattern), User.full_name.ilike(pattern)))
        .order_by(User.full_name.asc())
        .all()
    )


def create_user(patch: dict) -> User:
    """
    Create a user from a validated patch (which carries the plain password).

    Raises ConflictError on duplicate username or email.
    """
    _ensure_unique(patch.get("username"), patch.get("email"))

    user = User(password_hash=hash_password(patch["password"]))
    for k, v in patch.items():
        if k in USER_MUTABLE_FIELDS:
            setattr(user, k, v)

    db.session.add(user)
    db.session.commit()

    current_app.logger.info("User created: %s (%s)", user.username, user.role)
    return user


def update_user(user_id: int, patch: dict) -> User:
    user = get_user(user_id)
    _ensure_unique(patch.get("username"), patch.get("email"), exclude_id=user.id)

    for k, v in patch.items():
        if k in USER_MUTABLE_FIELDS:
            setattr(user, k, v)

    if patch.get("password"):
        user.password_hash = hash_password(patch["password"])

    db.session.commit()

    # Deactivated users lose every open session
    if patch.get("is_active") is False:
        session_service.end_all_user_sessions(user.id, reason="User account deactivated")

    current_app.logger.info("User updated: %s", user.username)
    return user


def delete_user(user_id: int, *, actor_id: int) -> None:
    if user_id == actor_id:
        raise ValidationError("You cannot delete your own account")

    user = get_user(user_id)
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("User deleted: id=%s", user_id)


def ensure_user(
    *,
    username: str,
    password: str,
    full_name: str,
    email: str,
    role: str,
    department: str | None = None,
) -> tuple[User, bool]:
    """
    Return (user, created). Existing usernames are left untouched.
    Used by the seed command.
    """
    existing = db.session.query(User).filter_by(username=username).first()
    if existing:
        return existing, False

    user = create_user({
        "username": username,
        "password": password,
        "full_name": full_name,
        "email": email.lower(),
        "role": role,
        "department": department,
    })
    return user, True
