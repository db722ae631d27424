# Overview: Service-layer operations for sessions; bearer tokens plus login/logout audit.

"""
Session Token Management Service

Every successful login creates one UserSession row. The row is both the
bearer-token record and the attendance log used by the activity reports.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute lifetime from SESSION_LIFETIME_HOURS
- Ended on logout, on deactivation, or en masse ("logout everywhere")
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import current_app

from ..extensions import db
from ..models import User, UserSession
from office_beverages.time_utils import utcnow

DEFAULT_SESSION_LIFETIME_HOURS = 24


@dataclass
class SessionContext:
    """Result of a successful validate_session call."""
    user: User
    session: UserSession


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """Hash token for database storage using SHA-256."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _session_lifetime() -> timedelta:
    hours = current_app.config.get("SESSION_LIFETIME_HOURS", DEFAULT_SESSION_LIFETIME_HOURS)
    return timedelta(hours=hours)


def _duration_minutes(start: datetime, end: datetime) -> int:
    return round((end - start).total_seconds() / 60)


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[UserSession, str]:
    """
    Create new session for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    now = utcnow()
    plaintext_token = generate_token()

    session = UserSession(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        login_time=now,
        expires_at=now + _session_lifetime(),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
        is_active=True,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def _end(session: UserSession, reason: str, now: datetime) -> None:
    session.is_active = False
    session.logout_time = now
    session.session_duration = _duration_minutes(session.login_time, now)
    session.end_reason = reason


def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if the token is unknown, ended or expired, or if the user
    account has been deactivated. Expired and deactivated sessions are ended
    on the spot so they stop showing as online.
    """
    if not token:
        return None

    session = db.session.query(UserSession).filter_by(
        token_hash=hash_token(token),
        is_active=True,
    ).first()

    if not session:
        return None

    now = utcnow()

    if session.expires_at < now:
        _end(session, "Expired", now)
        db.session.commit()
        return None

    user = session.user
    if not user or not user.is_active:
        _end(session, "User account deactivated", now)
        db.session.commit()
        return None

    return SessionContext(user=user, session=session)


def end_session(token: str, reason: str = "User logout") -> UserSession | None:
    """
    End the session identified by token.

    Returns the ended session, or None if no active session matched.
    """
    session = db.session.query(UserSession).filter_by(
        token_hash=hash_token(token),
        is_active=True,
    ).first()

    if not session:
        return None

    _end(session, reason, utcnow())
    db.session.commit()
    return session


def end_all_user_sessions(user_id: int, reason: str = "Logout from all sessions") -> int:
    """End every active session for a user. Returns count ended."""
    now = utcnow()

    sessions = db.session.query(UserSession).filter_by(
        user_id=user_id,
        is_active=True,
    ).all()

    for session in sessions:
        _end(session, reason, now)

    db.session.commit()
    return len(sessions)


def get_active_sessions(user_id: int | None = None) -> list[UserSession]:
    """Active sessions, newest login first, optionally for one user."""
    query = db.session.query(UserSession).filter(
        UserSession.is_active.is_(True),
        UserSession.expires_at >= utcnow(),
    )
    if user_id is not None:
        query = query.filter(UserSession.user_id == user_id)
    return query.order_by(UserSession.login_time.desc()).all()


def cleanup_ended_sessions(older_than_days: int = 30) -> int:
    """
    Delete ended or expired sessions whose login is older than the cutoff.

    Returns count of sessions deleted.
    """
    cutoff = utcnow() - timedelta(days=older_than_days)

    deleted = db.session.query(UserSession).filter(
        db.or_(
            UserSession.is_active.is_(False),
            UserSession.expires_at < utcnow(),
        ),
        UserSession.login_time < cutoff,
    ).delete(synchronize_session=False)

    db.session.commit()
    return deleted
