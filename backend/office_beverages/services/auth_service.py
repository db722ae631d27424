# Overview: Service-layer operations for auth; password hashing, login and logout.

"""
Authentication Service

Uses bcrypt for password hashing. Session tokens are managed separately
(see session_service.py); login here only checks credentials, stamps
last_login_at and asks session_service for a token.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 6 characters required
- The same "Invalid credentials" message is returned for unknown users,
  wrong passwords and deactivated accounts
"""

from __future__ import annotations

import bcrypt
from flask import current_app

from ..errors import AuthenticationError, ValidationError
from ..extensions import db
from ..models import User
from ..validation import PASSWORD_MIN_LENGTH
from . import session_service
from office_beverages.time_utils import to_utc_z, utcnow

BCRYPT_ROUNDS = 12


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""

    def __init__(self, message: str):
        super().__init__(message, errors=[{"field": "password", "message": message}])


def validate_password_strength(password: str) -> None:
    """Raises PasswordValidationError if the password is too short."""
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        raise PasswordValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt (cost factor 12 unless BCRYPT_LOG_ROUNDS is set).

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_LOG_ROUNDS", BCRYPT_ROUNDS)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for a malformed stored hash instead of raising.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def authenticate(username: str, password: str) -> User | None:
    """
    Authenticate user by username and password.

    Returns User if credentials valid and account active, None otherwise.
    Updates last_login_at on success.
    """
    user = db.session.query(User).filter_by(username=username.strip()).first()

    if not user or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()

    return user


def login(
    username: str,
    password: str,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> dict:
    """
    Check credentials and open a session.

    Returns {token, user, sessionId, expiresAt}.
    Raises AuthenticationError("Invalid credentials") on any failure.
    """
    user = authenticate(username, password)
    if not user:
        current_app.logger.info("Failed login attempt for username=%s", username)
        raise AuthenticationError("Invalid credentials")

    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=user_agent,
        ip_address=ip_address,
    )

    current_app.logger.info("User logged in: %s (%s)", user.username, user.role)

    return {
        "token": token,
        "user": user.to_dict(),
        "sessionId": session.id,
        "expiresAt": to_utc_z(session.expires_at),
    }


def logout(token: str) -> dict | None:
    """
    End the session behind token. Returns the ended session dict or None.
    """
    session = session_service.end_session(token, reason="User logout")
    if session:
        current_app.logger.info(
            "User %s logged out after %s minutes", session.user_id, session.session_duration
        )
        return session.to_dict()
    return None
