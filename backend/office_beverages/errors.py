# Overview: Application error taxonomy and the Flask handlers that render it.

"""
Every error a service raises maps to one fixed HTTP status. Routes never
build error responses themselves; the handlers registered here turn the
exception into the standard envelope:

    {"success": false, "message": "...", "errors": [...]}
"""

from __future__ import annotations

from flask import Flask
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from .extensions import db


class AppError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(self, message: str = "An internal error occurred", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationError(AppError):
    """400-level input problem. `errors` holds per-field details when known."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict:
        rv = super().to_dict()
        if self.errors:
            rv["errors"] = self.errors
        return rv


class AuthenticationError(AppError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(AppError):
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class ConflictError(AppError):
    """409-level business rule conflict (duplicate key, illegal transition)."""

    status_code = 409

    def __init__(self, message: str = "Conflict"):
        super().__init__(message)


UNIQUE_VIOLATION_PGCODE = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """True only for duplicate-key failures."""
    if getattr(error.orig, "pgcode", None) == UNIQUE_VIOLATION_PGCODE:
        return True
    text = str(error.orig).lower()
    return "unique constraint" in text or "duplicate key" in text or "duplicate entry" in text


def register_error_handlers(app: Flask) -> None:
    """Map the taxonomy (plus framework errors) onto the response envelope."""

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        db.session.rollback()
        app.logger.warning("AppError [%s]: %s", error.status_code, error.message)
        return error.to_dict(), error.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error: IntegrityError):
        db.session.rollback()
        app.logger.warning("IntegrityError: %s", error.orig)
        if is_unique_violation(error):
            return {"success": False, "message": "Resource already exists"}, 409
        return {"success": False, "message": "Invalid data"}, 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        return {"success": False, "message": error.description or error.name}, error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled exception")
        return {"success": False, "message": "Internal server error"}, 500
