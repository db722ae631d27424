# Overview: Request and permission decorators for API routes.

from functools import wraps

from flask import g, request

from .errors import AuthenticationError, AuthorizationError
from .permissions import parse_role, role_has_permission
from .services import session_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def _establish_context(token: str | None) -> None:
    if not token:
        raise AuthenticationError("Authentication required")

    context = session_service.validate_session(token)
    if not context:
        raise AuthenticationError("Invalid or expired token")

    g.current_user = context.user
    g.current_role = parse_role(context.user.role)
    g.session_context = context
    g.auth_token = token


def require_auth(f):
    """
    Require a valid bearer token.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.current_role: The user's Role
    - g.session_context: The SessionContext (user + session row)
    - g.auth_token: The plaintext token of this request

    Raises AuthenticationError (401) if:
    - No Authorization header
    - Invalid, ended or expired token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _establish_context(_bearer_token())
        return f(*args, **kwargs)

    return decorated_function


def require_stream_auth(f):
    """
    Like require_auth, but also accepts ?token= for clients (EventSource)
    that cannot set request headers.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        _establish_context(_bearer_token() or request.args.get("token"))
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """Require the current user's role to grant a permission code."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "current_user"):
                raise AuthenticationError("Authentication required")

            if not role_has_permission(g.current_role, permission_code):
                raise AuthorizationError(
                    f"Access denied: {permission_code} permission required"
                )

            return f(*args, **kwargs)

        return decorated_function

    return decorator
