from __future__ import annotations
from functools import wraps
from flask import request, g, current_app
from models import storage
from models.user import User
from utils.exceptions import UnauthorizedError
from utils.security import TokenError

ACCESS_COOKIE = "accessToken"


def _presented_access_token() -> str | None:
    """Access token from the Authorization header, falling back to the accessToken cookie."""
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        token = auth.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(ACCESS_COOKIE) or None


def _authenticate(token: str) -> User:
    issuer = current_app.extensions["token_issuer"]
    try:
        decoded = issuer.verify_access_token(token)
    except TokenError as exc:
        raise UnauthorizedError("Invalid access token", reason=exc.reason) from exc

    user = storage.get(User, decoded.get("sub"))
    if not user:
        raise UnauthorizedError("Invalid access token", reason="unknown_user")
    return user


def jwt_required(optional: bool = False):
    """
    Require a valid access token and expose the user as g.current_user.
    With optional=True an anonymous request passes through with g.current_user = None,
    but a presented token must still be valid.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _presented_access_token()
            if not token:
                if not optional:
                    raise UnauthorizedError("Unauthorized request", reason="missing")
                g.current_user = None
                return fn(*args, **kwargs)

            g.current_user = _authenticate(token)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
