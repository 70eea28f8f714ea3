from __future__ import annotations
from functools import wraps
from flask import request, g
from api.errors import Unauthorized
from models import storage
from models.user import User
from utils.cookies import ACCESS_COOKIE
from utils.tokens import TokenError, verify_access_token


def _access_token_from_request() -> str | None:
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def jwt_required():
    """Require a valid access token (cookie or Bearer header); sets g.current_user."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _access_token_from_request()
            if not token:
                raise Unauthorized("Unauthorized request")
            try:
                decoded = verify_access_token(token)
            except TokenError as exc:
                raise Unauthorized("Invalid access token") from exc

            user = storage.get(User, decoded.get("_id"))
            if not user:
                raise Unauthorized("Invalid access token")
            g.current_user = user
            return fn(*args, **kwargs)

        return wrapper

    return decorator
