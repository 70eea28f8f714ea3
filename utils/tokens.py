"""
Token issuer:
- Access tokens carry {_id, email, username, fullName}
- Refresh tokens carry {_id, email}
- Both are HS256 JWTs (PyJWT) with iat/exp/jti; each kind has its own secret and TTL

Issuing is side-effect free; persisting the refresh token is the session
manager's job.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Tuple

import jwt
from flask import current_app

from api.errors import InternalError

ACCESS_CLAIMS = ("_id", "email", "username", "fullName")
REFRESH_CLAIMS = ("_id", "email")
DEFAULT_ALGORITHM = "HS256"


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenInvalid(TokenError):
    pass


class TokenExpired(TokenError):
    pass


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID)."""
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _sign(claims: Dict[str, Any], keys: Tuple[str, ...], secret: str, ttl: timedelta, algorithm: str) -> str:
    if not secret:
        raise InternalError("Something went wrong while generating access and refresh tokens")
    issued = _now()
    payload = {key: claims.get(key) for key in keys}
    payload["iat"] = int(issued.timestamp())
    payload["exp"] = int((issued + ttl).timestamp())
    # distinct per token, even within the same second
    payload["jti"] = generate_jti()
    return jwt.encode(payload, secret, algorithm=algorithm)


def issue_access_token(claims: Dict[str, Any], secret: str, ttl: timedelta, algorithm: str = DEFAULT_ALGORITHM) -> str:
    return _sign(claims, ACCESS_CLAIMS, secret, ttl, algorithm)


def issue_refresh_token(claims: Dict[str, Any], secret: str, ttl: timedelta, algorithm: str = DEFAULT_ALGORITHM) -> str:
    return _sign(claims, REFRESH_CLAIMS, secret, ttl, algorithm)


def verify(token: str, secret: str, algorithm: str = DEFAULT_ALGORITHM) -> Dict[str, Any]:
    """
    Decode and validate a JWT.
    Raises TokenExpired past expiry, TokenInvalid for anything else wrong.
    """
    if not token or not isinstance(token, str):
        raise TokenInvalid("Token missing")
    if not secret:
        raise TokenInvalid("No verification secret configured")
    try:
        return jwt.decode(
            token, secret, algorithms=[algorithm], options={"require": ["exp", "iat"]}
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenInvalid(f"Invalid token: {exc}") from exc


def access_claims(user) -> Dict[str, Any]:
    return {
        "_id": user.id,
        "email": user.email,
        "username": user.username,
        "fullName": user.full_name,
    }


def refresh_claims(user) -> Dict[str, Any]:
    return {"_id": user.id, "email": user.email}


def create_token_pair(user) -> Tuple[str, str]:
    """Issue (access, refresh) for ``user`` using the app's configured secrets and TTLs."""
    cfg = current_app.config
    algorithm = cfg.get("JWT_ALGORITHM", DEFAULT_ALGORITHM)
    access = issue_access_token(
        access_claims(user), cfg["ACCESS_TOKEN_SECRET"], cfg["ACCESS_TOKEN_EXPIRES"], algorithm
    )
    refresh = issue_refresh_token(
        refresh_claims(user), cfg["REFRESH_TOKEN_SECRET"], cfg["REFRESH_TOKEN_EXPIRES"], algorithm
    )
    return access, refresh


def verify_access_token(token: str) -> Dict[str, Any]:
    cfg = current_app.config
    return verify(token, cfg["ACCESS_TOKEN_SECRET"], cfg.get("JWT_ALGORITHM", DEFAULT_ALGORITHM))


def verify_refresh_token(token: str) -> Dict[str, Any]:
    cfg = current_app.config
    return verify(token, cfg["REFRESH_TOKEN_SECRET"], cfg.get("JWT_ALGORITHM", DEFAULT_ALGORITHM))
