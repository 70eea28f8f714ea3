"""
Session manager: login / refresh / logout / change-password.

Anonymous -> Authenticated(access, refresh) -> Authenticated(access', refresh')* -> LoggedOut

Only the user's refresh_token and password_hash are ever written here.
The stored refresh token is overwritten, so the most recent login or
refresh wins and earlier tokens stop working.
"""
from __future__ import annotations

import hmac
import logging
from typing import Tuple

from api.errors import InvalidCredentials, NotFound, Unauthorized
from models import storage
from models.user import User
from utils.tokens import TokenError, create_token_pair, verify_refresh_token

logger = logging.getLogger(__name__)


def issue_session(user: User) -> Tuple[str, str]:
    """Issue a fresh (access, refresh) pair and make the refresh token the active one."""
    access, refresh = create_token_pair(user)
    user.set_refresh_token(refresh)
    return access, refresh


def login(password: str, username: str | None = None, email: str | None = None) -> Tuple[User, str, str]:
    user = User.find_by_identity(username=username, email=email)
    if not user:
        raise NotFound("User does not exist")

    if not user.is_password_correct(password):
        logger.info("Rejected login for user %s: bad password", user.id)
        raise InvalidCredentials("Invalid user credentials")

    access, refresh = issue_session(user)
    logger.info("User %s logged in", user.id)
    return user, access, refresh


def refresh(presented: str | None) -> Tuple[str, str]:
    """
    Rotate the session for the holder of ``presented``.
    Every failure (expired, malformed, wrong signature, unknown user,
    superseded token) is reported the same way: Unauthorized.
    """
    if not presented:
        raise Unauthorized("Unauthorized request")

    try:
        decoded = verify_refresh_token(presented)
    except TokenError as exc:
        logger.warning("Refresh rejected: %s", exc)
        raise Unauthorized("Invalid refresh token") from exc

    user = storage.get(User, decoded.get("_id"))
    if not user:
        raise Unauthorized("Invalid refresh token")

    stored = user.refresh_token or ""
    if not hmac.compare_digest(stored.encode(), presented.encode()):
        logger.warning("Refresh rejected for user %s: token superseded", user.id)
        raise Unauthorized("Refresh token is expired or used")

    access, new_refresh = issue_session(user)
    logger.info("Rotated session for user %s", user.id)
    return access, new_refresh


def logout(user_id: str) -> None:
    """Clear the stored refresh token; safe to call repeatedly."""
    User.store_refresh_token(user_id, None)
    logger.info("User %s logged out", user_id)


def change_password(user: User, old_password: str, new_password: str) -> None:
    if not user.is_password_correct(old_password):
        raise InvalidCredentials("Invalid old password")
    user.set_password(new_password)
    user.save()
    logger.info("Password changed for user %s", user.id)
