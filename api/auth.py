"""
Authentication blueprint:
- POST /users/register       (multipart, avatar required, coverImage optional)
- POST /users/login          (username or email + password)
- POST /users/logout         (requires access token)
- POST /users/refresh-token  (rotates the refresh token)

Login and refresh set HTTP-only `accessToken` / `refreshToken` cookies and
also return both tokens in the body.
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, g
from marshmallow import ValidationError as SchemaValidationError

from api.errors import Conflict, InternalError, Unauthorized, UploadFailed, ValidationError
from api.responses import respond
from models import storage
from models.schemas.user import LoginSchema, RefreshSchema, RegisterSchema, UserOutSchema
from models.user import User
from utils import sessions
from utils.cookies import REFRESH_COOKIE, clear_session_cookies, set_session_cookies
from utils.decorators import jwt_required
from utils.media import discard_temp_file, get_uploader, save_temp_file

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
user_out_schema = UserOutSchema()


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: fullName, type: string, required: true }
      - { in: formData, name: username, type: string, required: true }
      - { in: formData, name: email, type: string, required: true }
      - { in: formData, name: password, type: string, required: true }
      - { in: formData, name: avatar, type: file, required: true }
      - { in: formData, name: coverImage, type: file, required: false }
    responses:
      201:
        description: Created
      400:
        description: Missing field, missing avatar or avatar upload failure
      409:
        description: Username or email already taken
    """
    data = register_schema.load(request.form or request.get_json(silent=True) or {})

    # Uniqueness is checked before anything is pushed to the media host
    if User.find_by_identity(username=data["username"], email=data["email"]):
        raise Conflict("User with email or username already exists")

    avatar_path = save_temp_file(request.files.get("avatar"))
    cover_path = save_temp_file(request.files.get("coverImage"))
    if not avatar_path:
        # Drop a cover that was already written locally
        discard_temp_file(cover_path)
        raise ValidationError("Avatar file is required")

    uploader = get_uploader()
    avatar = uploader.upload(avatar_path)
    cover_image = uploader.upload(cover_path)
    if not avatar:
        raise UploadFailed("Avatar uploading failed")

    # TODO: remove the hosted avatar/cover when this insert fails, they are orphaned otherwise
    user = User(
        full_name=data["full_name"],
        username=data["username"],
        email=data["email"],
        avatar=avatar["url"],
        cover_image=(cover_image or {}).get("url", ""),
    )
    user.set_password(data["password"])
    storage.new(user)
    storage.save()

    created = storage.get(User, user.id)
    if not created:
        raise InternalError("Something went wrong while registering user")

    logger.info("Registered user %s (%s)", created.id, created.username)
    return respond(user_out_schema.dump(created), "User registered successfully", 201)


@bp.post("/login")
def login():
    """
    Login with username or email; returns the profile and both tokens.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens, sets cookies)
      401:
        description: Invalid credentials
      404:
        description: User does not exist
    """
    payload = request.get_json(silent=True) or request.form or {}
    data = login_schema.load(payload)

    user, access, refresh = sessions.login(
        data["password"], username=data.get("username"), email=data.get("email")
    )
    body = {
        "user": user_out_schema.dump(user),
        "accessToken": access,
        "refreshToken": refresh,
    }
    resp, status = respond(body, "User logged in successfully")
    set_session_cookies(resp, access, refresh)
    return resp, status


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: invalidates the stored refresh token and clears cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    sessions.logout(g.current_user.id)
    resp, status = respond({}, "User logged out successfully")
    clear_session_cookies(resp)
    return resp, status


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange a refresh token (cookie or body) for a new pair; the old one stops working.
    ---
    tags:
      - Auth
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns tokens, sets cookies)
      401:
        description: Missing, invalid, expired or already used refresh token
    """
    presented = request.cookies.get(REFRESH_COOKIE)
    if not presented:
        try:
            data = refresh_schema.load(request.get_json(silent=True) or request.form or {})
        except SchemaValidationError as exc:
            raise Unauthorized("Invalid refresh token") from exc
        presented = data.get("refresh_token")

    access, refresh = sessions.refresh(presented)
    resp, status = respond(
        {"accessToken": access, "refreshToken": refresh},
        "Access token refreshed successfully",
    )
    set_session_cookies(resp, access, refresh)
    return resp, status
