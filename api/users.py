from __future__ import annotations

import logging

from flask import Blueprint, request, g

from api.errors import Conflict, UploadFailed, ValidationError
from api.responses import respond
from models import storage
from models.schemas.user import ChangePasswordSchema, UpdateAccountSchema, UserOutSchema
from models.user import User
from utils import sessions
from utils.decorators import jwt_required
from utils.media import get_uploader, save_temp_file

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__)

change_password_schema = ChangePasswordSchema()
update_account_schema = UpdateAccountSchema()
user_out_schema = UserOutSchema()


@bp.post("/change-password")
@jwt_required()
def change_password():
    """
    Change the current user's password
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             oldPassword: { type: string }
             newPassword: { type: string }
    responses:
      200: { description: OK }
      401: { description: Old password does not match }
    """
    data = change_password_schema.load(request.get_json(silent=True) or request.form or {})
    sessions.change_password(g.current_user, data["old_password"], data["new_password"])
    return respond({}, "Password changed successfully")


@bp.get("/current-user")
@jwt_required()
def current_user():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return respond(user_out_schema.dump(g.current_user), "Current user fetched successfully")


@bp.patch("/update-account")
@jwt_required()
def update_account():
    """
    Update full name and email
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             fullName: { type: string }
             email: { type: string }
    responses:
      200: { description: OK }
      409: { description: Email already in use }
    """
    data = update_account_schema.load(request.get_json(silent=True) or request.form or {})
    user: User = g.current_user

    session = storage.get_session()
    taken = session.query(User).filter(User.email == data["email"], User.id != user.id).first()
    if taken:
        raise Conflict("Email already in use")

    user.full_name = data["full_name"]
    user.email = data["email"]
    user.save()
    return respond(user_out_schema.dump(user), "Account details updated successfully")


def _replace_image(field: str, attr: str, label: str):
    local_path = save_temp_file(request.files.get(field))
    if not local_path:
        raise ValidationError(f"{label} file is missing")

    uploaded = get_uploader().upload(local_path)
    if not uploaded:
        raise UploadFailed(f"Error while uploading {label.lower()}")

    # TODO: delete the previously hosted image once the uploader supports destroy
    user: User = g.current_user
    setattr(user, attr, uploaded["url"])
    user.save()
    logger.info("User %s updated %s", user.id, attr)
    return user


@bp.patch("/avatar")
@jwt_required()
def update_avatar():
    """
    Replace the avatar
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: avatar, type: file, required: true }
    responses:
      200: { description: OK }
      400: { description: Missing file or upload failure }
    """
    user = _replace_image("avatar", "avatar", "Avatar")
    return respond(user_out_schema.dump(user), "Avatar updated successfully")


@bp.patch("/cover-image")
@jwt_required()
def update_cover_image():
    """
    Replace the cover image
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: coverImage, type: file, required: true }
    responses:
      200: { description: OK }
      400: { description: Missing file or upload failure }
    """
    user = _replace_image("coverImage", "cover_image", "Cover image")
    return respond(user_out_schema.dump(user), "Cover image updated successfully")
