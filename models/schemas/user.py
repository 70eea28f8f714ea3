from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validates_schema

from models.schemas.common import lower, not_blank, strip_strings


class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(required=True, data_key="fullName", validate=not_blank)
    username = fields.String(required=True, validate=not_blank)
    email = fields.Email(required=True, validate=not_blank)
    password = fields.String(required=True, load_only=True, validate=not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        data = strip_strings(data, ("fullName", "username", "email"))
        for key in ("username", "email"):
            if key in data:
                data[key] = lower(data[key])
        return data


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None, allow_none=True)
    email = fields.String(load_default=None, allow_none=True)
    password = fields.String(required=True, load_only=True, validate=not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        data = strip_strings(data, ("username", "email"))
        for key in ("username", "email"):
            if key in data:
                data[key] = lower(data[key]) or None
        return data

    @validates_schema
    def require_identity(self, data, **kwargs):
        if not data.get("username") and not data.get("email"):
            raise ValidationError("username or email is required")


class RefreshSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", load_default=None, allow_none=True)


class ChangePasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(required=True, data_key="oldPassword", load_only=True, validate=not_blank)
    new_password = fields.String(required=True, data_key="newPassword", load_only=True, validate=not_blank)


class UpdateAccountSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(required=True, data_key="fullName", validate=not_blank)
    email = fields.Email(required=True, validate=not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        data = strip_strings(data, ("fullName", "email"))
        if "email" in data:
            data["email"] = lower(data["email"])
        return data


class UserOutSchema(Schema):
    """Public profile; never carries the password hash or the refresh token."""

    id = fields.String(data_key="_id")
    username = fields.String()
    email = fields.String()
    full_name = fields.String(data_key="fullName")
    avatar = fields.String()
    cover_image = fields.String(data_key="coverImage", allow_none=True)
    watch_history = fields.Method("get_watch_history", data_key="watchHistory")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")

    def get_watch_history(self, obj):
        return [video.id for video in (getattr(obj, "watch_history", None) or [])]
