from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError
import logging

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base for every failure a handler reports to the client."""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, errors: dict | list | None = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "All fields are required"


class UploadFailed(ApiError):
    status_code = 400
    default_message = "File upload failed"


class InvalidCredentials(ApiError):
    status_code = 401
    default_message = "Invalid user credentials"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized request"


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists"


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal server error"


def error_response(message: str, status: int, errors: dict | list | None = None):
    payload = {"statusCode": status, "success": False, "message": message}
    if errors:
        payload["errors"] = errors
    return jsonify(payload), status


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status_code >= 500:
            logger.exception("Request failed", exc_info=err)
        return error_response(err.message, err.status_code, err.errors)

    # Marshmallow field errors are reported as a 400 ValidationError
    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(err: SchemaValidationError):
        return error_response("Invalid input", ValidationError.status_code, err.messages)

    # Unique constraints that slipped past the explicit existence checks
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        if current_app and current_app.debug:
            logger.exception("Integrity error", exc_info=err)
        if "unique" in lower_msg or "duplicate" in lower_msg:
            return error_response("User with email or username already exists", Conflict.status_code)
        return error_response("Integrity error", 400)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.description or err.name, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        errors = None
        if current_app and current_app.debug:
            errors = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("An unexpected error occurred", 500, errors)
