import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "VideoTube Accounts API",
        "version": "1.0.0",
        "description": "User registration, sessions (JWT access/refresh), profiles, channels and watch history.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    ``overrides`` is applied on top of the selected config class (used by tests).
    """
    app = Flask(__name__)

    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    # Cookies carry the session; browsers only send them cross-origin to listed origins
    origins_env = app.config.get("CORS_ORIGINS", "*")
    origins = [o.strip() for o in origins_env.split(",") if o.strip()] or ["*"]
    CORS(
        app,
        resources={r"/*": {"origins": origins}},
        supports_credentials="*" not in origins,
    )

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Uniform error envelope for every failure
    register_error_handlers(app)

    from utils.media import MediaUploader

    app.extensions["media_uploader"] = MediaUploader.from_config(app.config)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .channels import bp as channels_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/users")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")
    app.register_blueprint(channels_bp, url_prefix="/api/v1/users")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to VideoTube Accounts API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    logging.getLogger(__name__).info("App created (env=%s)", app.config.get("APP_ENV"))
    return app
