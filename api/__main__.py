"""
Development server: ``python -m api``.
Production runs ``api:create_app()`` under a WSGI server instead.
"""
import logging
import os

from . import create_app

logger = logging.getLogger("api")


def _debug_flag(app) -> bool:
    raw = os.getenv("FLASK_DEBUG")
    if raw is None:
        return bool(app.config.get("DEBUG"))
    return raw.lower() in ("1", "true", "yes")


def main():
    app = create_app()
    # multipart uploads are staged here before going to the media host
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("PORT", os.getenv("FLASK_RUN_PORT", "8000")))
    logger.info("Serving on %s:%s (env=%s)", host, port, app.config.get("APP_ENV"))
    app.run(host=host, port=port, debug=_debug_flag(app))


if __name__ == "__main__":
    main()
