import logging

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from models import storage

bp = Blueprint("health", __name__)
logger = logging.getLogger(__name__)

SERVICE_NAME = "videotube-accounts"
SERVICE_VERSION = "1.0.0"


def _database_reachable() -> bool:
    try:
        storage.get_session().execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database ping failed: %s", exc)
        return False
    return True


@bp.get("/health")
def health():
    """
    Liveness plus a database ping
    ---
    tags:
      - Health
    responses:
      200:
        description: Service and database are up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            service:
              type: string
              example: videotube-accounts
            version:
              type: string
              example: 1.0.0
            database:
              type: string
              example: ok
      503:
        description: Database unreachable
    """
    db_ok = _database_reachable()
    body = {
        "status": "ok" if db_ok else "degraded",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "database": "ok" if db_ok else "unavailable",
    }
    return body, 200 if db_ok else 503
