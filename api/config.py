"""
Environment-aware configuration.
Token secrets and expiries, cookie flags, upload settings and the media host
credentials all come from the environment (.env is read if present).
"""
import os
import re
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """
    Parse an expiry such as "900", "15m", "12h" or "10d" into a timedelta.
    Bare numbers are seconds.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_UNITS[unit.lower()]: int(amount)})


def _bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Access and refresh tokens are signed with distinct secrets
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "")
    ACCESS_TOKEN_EXPIRES = parse_duration(os.getenv("ACCESS_TOKEN_EXPIRY", "1d"))
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "")
    REFRESH_TOKEN_EXPIRES = parse_duration(os.getenv("REFRESH_TOKEN_EXPIRY", "10d"))

    COOKIE_SECURE = _bool("COOKIE_SECURE", True)
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Lax")

    # Incoming multipart files land here before being pushed to the media host
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "./public/temp")
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(16 * 1024 * 1024)))

    CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY", "")
    CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET", "")
    UPLOAD_TIMEOUT = float(os.getenv("UPLOAD_TIMEOUT", "30"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ACCESS_TOKEN_SECRET = BaseConfig.ACCESS_TOKEN_SECRET or "dev-access-secret"
    REFRESH_TOKEN_SECRET = BaseConfig.REFRESH_TOKEN_SECRET or "dev-refresh-secret"


class TestingConfig(BaseConfig):
    TESTING = True
    APP_ENV = "test"
    ACCESS_TOKEN_SECRET = "test-access-secret"
    REFRESH_TOKEN_SECRET = "test-refresh-secret"
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    REFRESH_TOKEN_EXPIRES = timedelta(days=10)


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
