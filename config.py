# config.py
import os
from datetime import timedelta


def _env_flag(name, default):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-jwt-secret-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "mysql+pymysql://root:@localhost/fitplan"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # 🔐 JWT config
    JWT_TOKEN_LOCATION = ["headers"]     # where to look for tokens
    JWT_HEADER_NAME = "Authorization"    # header name
    JWT_HEADER_TYPE = "Bearer"           # expected prefix
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        days=int(os.environ.get("JWT_ACCESS_TOKEN_DAYS", "7"))
    )

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Realized totals use actual_* values, falling back to the planned
    # duration/distance when the actual field was left empty.
    DONE_FALLBACK_TO_PLANNED = _env_flag("DONE_FALLBACK_TO_PLANNED", True)

    # When False, drag-and-drop moves are limited to the same ISO week.
    ALLOW_CROSS_WEEK_MOVES = _env_flag("ALLOW_CROSS_WEEK_MOVES", True)

    # Weekly goals used when the profile has no planning prefs
    DEFAULT_GOAL_MINUTES = 300
    DEFAULT_GOAL_WORKOUTS = 4


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-at-least-32-bytes"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "WARNING"
