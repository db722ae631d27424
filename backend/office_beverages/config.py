# backend/office_beverages/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _origins_env(name: str, default: str) -> set[str]:
    raw = os.environ.get(name, default)
    return {origin.strip() for origin in raw.split(",") if origin.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/beverages.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///beverages.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    PORT = _int_env("PORT", 3000)
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Bearer token lifetime (hours)
    SESSION_LIFETIME_HOURS = _int_env("SESSION_LIFETIME_HOURS", 24)

    # bcrypt cost factor
    BCRYPT_LOG_ROUNDS = _int_env("BCRYPT_LOG_ROUNDS", 12)

    # Non-cancelled orders one employee may place per calendar day
    MAX_ORDERS_PER_DAY = _int_env("MAX_ORDERS_PER_DAY", 3)

    CORS_ORIGINS = _origins_env(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
    )

    NOTIFICATION_QUEUE_SIZE = _int_env("NOTIFICATION_QUEUE_SIZE", 100)
    NOTIFICATION_KEEPALIVE_SECONDS = _int_env("NOTIFICATION_KEEPALIVE_SECONDS", 15)
