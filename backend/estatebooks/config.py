# backend/estatebooks/config.py
from __future__ import annotations
import os


def _env_list(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/estatebooks.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location, e.g. a Postgres URL
        "sqlite:///estatebooks.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" persists through SQLAlchemy; "memory" keeps records in process (tests/demo)
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "sql")

    # Appended to money values in report rows
    CURRENCY_LABEL = os.environ.get("CURRENCY_LABEL", "EGP")

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
    SESSION_ABSOLUTE_HOURS = int(os.environ.get("SESSION_ABSOLUTE_HOURS", "24"))
    SESSION_IDLE_HOURS = int(os.environ.get("SESSION_IDLE_HOURS", "2"))

    CORS_ALLOWED_ORIGINS = _env_list(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:8080,http://127.0.0.1:8080,http://localhost:5173,http://127.0.0.1:5173",
    )

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
