"""Application configuration module."""

import os
from datetime import timedelta


def _hours(name: str, default: int) -> timedelta:
    return timedelta(hours=int(os.getenv(name, default)))


class Config:
    """Base configuration for the Flask application."""

    # Core
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    # No default: tokens cannot be signed or verified without it.
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY") or os.getenv("JWT_SECRET")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///blog.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Tokens
    SESSION_TOKEN_TTL = _hours("SESSION_TOKEN_TTL_HOURS", 2)
    VERIFY_TOKEN_TTL = _hours("VERIFY_TOKEN_TTL_HOURS", 24)
    RESET_TOKEN_TTL = _hours("RESET_TOKEN_TTL_HOURS", 1)
    JWT_ACCESS_TOKEN_EXPIRES = SESSION_TOKEN_TTL

    # Links embedded in outgoing email
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
    RESET_PASSWORD_URL = os.getenv(
        "RESET_PASSWORD_URL", f"{FRONTEND_URL}/reset-password"
    )

    # Mail
    MAIL_BACKEND = os.getenv(
        "MAIL_BACKEND", "console" if os.getenv("FLASK_DEBUG") else "smtp"
    )
    MAIL_OUTBOX_SIZE = int(os.getenv("MAIL_OUTBOX_SIZE", 100))
    MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.getenv("MAIL_PORT", 587))
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_USE_TLS = os.getenv("MAIL_USE_TLS", "true").lower() in {"1", "true", "yes"}
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "no-reply@localhost")

    # Pagination
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", 100))

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Rate limiting
    RATE_LIMIT = os.getenv("RATE_LIMIT", "60 per minute")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_KEY_PREFIX = os.getenv("RATELIMIT_KEY_PREFIX", "")
