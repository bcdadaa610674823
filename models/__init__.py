"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .password_reset_token import PasswordResetToken  # noqa: E402,F401
from .post import Post  # noqa: E402,F401

__all__ = [
    "db",
    "User",
    "PasswordResetToken",
    "Post",
]
