"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402
from services.container import get_services  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    MAIL_BACKEND = "console"
    FRONTEND_URL = "https://blog.example"
    RESET_PASSWORD_URL = "https://blog.example/reset-password"
    RATE_LIMIT = "1000 per minute"


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = create_app(_BaseTestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def db_session(app: Flask):
    """Yield the database session inside an application context."""

    with app.app_context():
        yield db.session


@pytest.fixture()
def mailer(app: Flask):
    """The console mailer; its outbox holds every email sent."""

    with app.app_context():
        return get_services().mailer


def create_user(
    app: Flask,
    email: str,
    password: str = "Passw0rdX",
    *,
    name: str = "Test User",
    role: str = "user",
    verified: bool = True,
    active: bool = True,
) -> int:
    """Persist a user directly and return its id."""

    with app.app_context():
        user = User(
            name=name,
            email=email.lower(),
            role=role,
            is_verified=verified,
            is_active=active,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.id


def login(client: FlaskClient, email: str, password: str = "Passw0rdX") -> str:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()["data"]["token"]


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
