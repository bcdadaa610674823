"""Tests covering registration, login, email verification and password reset."""

from __future__ import annotations

import re
from datetime import datetime, timedelta

import pytest
from flask.testing import FlaskClient

from conftest import create_user, login
from models import db
from models.password_reset_token import PasswordResetToken
from models.user import User
from services.container import get_services
from services.tokens import EMAIL_VERIFICATION, PASSWORD_RESET

PASSWORD = "Str0ngPass"


def _register(client: FlaskClient, email: str, path: str = "/auth/register", **extra):
    payload = {"name": "Jane Doe", "email": email, "password": PASSWORD}
    payload.update(extra)
    return client.post(path, json=payload)


def _token_from(message, route: str) -> str:
    match = re.search(rf"/{route}/(\S+)", message.body)
    assert match, message.body
    return match.group(1)


def test_register_creates_unverified_user_and_sends_link(app, client, mailer):
    response = _register(client, "Jane@Example.com")

    assert response.status_code == 201
    data = response.get_json()
    assert data["success"] is True
    assert data["data"]["user"] == {
        "id": data["data"]["user"]["id"],
        "name": "Jane Doe",
        "email": "jane@example.com",
        "role": "user",
    }
    assert "password" not in str(data).lower()

    with app.app_context():
        user = User.query.filter_by(email="jane@example.com").one()
        assert user.is_verified is False
        assert user.is_active is True
        assert user.password_hash != PASSWORD

    message = mailer.outbox[-1]
    assert message.to == "jane@example.com"
    assert "https://blog.example/verify-email/" in message.body


def test_duplicate_email_in_any_case_conflicts(client):
    first = _register(client, "dup@example.com")
    second = _register(client, "DUP@Example.COM")

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.get_json()["success"] is False


@pytest.mark.parametrize(
    "path, role, status_code",
    [
        ("/auth/register", "admin", 403),
        ("/auth/register", "superuser", 403),
        ("/auth/register", "user", 201),
        ("/auth/register/admin", "user", 403),
        ("/auth/register/admin", None, 403),
        ("/auth/register/admin", "admin", 201),
        ("/auth/register/superuser", "admin", 403),
        ("/auth/register/superuser", "superuser", 201),
    ],
)
def test_registration_role_is_fixed_by_endpoint(client, path, role, status_code):
    extra = {"role": role} if role else {}

    response = _register(client, "role@example.com", path=path, **extra)

    assert response.status_code == status_code
    if status_code == 201:
        assert response.get_json()["data"]["user"]["role"] == (role or "user")


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "x@example.com", "password": PASSWORD},
        {"name": "Jane Doe", "email": "not-an-email", "password": PASSWORD},
        {"name": "Jane Doe", "email": "x@example.com", "password": "short"},
        {"name": "Jane Doe", "email": "x@example.com", "password": "alllowercase1"},
        {"name": "J4ne", "email": "x@example.com", "password": PASSWORD},
        {"name": "Jane Doe", "email": "x@example.com", "password": PASSWORD, "role": "root"},
    ],
)
def test_register_validation(client, payload):
    response = client.post("/auth/register", json=payload)

    assert response.status_code == 400


def test_login_requires_verification(app, client):
    create_user(app, "pending@example.com", PASSWORD, verified=False)

    response = client.post(
        "/auth/login", json={"email": "pending@example.com", "password": PASSWORD}
    )

    assert response.status_code == 403
    assert "verify" in response.get_json()["message"]


def test_login_rejects_deactivated_account(app, client):
    create_user(app, "gone@example.com", PASSWORD, active=False)

    response = client.post(
        "/auth/login", json={"email": "gone@example.com", "password": PASSWORD}
    )

    assert response.status_code == 403
    assert "deactivated" in response.get_json()["message"]


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"email": "j1@example.com"}, 400),
        ({"password": PASSWORD}, 400),
        ({"email": "j1@example.com", "password": "wrong"}, 401),
        ({"email": "nobody@example.com", "password": PASSWORD}, 401),
    ],
)
def test_login_validation(app, client, payload, status_code):
    create_user(app, "j1@example.com", PASSWORD)

    response = client.post("/auth/login", json=payload)

    assert response.status_code == status_code


def test_login_returns_session_token(app, client):
    user_id = create_user(app, "j1@example.com", PASSWORD, name="Jay One")

    response = client.post(
        "/auth/login", json={"email": "J1@EXAMPLE.com", "password": PASSWORD}
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["token"]
    assert data["user"] == {
        "id": user_id,
        "name": "Jay One",
        "email": "j1@example.com",
        "role": "user",
    }


def test_verify_email_flow(app, client, mailer):
    _register(client, "verify@example.com")
    token = _token_from(mailer.outbox[-1], "verify-email")

    response = client.post(f"/auth/verify-email/{token}")
    assert response.status_code == 200

    again = client.post(f"/auth/verify-email/{token}")
    assert again.status_code == 409

    with app.app_context():
        assert User.query.filter_by(email="verify@example.com").one().is_verified is True

    assert login(client, "verify@example.com", PASSWORD)


def test_verify_email_rejects_expired_and_foreign_tokens(app, client):
    user_id = create_user(app, "late@example.com", PASSWORD, verified=False)

    with app.app_context():
        tokens = get_services().tokens
        expired = tokens.issue(
            EMAIL_VERIFICATION,
            {"userId": user_id, "email": "late@example.com"},
            ttl=timedelta(seconds=-1),
        )
        reset = tokens.issue(PASSWORD_RESET, {"email": "late@example.com"})

    expired_response = client.post(f"/auth/verify-email/{expired}")
    assert expired_response.status_code == 401
    assert "expired" in expired_response.get_json()["message"]

    assert client.post(f"/auth/verify-email/{reset}").status_code == 401
    assert client.post("/auth/verify-email/garbage").status_code == 401


def test_verify_email_for_deleted_user_is_not_found(app, client):
    with app.app_context():
        token = get_services().tokens.issue(
            EMAIL_VERIFICATION, {"userId": 999, "email": "ghost@example.com"}
        )

    assert client.post(f"/auth/verify-email/{token}").status_code == 404


def test_forgot_password_unknown_email(client):
    response = client.post("/auth/forgot-password", json={"email": "who@example.com"})

    assert response.status_code == 404


def test_reset_password_flow(app, client, mailer):
    create_user(app, "reset@example.com", PASSWORD)

    response = client.post("/auth/forgot-password", json={"email": "Reset@example.com"})
    assert response.status_code == 200
    token = _token_from(mailer.outbox[-1], "reset-password")
    assert mailer.outbox[-1].to == "reset@example.com"

    reset = client.post(
        f"/auth/reset-password/{token}", json={"newPassword": "N3wPassword"}
    )
    assert reset.status_code == 200

    old_login = client.post(
        "/auth/login", json={"email": "reset@example.com", "password": PASSWORD}
    )
    assert old_login.status_code == 401
    assert login(client, "reset@example.com", "N3wPassword")

    reused = client.post(
        f"/auth/reset-password/{token}", json={"newPassword": "An0therPass"}
    )
    assert reused.status_code == 401

    with app.app_context():
        assert PasswordResetToken.query.count() == 0


def test_new_reset_request_supersedes_previous_token(app, client, mailer):
    user_id = create_user(app, "twice@example.com", PASSWORD)

    client.post("/auth/forgot-password", json={"email": "twice@example.com"})
    first = _token_from(mailer.outbox[-1], "reset-password")
    client.post("/auth/forgot-password", json={"email": "twice@example.com"})
    second = _token_from(mailer.outbox[-1], "reset-password")

    with app.app_context():
        records = PasswordResetToken.query.filter_by(user_id=user_id).all()
        assert [record.token for record in records] == [second]

    stale = client.post(f"/auth/reset-password/{first}", json={"newPassword": "N3wPassword"})
    assert stale.status_code == 401

    fresh = client.post(f"/auth/reset-password/{second}", json={"newPassword": "N3wPassword"})
    assert fresh.status_code == 200


def test_reset_rejects_record_past_its_expiry(app, client, mailer):
    create_user(app, "late@example.com", PASSWORD)
    client.post("/auth/forgot-password", json={"email": "late@example.com"})
    token = _token_from(mailer.outbox[-1], "reset-password")

    with app.app_context():
        record = PasswordResetToken.query.filter_by(token=token).one()
        record.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.session.commit()

    response = client.post(f"/auth/reset-password/{token}", json={"newPassword": "N3wPassword"})

    assert response.status_code == 401
    assert "expired" in response.get_json()["message"]
    assert login(client, "late@example.com", PASSWORD)
    with app.app_context():
        assert PasswordResetToken.query.count() == 0


def test_reset_password_validation_and_missing_user(app, client):
    with app.app_context():
        token = get_services().tokens.issue(PASSWORD_RESET, {"email": "ghost@example.com"})

    weak = client.post(f"/auth/reset-password/{token}", json={"newPassword": "weak"})
    assert weak.status_code == 400

    missing = client.post(f"/auth/reset-password/{token}", json={"newPassword": "N3wPassword"})
    assert missing.status_code == 404


def test_reset_does_not_revoke_existing_sessions(app, client):
    create_user(app, "keep@example.com", PASSWORD)
    session = login(client, "keep@example.com", PASSWORD)

    client.post("/auth/forgot-password", json={"email": "keep@example.com"})
    with app.app_context():
        record = PasswordResetToken.query.one()
        token = record.token

    client.post(f"/auth/reset-password/{token}", json={"newPassword": "N3wPassword"})

    response = client.get("/users/me", headers={"Authorization": f"Bearer {session}"})
    assert response.status_code == 200
