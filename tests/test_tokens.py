"""Tests for purpose-tagged token issuance and verification."""

from __future__ import annotations

import time
from datetime import timedelta

import pytest

from conftest import auth_headers, create_user
from services.container import get_services
from services.tokens import (
    EMAIL_VERIFICATION,
    PASSWORD_RESET,
    SESSION,
    ExpiredToken,
    MalformedToken,
    TokenError,
    WrongTokenPurpose,
)
from utils.errors import ErrorKind


def test_token_round_trip_returns_payload(app):
    with app.app_context():
        tokens = get_services().tokens
        token = tokens.issue(EMAIL_VERIFICATION, {"userId": 7, "email": "a@example.com"})

        payload = tokens.verify(token, EMAIL_VERIFICATION)

    assert payload == {"userId": 7, "email": "a@example.com"}


def test_token_valid_before_ttl_and_expired_after(app):
    with app.app_context():
        tokens = get_services().tokens
        token = tokens.issue(PASSWORD_RESET, {"email": "a@example.com"}, ttl=timedelta(seconds=2))

        assert tokens.verify(token, PASSWORD_RESET)["email"] == "a@example.com"

        # exp is stored in whole seconds
        time.sleep(3)

        with pytest.raises(ExpiredToken):
            tokens.verify(token, PASSWORD_RESET)


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c"])
def test_malformed_tokens_are_rejected(app, garbage):
    with app.app_context():
        with pytest.raises(MalformedToken):
            get_services().tokens.verify(garbage, SESSION)


def test_tampered_signature_is_rejected(app):
    with app.app_context():
        tokens = get_services().tokens
        token = tokens.issue(PASSWORD_RESET, {"email": "a@example.com"})
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(MalformedToken):
            tokens.verify(tampered, PASSWORD_RESET)


def test_wrong_purpose_is_rejected(app):
    with app.app_context():
        tokens = get_services().tokens
        token = tokens.issue(PASSWORD_RESET, {"email": "a@example.com"})

        with pytest.raises(WrongTokenPurpose) as excinfo:
            tokens.verify(token, EMAIL_VERIFICATION)

    assert isinstance(excinfo.value, TokenError)
    assert excinfo.value.kind is ErrorKind.UNAUTHORIZED


def test_unknown_purpose_cannot_be_issued(app):
    with app.app_context():
        with pytest.raises(ValueError):
            get_services().tokens.issue("api_key", {"id": 1})


def test_session_token_carries_identity_claims(app):
    user_id = create_user(app, "claims@example.com", name="Claire Doe", role="admin")

    with app.app_context():
        services = get_services()
        user = services.user_store.get(user_id)
        token = services.tokens.issue_session(user)
        payload = services.tokens.verify(token, SESSION)

    assert payload == {
        "id": user_id,
        "email": "claims@example.com",
        "name": "Claire Doe",
        "role": "admin",
    }


def test_non_session_token_is_not_a_bearer_credential(app, client):
    user_id = create_user(app, "bearer@example.com")

    with app.app_context():
        services = get_services()
        token = services.tokens.issue_email_verification(services.user_store.get(user_id))

    response = client.get("/users/me", headers=auth_headers(token))

    assert response.status_code == 401
    assert response.get_json()["success"] is False


def test_expired_session_token_returns_401(app, client):
    create_user(app, "late@example.com")

    with app.app_context():
        token = get_services().tokens.issue(
            SESSION,
            {"id": 1, "email": "late@example.com", "name": "Late", "role": "user"},
            ttl=timedelta(seconds=-1),
        )

    response = client.get("/users/me", headers=auth_headers(token))

    assert response.status_code == 401
    assert response.get_json()["message"] == "Token has expired"
