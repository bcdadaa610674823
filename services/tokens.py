"""Signed, time-limited tokens for sessions, email verification and password reset."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping

import jwt
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from utils.errors import ErrorKind, ServiceError

SESSION = "session"
EMAIL_VERIFICATION = "email_verification"
PASSWORD_RESET = "password_reset"
TOKEN_PURPOSES = (SESSION, EMAIL_VERIFICATION, PASSWORD_RESET)

PURPOSE_CLAIM = "purpose"

# Claims added by the JWT library itself; never part of a token payload.
_REGISTERED_CLAIMS = {
    "exp", "iat", "nbf", "jti", "sub", "aud", "iss", "type", "fresh", "csrf"
}


class TokenError(ServiceError):
    """A token could not be redeemed."""

    kind = ErrorKind.UNAUTHORIZED


class ExpiredToken(TokenError):
    pass


class MalformedToken(TokenError):
    pass


class WrongTokenPurpose(TokenError):
    pass


class TokenService:
    """Issue and verify purpose-tagged JWTs.

    Signing uses the application's ``JWT_SECRET_KEY`` through
    Flask-JWT-Extended, so both methods need an application context.
    """

    def __init__(self, ttls: Mapping[str, timedelta]):
        self.ttls = dict(ttls)

    def issue(
        self,
        purpose: str,
        payload: Mapping[str, Any],
        ttl: timedelta | None = None,
        *,
        subject: str | None = None,
    ) -> str:
        if purpose not in TOKEN_PURPOSES:
            raise ValueError(f"Unknown token purpose: {purpose}")

        claims = dict(payload)
        claims[PURPOSE_CLAIM] = purpose
        identity = subject if subject is not None else str(
            payload.get("id") or payload.get("userId") or payload.get("email")
        )
        return create_access_token(
            identity=identity,
            additional_claims=claims,
            expires_delta=ttl if ttl is not None else self.ttls[purpose],
        )

    def verify(self, token: str, expected_purpose: str) -> dict:
        """Return the payload of a valid token or raise a :class:`TokenError`."""

        try:
            decoded = decode_token(token)
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredToken("Token has expired") from exc
        except (jwt.InvalidTokenError, JWTExtendedException) as exc:
            raise MalformedToken("Token is invalid") from exc

        purpose = decoded.get(PURPOSE_CLAIM)
        if purpose is not None and purpose != expected_purpose:
            raise WrongTokenPurpose(f"Token cannot be used for {expected_purpose}")

        return {
            key: value
            for key, value in decoded.items()
            if key not in _REGISTERED_CLAIMS and key != PURPOSE_CLAIM
        }

    def issue_session(self, user) -> str:
        return self.issue(
            SESSION,
            {"id": user.id, "email": user.email, "name": user.name, "role": user.role},
            subject=str(user.id),
        )

    def issue_email_verification(self, user) -> str:
        return self.issue(
            EMAIL_VERIFICATION,
            {"userId": user.id, "email": user.email},
            subject=str(user.id),
        )

    def issue_password_reset(self, email: str) -> str:
        return self.issue(PASSWORD_RESET, {"email": email}, subject=email)
