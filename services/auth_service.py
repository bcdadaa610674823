"""Registration, login, email verification and password reset."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from models.user import User
from storage.abstract_storage import AbstractResetTokenStore, AbstractUserStore
from utils.errors import ServiceError
from services.mailer import Mailer
from services.tokens import (
    EMAIL_VERIFICATION,
    PASSWORD_RESET,
    ExpiredToken,
    TokenError,
    TokenService,
)

logger = logging.getLogger(__name__)

SELF_SERVICE_ROLE = "user"


class AuthService:
    """Authentication flows over the credential store."""

    def __init__(
        self,
        users: AbstractUserStore,
        reset_tokens: AbstractResetTokenStore,
        tokens: TokenService,
        mailer: Mailer,
        *,
        frontend_url: str,
        reset_password_url: str,
        reset_token_ttl: timedelta = timedelta(hours=1),
    ):
        self.users = users
        self.reset_tokens = reset_tokens
        self.tokens = tokens
        self.mailer = mailer
        self.frontend_url = frontend_url.rstrip("/")
        self.reset_password_url = reset_password_url.rstrip("/")
        self.reset_token_ttl = reset_token_ttl

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        requested_role: str | None = None,
        endpoint_role: str = SELF_SERVICE_ROLE,
    ) -> User:
        """Create an unverified account with the role the endpoint allows."""

        requested = (requested_role or "").strip().lower()
        if endpoint_role == SELF_SERVICE_ROLE:
            if requested and requested != SELF_SERVICE_ROLE:
                raise ServiceError.forbidden("Only user registration allowed here.")
        elif requested != endpoint_role:
            raise ServiceError.forbidden(
                f"Only {endpoint_role} registration allowed here."
            )

        if self.users.find_by_email(email) is not None:
            raise ServiceError.conflict("User with this email already exists")

        user = self.users.create(
            name=name, email=email, password=password, role=endpoint_role
        )
        logger.info("Registered user %s with role %s", user.id, user.role)

        token = self.tokens.issue_email_verification(user)
        self.mailer.send_verification(
            user.email, f"{self.frontend_url}/verify-email/{token}"
        )
        return user

    def login(self, email: str, password: str) -> tuple[User, str]:
        """Return the user and a fresh session token."""

        user = self.users.find_by_email(email)
        if user is None or not user.check_password(password):
            raise ServiceError.unauthorized("Invalid email or password")

        if not user.is_verified:
            raise ServiceError.forbidden("Please verify your email before logging in")
        if not user.is_active:
            raise ServiceError.forbidden("Your account has been deactivated")

        logger.info("User %s logged in", user.id)
        return user, self.tokens.issue_session(user)

    def verify_email(self, token: str) -> User:
        try:
            payload = self.tokens.verify(token, EMAIL_VERIFICATION)
        except ExpiredToken as exc:
            raise ServiceError.unauthorized(
                "Verification token has expired. "
                "Please request a new verification email."
            ) from exc
        except TokenError as exc:
            raise ServiceError.unauthorized(
                "Invalid verification token. Please request a new verification email."
            ) from exc

        try:
            user_id = int(payload["userId"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ServiceError.unauthorized("Invalid verification token.") from exc

        user = self.users.get(user_id)
        if user is None:
            raise ServiceError.not_found("User not found")
        if user.is_verified:
            raise ServiceError.conflict("Email is already verified")

        user = self.users.update(user, {"is_verified": True})
        logger.info("User %s verified their email", user.id)
        return user

    def forgot_password(self, email: str) -> None:
        """Issue a reset token, superseding any earlier one, and email the link."""

        user = self.users.find_by_email(email)
        if user is None:
            raise ServiceError.not_found("No user found with that email address")

        token = self.tokens.issue_password_reset(user.email)
        self.reset_tokens.replace_for_user(
            user.id, token, datetime.utcnow() + self.reset_token_ttl
        )
        self.mailer.send_password_reset(user.email, f"{self.reset_password_url}/{token}")
        logger.info("Password reset requested for user %s", user.id)

    def reset_password(self, token: str, new_password: str) -> User:
        """Replace the password; existing session tokens stay valid until expiry."""

        try:
            payload = self.tokens.verify(token, PASSWORD_RESET)
        except ExpiredToken as exc:
            raise ServiceError.unauthorized(
                "Password reset link has expired. Please request a new one."
            ) from exc
        except TokenError as exc:
            raise ServiceError.unauthorized(
                "Invalid reset token. Please request a new password reset link."
            ) from exc

        user = self.users.find_by_email(payload.get("email") or "")
        if user is None:
            raise ServiceError.not_found("User not found")

        record = self.reset_tokens.find(token)
        if record is None or record.user_id != user.id:
            raise ServiceError.unauthorized(
                "This reset link has already been used or was replaced by a newer one."
            )
        if record.is_expired():
            self.reset_tokens.delete(token)
            raise ServiceError.unauthorized(
                "Password reset link has expired. Please request a new one."
            )

        self.users.set_password(user, new_password)
        self.reset_tokens.delete(token)
        logger.info("Password reset for user %s", user.id)
        return user
