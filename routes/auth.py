"""Authentication blueprint: registration, login, verification and password reset."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from services.container import get_services
from utils.request_validation import (
    email_errors,
    parse_json_request,
    password_errors,
    validate_registration,
)

auth_bp = Blueprint("auth", __name__)

REGISTRATION_MESSAGES = {
    "user": (
        "User created successfully. "
        "Please check your email and verify your account."
    ),
    "admin": "Admin created successfully. Please check your email and verify the account.",
    "superuser": (
        "Superuser created successfully. Please check your email and verify the account."
    ),
}


def _register(endpoint_role: str) -> tuple:
    payload = validate_registration(parse_json_request(request))
    user = get_services().auth.register(
        name=payload["name"],
        email=payload["email"],
        password=payload["password"],
        requested_role=payload["role"],
        endpoint_role=endpoint_role,
    )
    return (
        jsonify(
            {
                "success": True,
                "message": REGISTRATION_MESSAGES[endpoint_role],
                "data": {"user": user.to_public_dict()},
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Self-service registration; always creates a ``user``."""
    return _register("user")


@auth_bp.route("/register/admin", methods=["POST"])
def register_admin() -> tuple:
    """Register an admin; the body must request the ``admin`` role."""
    return _register("admin")


@auth_bp.route("/register/superuser", methods=["POST"])
def register_superuser() -> tuple:
    """Register a superuser; the body must request the ``superuser`` role."""
    return _register("superuser")


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a session token."""
    payload = parse_json_request(request)
    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password") or ""

    if not email or not password:
        raise BadRequest("Email and password are required.")

    user, token = get_services().auth.login(email, password)
    return (
        jsonify(
            {
                "success": True,
                "message": "Login successful",
                "data": {"user": user.to_public_dict(), "token": token},
            }
        ),
        HTTPStatus.OK,
    )


@auth_bp.route("/verify-email/<token>", methods=["POST"])
def verify_email(token: str) -> tuple:
    get_services().auth.verify_email(token)
    return (
        jsonify({"success": True, "message": "Email verified successfully"}),
        HTTPStatus.OK,
    )


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password() -> tuple:
    payload = parse_json_request(request)
    errors = email_errors(payload.get("email"))
    if errors:
        raise BadRequest("; ".join(errors))

    get_services().auth.forgot_password(payload["email"].strip().lower())
    return (
        jsonify(
            {
                "success": True,
                "message": (
                    "Password reset link sent to your email. "
                    "The link will expire in 1 hour."
                ),
            }
        ),
        HTTPStatus.OK,
    )


@auth_bp.route("/reset-password/<token>", methods=["POST"])
def reset_password(token: str) -> tuple:
    payload = parse_json_request(request)
    errors = password_errors(payload.get("newPassword"), field="newPassword")
    if errors:
        raise BadRequest("; ".join(errors))

    get_services().auth.reset_password(token, payload["newPassword"])
    return (
        jsonify({"success": True, "message": "Password reset successfully"}),
        HTTPStatus.OK,
    )
