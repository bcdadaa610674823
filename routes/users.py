"""Users blueprint: search, profile and admin management."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from models.user import USER_ROLES
from services.container import get_services
from utils.authorization import ADMIN_ROLES, ALL_ROLES, authorize, current_principal
from utils.request_validation import email_errors, name_errors, parse_json_request

users_bp = Blueprint("users", __name__)


def _parse_bool(value):
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in {"1", "true", "yes", "y"}:
        return True
    if lowered in {"0", "false", "no", "n"}:
        return False
    return None


@users_bp.route("/search", methods=["GET"])
def search_users():
    users = get_services().users.search(request.args.get("name"))
    return jsonify(
        {
            "success": True,
            "message": "Search completed successfully",
            "data": {
                "users": [user.to_public_dict() for user in users],
                "count": len(users),
            },
        }
    )


@users_bp.route("/me", methods=["GET"])
@authorize(*ALL_ROLES)
def get_profile():
    user = get_services().users.get(current_principal().id)
    return jsonify(
        {
            "success": True,
            "message": "Profile retrieved successfully",
            "data": {"user": user.to_dict()},
        }
    )


@users_bp.route("/me", methods=["PUT"])
@authorize(*ALL_ROLES)
def update_profile():
    """Update the caller's name and profile image."""

    data = parse_json_request(request)
    if "name" in data:
        errors = name_errors(data.get("name"))
        if errors:
            raise BadRequest("; ".join(errors))

    user = get_services().users.update_profile(
        current_principal().id,
        {
            "name": (data.get("name") or "").strip(),
            "profile_image": data.get("profileImage"),
        },
    )
    return jsonify(
        {
            "success": True,
            "message": "Profile updated",
            "data": {"name": user.name, "profileImage": user.profile_image},
        }
    )


@users_bp.route("/<int:user_id>", methods=["GET"])
@authorize(*ALL_ROLES)
def get_user(user_id: int):
    user = get_services().users.get(user_id)
    return jsonify(
        {
            "success": True,
            "message": "User retrieved successfully",
            "data": {"user": user.to_public_dict()},
        }
    )


@users_bp.route("", methods=["GET"])
@authorize(*ADMIN_ROLES)
def list_users():
    users = get_services().users.list_all()
    return jsonify(
        {
            "success": True,
            "message": "Users retrieved successfully",
            "data": {"users": [user.to_dict() for user in users]},
        }
    )


def _validate_admin_update(data: dict) -> dict:
    errors: list[str] = []
    changes: dict = {}

    if "name" in data:
        errors += name_errors(data.get("name"))
        changes["name"] = (data.get("name") or "").strip()
    if "email" in data:
        errors += email_errors(data.get("email"))
        changes["email"] = data.get("email")
    if "role" in data:
        if data.get("role") not in USER_ROLES:
            errors.append("role must be one of user, admin, superuser")
        changes["role"] = data.get("role")
    if "isActive" in data:
        parsed = _parse_bool(data.get("isActive"))
        if parsed is None:
            errors.append("isActive must be boolean")
        changes["is_active"] = parsed
    if "isVerified" in data:
        errors.append("isVerified can only change through email verification")
    if "profileImage" in data:
        changes["profile_image"] = data.get("profileImage")

    if errors:
        raise BadRequest("; ".join(errors))
    return changes


@users_bp.route("/<int:user_id>", methods=["PUT"])
@authorize(*ADMIN_ROLES)
def update_user(user_id: int):
    data = parse_json_request(request)
    user = get_services().users.update(user_id, _validate_admin_update(data))
    return jsonify(
        {
            "success": True,
            "message": "User updated successfully",
            "data": {"user": user.to_dict()},
        }
    )


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@authorize(*ADMIN_ROLES)
def delete_user(user_id: int):
    get_services().users.delete(user_id)
    return jsonify({"success": True, "message": "User deleted successfully"})
