"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

import re
from typing import Iterable, Mapping

from flask import Request
from werkzeug.exceptions import BadRequest

from models.post import MEDIA_TYPES, POST_CATEGORIES, POST_STATUSES
from models.user import USER_ROLES

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

MAX_EMAIL_LENGTH = 100
MAX_TITLE_LENGTH = 255
MAX_BODY_LENGTH = 10000


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if not data.get(key)]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(
                    ", ".join(sorted(missing))
                )
            )

    return data


def _check(errors: list[str], condition: bool, message: str) -> None:
    if not condition:
        errors.append(message)


def email_errors(value) -> list[str]:
    errors: list[str] = []
    if not isinstance(value, str) or not value.strip():
        return ["email is required"]
    _check(errors, bool(EMAIL_PATTERN.match(value.strip())), "Invalid email format")
    _check(
        errors,
        len(value.strip()) <= MAX_EMAIL_LENGTH,
        f"Email must be less than {MAX_EMAIL_LENGTH} characters",
    )
    return errors


def password_errors(value, field: str = "password") -> list[str]:
    errors: list[str] = []
    if not isinstance(value, str) or not value:
        return [f"{field} is required"]
    _check(errors, len(value) >= 8, "Password must be at least 8 characters")
    _check(errors, len(value) <= 255, "Password must be less than 255 characters")
    _check(
        errors,
        bool(PASSWORD_PATTERN.match(value)),
        "Password must contain at least one lowercase letter, "
        "one uppercase letter, and one number",
    )
    return errors


def name_errors(value) -> list[str]:
    errors: list[str] = []
    if not isinstance(value, str) or not value.strip():
        return ["name is required"]
    name = value.strip()
    _check(errors, len(name) >= 2, "Name must be at least 2 characters")
    _check(errors, len(name) <= 100, "Name must be less than 100 characters")
    _check(errors, bool(NAME_PATTERN.match(name)), "Name can only contain letters and spaces")
    return errors


def validate_registration(data: Mapping) -> dict:
    """Return cleaned registration fields or raise ``BadRequest``."""

    errors = name_errors(data.get("name"))
    errors += email_errors(data.get("email"))
    errors += password_errors(data.get("password"))
    role = data.get("role")
    if role is not None and role not in USER_ROLES:
        errors.append("role must be one of user, admin, superuser")
    if errors:
        raise BadRequest("; ".join(errors))

    return {
        "name": data["name"].strip(),
        "email": data["email"].strip().lower(),
        "password": data["password"],
        "role": role,
    }


def validate_post_payload(data: Mapping, partial: bool = False) -> dict:
    """Return cleaned post fields or raise ``BadRequest``.

    With ``partial`` set only the supplied fields are checked, but at least
    one editable field must be present.
    """

    errors: list[str] = []
    values: dict = {}

    for field, max_length in (("title", MAX_TITLE_LENGTH), ("body", MAX_BODY_LENGTH)):
        if field not in data:
            if not partial:
                errors.append(f"{field} is required")
            continue
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{field} is required")
            continue
        value = value.strip()
        if len(value) > max_length:
            errors.append(f"{field} must be less than {max_length} characters")
            continue
        values[field] = value

    category = data.get("category")
    if category is not None:
        if category not in POST_CATEGORIES:
            errors.append("category must be one of Tech, Development, Trends")
        else:
            values["category"] = category

    status = data.get("status")
    if status is not None:
        if status not in POST_STATUSES:
            errors.append("status must be one of posted, draft")
        else:
            values["status"] = status

    if "media" in data:
        media = data.get("media")
        if media is None:
            values["media"] = None
        elif (
            not isinstance(media, dict)
            or media.get("type") not in MEDIA_TYPES
            or not isinstance(media.get("url"), str)
            or not media["url"].strip()
        ):
            errors.append("media must have a type of image, video or document and a url")
        else:
            values["media"] = {"type": media["type"], "url": media["url"].strip()}

    if partial and not values and not errors:
        errors.append("At least one of title, body, category, status or media must be provided")

    if errors:
        raise BadRequest("; ".join(errors))
    return values


def parse_positive_int(raw, field: str, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise BadRequest(f"{field} must be a positive integer")
    if value < 1:
        raise BadRequest(f"{field} must be a positive integer")
    return value


def parse_pagination(args: Mapping, default_limit: int = 10, max_limit: int = 100) -> tuple[int, int]:
    """Read ``page`` and ``limit`` query parameters."""

    page = parse_positive_int(args.get("page"), "page", 1)
    limit = parse_positive_int(args.get("limit"), "limit", default_limit)
    return page, min(limit, max_limit)
