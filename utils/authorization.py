"""Role and ownership gates for protected views."""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask_jwt_extended import get_jwt, verify_jwt_in_request

from services.container import get_services
from utils.errors import ServiceError

ALL_ROLES = ("user", "admin", "superuser")
ADMIN_ROLES = ("admin", "superuser")


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as carried by the session token."""

    id: int
    email: str
    name: str
    role: str


def current_principal() -> Principal | None:
    """Return the principal attached to the current request, if any."""

    verify_jwt_in_request(optional=True)
    claims = get_jwt()
    if not claims:
        return None
    try:
        return Principal(
            id=int(claims["id"]),
            email=claims["email"],
            name=claims["name"],
            role=claims["role"],
        )
    except (KeyError, TypeError, ValueError):
        return None


def authorize(*allowed_roles: str):
    """Require a session whose role is one of ``allowed_roles``.

    With no roles given, any authenticated principal passes.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            principal = current_principal()
            if principal is None:
                raise ServiceError.unauthorized("Not authenticated")
            if allowed_roles and principal.role not in allowed_roles:
                raise ServiceError.forbidden("This user has insufficient permission")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def is_author(view):
    """Require the principal to be the author of the ``post_id`` in the URL.

    Stack it below :func:`authorize`. Admins get no exemption.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        principal = current_principal()
        if principal is None:
            raise ServiceError.unauthorized("Not authenticated")

        post = get_services().post_store.get(kwargs["post_id"])
        if post is None:
            raise ServiceError.not_found("Post not found")
        if str(post.author_id) != str(principal.id):
            raise ServiceError.forbidden("Not authorized, not the author")
        return view(*args, **kwargs)

    return wrapper
