"""Profile and admin user management."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from models.user import User
from storage.abstract_storage import AbstractUserStore
from utils.errors import ServiceError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "profile_image")
ADMIN_FIELDS = ("name", "email", "role", "is_active", "profile_image")


class UserService:
    def __init__(self, users: AbstractUserStore):
        self.users = users

    def get(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise ServiceError.not_found("User not found")
        return user

    def search(self, name: str | None) -> Sequence[User]:
        name = (name or "").strip()
        if not name:
            return []
        return self.users.search_by_name(name)

    def list_all(self) -> Sequence[User]:
        return self.users.list_all()

    def update_profile(self, user_id: int, changes: Mapping[str, Any]) -> User:
        user = self.get(user_id)
        values = {key: changes[key] for key in PROFILE_FIELDS if changes.get(key)}
        if values:
            user = self.users.update(user, values)
        return user

    def update(self, user_id: int, changes: Mapping[str, Any]) -> User:
        """Admin update; a new email must not belong to another account."""

        user = self.get(user_id)
        values = {key: changes[key] for key in ADMIN_FIELDS if key in changes}

        email = values.get("email")
        if email is not None:
            email = email.strip().lower()
            values["email"] = email
            if email != user.email:
                other = self.users.find_by_email(email)
                if other is not None and other.id != user.id:
                    raise ServiceError.conflict("Email is already in use")

        if values:
            user = self.users.update(user, values)
            logger.info("User %s updated fields %s", user_id, sorted(values))
        return user

    def delete(self, user_id: int) -> None:
        if not self.users.delete(user_id):
            raise ServiceError.not_found("User not found")
        logger.info("User %s deleted", user_id)
