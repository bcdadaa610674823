"""Storage ports used by the service layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Mapping, Sequence

from models.password_reset_token import PasswordResetToken
from models.post import Post
from models.user import User


class AbstractUserStore(ABC):
    """Interface for persisting users."""

    @abstractmethod
    def create(self, *, name: str, email: str, password: str, role: str) -> User:
        """Persist a new user, hashing the given password."""

    @abstractmethod
    def get(self, user_id: int) -> User | None:
        """Return the user with the given id, if any."""

    @abstractmethod
    def find_by_email(self, email: str) -> User | None:
        """Case-insensitive lookup by email."""

    @abstractmethod
    def search_by_name(self, name: str) -> Sequence[User]:
        """Return users whose name contains the given text."""

    @abstractmethod
    def list_all(self) -> Sequence[User]:
        """Return every user."""

    @abstractmethod
    def update(self, user: User, changes: Mapping[str, Any]) -> User:
        """Apply the given attribute changes and persist them."""

    @abstractmethod
    def set_password(self, user: User, password: str) -> None:
        """Re-hash and store a new password."""

    @abstractmethod
    def delete(self, user_id: int) -> int:
        """Delete the user and everything they own; return rows removed."""


class AbstractResetTokenStore(ABC):
    """Interface for persisting password reset tokens."""

    @abstractmethod
    def replace_for_user(
        self, user_id: int, token: str, expires_at: datetime
    ) -> PasswordResetToken:
        """Drop the user's previous tokens and store the new one."""

    @abstractmethod
    def find(self, token: str) -> PasswordResetToken | None:
        """Return the stored record for the token, if any."""

    @abstractmethod
    def delete(self, token: str) -> int:
        """Delete the token; return rows removed."""


class AbstractPostStore(ABC):
    """Interface for persisting posts."""

    @abstractmethod
    def create(self, *, author_id: int, **fields: Any) -> Post:
        """Persist a new post."""

    @abstractmethod
    def get(self, post_id: int, *, with_author: bool = False) -> Post | None:
        """Return the post, optionally with its author loaded."""

    @abstractmethod
    def page(
        self,
        *,
        page: int,
        limit: int,
        author_id: int | None = None,
        title: str | None = None,
        with_author: bool = False,
    ) -> tuple[list[Post], int]:
        """Return one page of posts, newest first, and the total match count."""

    @abstractmethod
    def update(self, post: Post, changes: Mapping[str, Any]) -> Post:
        """Apply the given attribute changes and persist them."""

    @abstractmethod
    def delete_owned(self, post_id: int, author_id: int) -> int:
        """Delete the post only if it belongs to the author; return rows removed."""

    @abstractmethod
    def increment(self, post_id: int, counter: str) -> int | None:
        """Add one to a counter; return the new value or None if the post is missing."""

    @abstractmethod
    def aggregate(self, author_id: int, since: datetime | None = None) -> dict:
        """Return post count and like/comment sums for the author's posts."""
