"""SQLAlchemy implementations of the storage ports."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from models import db
from models.password_reset_token import PasswordResetToken
from models.post import Post
from models.user import User
from utils.errors import ServiceError

from .abstract_storage import (
    AbstractPostStore,
    AbstractResetTokenStore,
    AbstractUserStore,
)

POST_COUNTERS = ("likes", "comments")


def _commit_or_conflict(message: str) -> None:
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ServiceError.conflict(message) from exc


class SQLUserStore(AbstractUserStore):
    """Users stored through the Flask-SQLAlchemy session."""

    def create(self, *, name: str, email: str, password: str, role: str) -> User:
        user = User(name=name, email=email.strip().lower(), role=role)
        user.set_password(password)
        db.session.add(user)
        _commit_or_conflict("User with this email already exists")
        return user

    def get(self, user_id: int) -> User | None:
        return db.session.get(User, user_id)

    def find_by_email(self, email: str) -> User | None:
        normalized = (email or "").strip().lower()
        return User.query.filter(func.lower(User.email) == normalized).first()

    def search_by_name(self, name: str) -> Sequence[User]:
        like = f"%{name.lower()}%"
        return (
            User.query.filter(func.lower(User.name).like(like))
            .order_by(User.name.asc(), User.id.asc())
            .all()
        )

    def list_all(self) -> Sequence[User]:
        return User.query.order_by(User.id.asc()).all()

    def update(self, user: User, changes: Mapping[str, Any]) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        _commit_or_conflict("Email is already in use")
        return user

    def set_password(self, user: User, password: str) -> None:
        user.set_password(password)
        db.session.commit()

    def delete(self, user_id: int) -> int:
        user = db.session.get(User, user_id)
        if user is None:
            return 0
        # ORM delete so posts and reset tokens cascade on every backend.
        db.session.delete(user)
        db.session.commit()
        return 1


class SQLResetTokenStore(AbstractResetTokenStore):
    """Password reset tokens stored through the Flask-SQLAlchemy session."""

    def replace_for_user(
        self, user_id: int, token: str, expires_at: datetime
    ) -> PasswordResetToken:
        PasswordResetToken.query.filter_by(user_id=user_id).delete(
            synchronize_session=False
        )
        record = PasswordResetToken(user_id=user_id, token=token, expires_at=expires_at)
        db.session.add(record)
        db.session.commit()
        return record

    def find(self, token: str) -> PasswordResetToken | None:
        return PasswordResetToken.query.filter_by(token=token).first()

    def delete(self, token: str) -> int:
        removed = PasswordResetToken.query.filter_by(token=token).delete(
            synchronize_session=False
        )
        db.session.commit()
        return removed


class SQLPostStore(AbstractPostStore):
    """Posts stored through the Flask-SQLAlchemy session."""

    def create(self, *, author_id: int, **fields: Any) -> Post:
        post = Post(author_id=author_id, **fields)
        db.session.add(post)
        db.session.commit()
        return post

    def get(self, post_id: int, *, with_author: bool = False) -> Post | None:
        if with_author:
            return (
                Post.query.options(joinedload(Post.author))
                .filter(Post.id == post_id)
                .first()
            )
        return db.session.get(Post, post_id)

    def page(
        self,
        *,
        page: int,
        limit: int,
        author_id: int | None = None,
        title: str | None = None,
        with_author: bool = False,
    ) -> tuple[list[Post], int]:
        query = Post.query
        if author_id is not None:
            query = query.filter(Post.author_id == author_id)
        if title:
            query = query.filter(func.lower(Post.title).like(f"%{title.lower()}%"))

        count = query.count()
        if with_author:
            query = query.options(joinedload(Post.author))
        items = (
            query.order_by(Post.created_at.desc(), Post.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, count

    def update(self, post: Post, changes: Mapping[str, Any]) -> Post:
        for field, value in changes.items():
            setattr(post, field, value)
        db.session.commit()
        return post

    def delete_owned(self, post_id: int, author_id: int) -> int:
        removed = Post.query.filter(
            Post.id == post_id, Post.author_id == author_id
        ).delete(synchronize_session=False)
        db.session.commit()
        return removed

    def increment(self, post_id: int, counter: str) -> int | None:
        if counter not in POST_COUNTERS:
            raise ValueError(f"Unknown post counter: {counter}")

        column = getattr(Post, counter)
        updated = Post.query.filter(Post.id == post_id).update(
            {column: column + 1}, synchronize_session=False
        )
        if not updated:
            db.session.rollback()
            return None
        db.session.commit()
        return db.session.execute(
            db.select(column).where(Post.id == post_id)
        ).scalar_one_or_none()

    def aggregate(self, author_id: int, since: datetime | None = None) -> dict:
        query = db.select(
            func.count(Post.id),
            func.coalesce(func.sum(Post.likes), 0),
            func.coalesce(func.sum(Post.comments), 0),
        ).where(Post.author_id == author_id)
        if since is not None:
            query = query.where(Post.created_at >= since)

        total_blogs, total_likes, total_comments = db.session.execute(query).one()
        return {
            "total_blogs": int(total_blogs),
            "total_likes": int(total_likes),
            "total_comments": int(total_comments),
        }
