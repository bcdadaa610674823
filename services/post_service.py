"""Post lifecycle, counters and per-author statistics."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

from models.post import Post
from storage.abstract_storage import AbstractPostStore, AbstractUserStore
from utils.errors import ServiceError
from utils.periods import PERIODS, period_start

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "body", "category", "status", "media")


class PostService:
    def __init__(self, posts: AbstractPostStore, users: AbstractUserStore):
        self.posts = posts
        self.users = users

    def create(self, author_id: int, fields: Mapping[str, Any]) -> Post:
        """Create a post owned by ``author_id``; any author in ``fields`` is ignored."""

        if self.users.get(author_id) is None:
            raise ServiceError.not_found(f"Author with ID {author_id} not found")

        values = {key: fields[key] for key in EDITABLE_FIELDS if fields.get(key) is not None}
        post = self.posts.create(author_id=author_id, **values)
        logger.info("Post %s created by user %s", post.id, author_id)
        return post

    def get(self, post_id: int) -> Post:
        post = self.posts.get(post_id, with_author=True)
        if post is None:
            raise ServiceError.not_found("Post not found")
        return post

    def list_posts(
        self, *, page: int, limit: int, title: str | None = None
    ) -> tuple[list[Post], int]:
        return self.posts.page(page=page, limit=limit, title=title, with_author=True)

    def list_for_author(
        self, author_id: int, *, page: int, limit: int
    ) -> tuple[list[Post], int]:
        return self.posts.page(page=page, limit=limit, author_id=author_id)

    def update(self, post_id: int, changes: Mapping[str, Any]) -> Post:
        """Apply a partial update; only supplied editable fields are touched."""

        post = self.posts.get(post_id)
        if post is None:
            raise ServiceError.not_found("Post not found")

        values = {key: changes[key] for key in EDITABLE_FIELDS if key in changes}
        if values:
            post = self.posts.update(post, values)
            logger.info("Post %s updated fields %s", post_id, sorted(values))
        return post

    def delete(self, post_id: int, author_id: int) -> None:
        if not self.posts.delete_owned(post_id, author_id):
            raise ServiceError.not_found("Post not found")
        logger.info("Post %s deleted by user %s", post_id, author_id)

    def like(self, post_id: int) -> int:
        return self._increment(post_id, "likes")

    def comment(self, post_id: int) -> int:
        return self._increment(post_id, "comments")

    def _increment(self, post_id: int, counter: str) -> int:
        value = self.posts.increment(post_id, counter)
        if value is None:
            raise ServiceError.not_found("Post not found")
        return value

    def user_stats(
        self, author_id: int, period: str | None = None, now: datetime | None = None
    ) -> dict:
        """Count the author's posts and sum their likes and comments.

        Unknown or missing periods aggregate over all time.
        """

        normalized = (period or "").strip().lower()
        if normalized not in PERIODS:
            normalized = "all"
        totals = self.posts.aggregate(author_id, since=period_start(normalized, now))
        return {
            "period": normalized,
            "totalBlogs": totals["total_blogs"],
            "totalLikes": totals["total_likes"],
            "totalComments": totals["total_comments"],
        }
