"""Blog blueprint: posts, likes, comments and author statistics."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from services.container import get_services
from utils.authorization import ALL_ROLES, authorize, current_principal, is_author
from utils.pagination import paginated_payload
from utils.request_validation import (
    parse_json_request,
    parse_pagination,
    validate_post_payload,
)

posts_bp = Blueprint("posts", __name__)


def _pagination() -> tuple[int, int]:
    return parse_pagination(
        request.args,
        default_limit=current_app.config.get("DEFAULT_PAGE_SIZE", 10),
        max_limit=current_app.config.get("MAX_PAGE_SIZE", 100),
    )


@posts_bp.route("/posts", methods=["GET"])
def list_posts():
    """Return one page of posts, newest first, optionally filtered by title."""

    page, limit = _pagination()
    posts, count = get_services().posts.list_posts(
        page=page, limit=limit, title=request.args.get("title")
    )
    return jsonify(
        {
            "success": True,
            "message": "Posts retrieved successfully",
            "data": paginated_payload(
                (post.to_dict(include_author=True) for post in posts), count, page, limit
            ),
        }
    )


@posts_bp.route("/posts/<int:post_id>", methods=["GET"])
def get_post(post_id: int):
    post = get_services().posts.get(post_id)
    return jsonify(
        {
            "success": True,
            "message": "Post retrieved successfully",
            "data": {"post": post.to_dict(include_author=True)},
        }
    )


@posts_bp.route("/posts", methods=["POST"])
@authorize(*ALL_ROLES)
def create_post():
    """Create a post authored by the caller."""

    data = parse_json_request(request)
    values = validate_post_payload(data)
    post = get_services().posts.create(current_principal().id, values)
    return (
        jsonify(
            {
                "success": True,
                "message": "Post created successfully",
                "data": {"post": post.to_dict()},
            }
        ),
        HTTPStatus.CREATED,
    )


@posts_bp.route("/posts/<int:post_id>", methods=["PUT"])
@authorize(*ALL_ROLES)
@is_author
def update_post(post_id: int):
    data = parse_json_request(request)
    values = validate_post_payload(data, partial=True)
    post = get_services().posts.update(post_id, values)
    return jsonify(
        {
            "success": True,
            "message": "Post updated successfully",
            "data": {"post": post.to_dict()},
        }
    )


@posts_bp.route("/posts/<int:post_id>", methods=["DELETE"])
@authorize(*ALL_ROLES)
@is_author
def delete_post(post_id: int):
    get_services().posts.delete(post_id, current_principal().id)
    return jsonify({"success": True, "message": "Post deleted successfully"})


@posts_bp.route("/posts/<int:post_id>/like", methods=["POST"])
@authorize(*ALL_ROLES)
def like_post(post_id: int):
    likes = get_services().posts.like(post_id)
    return jsonify(
        {"success": True, "message": "Post liked", "data": {"id": post_id, "likes": likes}}
    )


@posts_bp.route("/posts/<int:post_id>/comment", methods=["POST"])
@authorize(*ALL_ROLES)
def comment_post(post_id: int):
    comments = get_services().posts.comment(post_id)
    return jsonify(
        {
            "success": True,
            "message": "Comment added",
            "data": {"id": post_id, "comments": comments},
        }
    )


@posts_bp.route("/user/stats", methods=["GET"])
@authorize(*ALL_ROLES)
def user_stats():
    """Totals over the caller's posts for ``period`` (daily, weekly, monthly, yearly)."""

    stats = get_services().posts.user_stats(
        current_principal().id, request.args.get("period")
    )
    return jsonify(
        {"success": True, "message": "Stats retrieved successfully", "data": stats}
    )


@posts_bp.route("/user/posts", methods=["GET"])
@authorize(*ALL_ROLES)
def user_posts():
    page, limit = _pagination()
    posts, count = get_services().posts.list_for_author(
        current_principal().id, page=page, limit=limit
    )
    return jsonify(
        {
            "success": True,
            "message": "Posts retrieved successfully",
            "data": paginated_payload((post.to_dict() for post in posts), count, page, limit),
        }
    )
