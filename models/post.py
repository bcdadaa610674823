"""Blog post model."""

from datetime import datetime

from . import db

POST_CATEGORIES = ("Tech", "Development", "Trends")
POST_STATUSES = ("posted", "draft")
MEDIA_TYPES = ("image", "video", "document")


class Post(db.Model):
    """A blog post written by a user."""

    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=False)
    category = db.Column(
        db.Enum(*POST_CATEGORIES, name="post_category_enum"),
        nullable=False,
        default="Tech",
        server_default="Tech",
    )
    status = db.Column(
        db.Enum(*POST_STATUSES, name="post_status_enum"),
        nullable=False,
        default="posted",
        server_default="posted",
    )
    media = db.Column(db.JSON, nullable=True)
    author_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    likes = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    comments = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    created_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    author = db.relationship("User", back_populates="posts", lazy="select")

    def to_dict(self, include_author: bool = False) -> dict:
        """Serialize the post; the author is reduced to id, name and email."""

        data = {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "category": self.category,
            "status": self.status,
            "media": self.media,
            "authorId": self.author_id,
            "likes": self.likes,
            "comments": self.comments,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_author and self.author is not None:
            data["author"] = {
                "id": self.author.id,
                "name": self.author.name,
                "email": self.author.email,
            }
        return data
