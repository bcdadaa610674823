"""Seed demo authors and posts."""

from datetime import datetime, timedelta

from app import create_app
from models import db
from models.post import Post
from models.user import User


def get_or_create_user(name: str, email: str, password: str, role: str = "user") -> User:
    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(name=name, email=email, role=role, is_verified=True)
        db.session.add(user)
    else:
        user.name = name
        user.role = role
        user.is_verified = True
    user.set_password(password)
    return user


def main() -> None:
    app = create_app()
    with app.app_context():
        alice = get_or_create_user("Alice Writer", "alice@example.com", "AlicePass123")
        bob = get_or_create_user("Bob Editor", "bob@example.com", "BobPass123", role="admin")

        db.session.flush()

        now = datetime.utcnow()
        posts_data = [
            (alice, {
                "title": "Getting started with Flask blueprints",
                "body": "Blueprints keep each area of an application in its own module.",
                "category": "Development",
                "likes": 12,
                "comments": 3,
                "created_at": now - timedelta(days=2),
            }),
            (alice, {
                "title": "What changed in web tooling this year",
                "body": "A short tour of the trends we saw across frontend and backend tools.",
                "category": "Trends",
                "likes": 4,
                "comments": 1,
                "created_at": now - timedelta(days=40),
            }),
            (bob, {
                "title": "Draft: notes on database migrations",
                "body": "Keep migrations small and always write the downgrade.",
                "category": "Tech",
                "status": "draft",
                "created_at": now,
            }),
        ]

        for author, data in posts_data:
            post = Post.query.filter_by(title=data["title"], author_id=author.id).first()
            if post is None:
                db.session.add(Post(author_id=author.id, **data))
            else:
                for key, value in data.items():
                    setattr(post, key, value)

        db.session.commit()
        print("Seed data inserted: 2 authors, 3 posts.")


if __name__ == "__main__":
    main()
