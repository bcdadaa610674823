"""Seed a verified superuser account."""

import os

from app import create_app
from models import db
from models.user import User

SUPERUSER_NAME = os.getenv("SEED_SUPERUSER_NAME", "Site Owner")
SUPERUSER_EMAIL = os.getenv("SEED_SUPERUSER_EMAIL", "owner@example.com").lower()
SUPERUSER_PASSWORD = os.getenv("SEED_SUPERUSER_PASSWORD", "OwnerPass123")


def main() -> None:
    app = create_app()
    with app.app_context():
        user = User.query.filter(db.func.lower(User.email) == SUPERUSER_EMAIL).first()
        if user is None:
            user = User(
                name=SUPERUSER_NAME,
                email=SUPERUSER_EMAIL,
                role="superuser",
                is_verified=True,
            )
            user.set_password(SUPERUSER_PASSWORD)
            db.session.add(user)
            action = "created"
        else:
            user.role = "superuser"
            user.is_verified = True
            user.is_active = True
            user.set_password(SUPERUSER_PASSWORD)
            action = "updated"
        db.session.commit()
        print(f"Superuser {action}: {SUPERUSER_EMAIL}")


if __name__ == "__main__":
    main()
