"""User model definition."""

from datetime import datetime

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


USER_ROLES = ("user", "admin", "superuser")


class User(db.Model):
    """Represents a registered blog user."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(*USER_ROLES, name="user_role_enum"),
        nullable=False,
        default="user",
        server_default="user",
    )
    is_verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default=db.true(),
    )
    profile_image = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    posts = db.relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
    )
    password_reset_tokens = db.relationship(
        "PasswordResetToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    def to_public_dict(self) -> dict:
        """Fields safe to return to any caller."""

        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
        }

    def to_dict(self) -> dict:
        """Serialize the user for profile and admin views."""

        data = self.to_public_dict()
        data.update(
            {
                "isVerified": self.is_verified,
                "isActive": self.is_active,
                "profileImage": self.profile_image,
                "createdAt": self.created_at.isoformat() if self.created_at else None,
                "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            }
        )
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
