"""Password reset token model."""

from datetime import datetime

from . import db


class PasswordResetToken(db.Model):
    """The single outstanding password reset token of a user."""

    __tablename__ = "password_reset_tokens"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token = db.Column(db.String(1024), nullable=False, unique=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user = db.relationship("User", back_populates="password_reset_tokens")

    def is_expired(self, now=None) -> bool:
        now = now or datetime.utcnow()
        return self.expires_at < now
