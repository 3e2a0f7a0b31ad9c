from __future__ import annotations

from ..extensions import db
from orderdesk.time_utils import to_utc_z
from .soft_delete import SoftDeleteMixin


TOKEN_TYPES = ("access", "refresh")


class User(db.Model):
    """Account that owns orders and tokens."""
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "created_at": to_utc_z(self.created_at),
        }


class Token(SoftDeleteMixin, db.Model):
    """
    Issued API token.

    `token` holds the SHA-256 hash; the plaintext is only returned at issue time.
    Revocation flips `is_revoked` in place.
    """
    __tablename__ = "tokens"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    token = db.Column(db.String(255), nullable=False, unique=True, index=True)
    type = db.Column(db.String(80), nullable=False)
    is_revoked = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User", backref=db.backref("tokens", lazy=True))

    def to_dict(self) -> dict:
        # Never serialize the token hash
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "is_revoked": self.is_revoked,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "deleted_at": to_utc_z(self.deleted_at),
        }
