"""User account and remembered login models."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from app.database import Base


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """Registered account.

    ``password_reset_hash`` and ``password_reset_expires_at`` are always written
    together. ``activation_hash`` is cleared once the account is activated.
    """

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    activation_hash = Column(String(64), nullable=True, unique=True)
    password_reset_hash = Column(String(64), nullable=True, unique=True)
    password_reset_expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class RememberedLogin(Base):
    """Long-lived login token issued on "remember me". Rows are never updated."""

    __tablename__ = "remembered_login"

    token_hash = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
