"""User model."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from finance_tracker.database import Base, utcnow


class User(Base):
    """Registered account holder."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    mobile = Column(String(32), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_login_at = Column(DateTime, nullable=True)
