"""Password reset models: the OTP ledger and issued reset grants."""

from sqlalchemy import Column, DateTime, String

from finance_tracker.database import Base, utcnow


class PasswordReset(Base):
    """Active one-time code for an email address or mobile number. One row per identifier."""

    __tablename__ = "password_resets"

    identifier = Column(String(256), primary_key=True)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class ResetGrant(Base):
    """Single-use permission to reset the password of one identifier, issued after OTP verification."""

    __tablename__ = "reset_grants"

    jti = Column(String(64), primary_key=True)
    identifier = Column(String(256), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
