"""JWT Token Service."""

import secrets
from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from finance_tracker.config import get_settings
from finance_tracker.database import utcnow

ACCESS_TOKEN_TYPE = "access"
RESET_TOKEN_TYPE = "reset"


class JWTService:
    """Handles JWT token creation and validation."""

    def __init__(self) -> None:
        settings = get_settings()
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.expire_minutes = settings.JWT_EXPIRE_MINUTES
        self.reset_expire_minutes = settings.RESET_TOKEN_EXPIRE_MINUTES

    def create_token(self, user_id: int, username: str) -> str:
        """Create a session token for the given user."""
        expire = utcnow() + timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": str(user_id),
            "username": username,
            "type": ACCESS_TOKEN_TYPE,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def create_reset_token(self, identifier: str, kind: str) -> tuple[str, str]:
        """Create a password reset token for an identifier. Returns (token, jti)."""
        jti = secrets.token_urlsafe(24)
        expire = utcnow() + timedelta(minutes=self.reset_expire_minutes)
        payload = {
            "sub": identifier,
            "kind": kind,
            "jti": jti,
            "type": RESET_TOKEN_TYPE,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm), jti

    def decode_token(self, token: str, token_type: str = ACCESS_TOKEN_TYPE) -> dict[str, Any] | None:
        """Decode and validate a JWT token of the given type. Returns None if invalid."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        if payload.get("type") != token_type:
            return None
        return payload


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
