"""Configuration settings for the finance tracker."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

_GENERATED_SECRET = secrets.token_urlsafe(32)


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./finance_tracker.db")
    AUTO_CREATE_TABLES: bool = os.getenv("AUTO_CREATE_TABLES", "false").lower() == "true"

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", _GENERATED_SECRET)
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", "480"))

    # Password reset
    OTP_EXPIRE_MINUTES: int = int(os.getenv("OTP_EXPIRE_MINUTES", "10"))
    RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "10"))

    # SMS delivery (Twilio)
    TWILIO_ACCOUNT_SID: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.getenv("TWILIO_AUTH_TOKEN", "")
    TWILIO_FROM_NUMBER: str = os.getenv("TWILIO_FROM_NUMBER", "")

    # Application
    STATIC_DIR: str = os.getenv("STATIC_DIR", "public")
    COOKIE_SECURE: bool = os.getenv("COOKIE_SECURE", "false").lower() == "true"
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    @property
    def sms_configured(self) -> bool:
        return bool(self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN and self.TWILIO_FROM_NUMBER)

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        warnings = []
        if self.JWT_SECRET_KEY == _GENERATED_SECRET:
            warnings.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        twilio = (self.TWILIO_ACCOUNT_SID, self.TWILIO_AUTH_TOKEN, self.TWILIO_FROM_NUMBER)
        if any(twilio) and not all(twilio):
            warnings.append("Twilio credentials are incomplete - OTP codes will be logged instead of sent by SMS")
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
