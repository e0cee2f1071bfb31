"""Authentication service: registration, login and OTP password reset."""

import logging
from dataclasses import dataclass
from enum import Enum

import bcrypt
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finance_tracker.database import utcnow
from finance_tracker.identifiers import Identifier, InvalidIdentifierError, parse_email, parse_mobile
from finance_tracker.models.user import User
from finance_tracker.services.delivery import get_delivery_channel
from finance_tracker.services.otp import OtpService, OtpStatus, get_otp_service
from finance_tracker.services.session import IssuedGrant, ResetGrantService, get_reset_grant_service

logger = logging.getLogger("finance_tracker")

PASSWORD_MAX_BYTES = 72
PASSWORD_TOO_LONG = f"Password must be at most {PASSWORD_MAX_BYTES} bytes"


class AuthError(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"
    UNAUTHORIZED = "unauthorized"


@dataclass
class AuthResult:
    """Result of an authentication attempt."""

    success: bool
    error: str | None = None
    code: AuthError | None = None
    user_id: int | None = None
    username: str | None = None
    email: str | None = None
    mobile: str | None = None
    grant: IssuedGrant | None = None

    @classmethod
    def failure(cls, code: AuthError, error: str) -> "AuthResult":
        return cls(success=False, error=error, code=code)

    @classmethod
    def for_user(cls, user: User) -> "AuthResult":
        return cls(success=True, user_id=user.id, username=user.username, email=user.email, mobile=user.mobile)


def password_too_long(password: str) -> bool:
    """bcrypt rejects passwords longer than 72 bytes once encoded."""
    return len(password.encode("utf-8")) > PASSWORD_MAX_BYTES


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    # No stored hash can match a password bcrypt refuses to hash
    if password_too_long(password):
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class AuthService:
    """Handles user registration, authentication and the password reset flow."""

    def __init__(self, otp_service: OtpService | None = None, grant_service: ResetGrantService | None = None) -> None:
        self.otp_service = otp_service or get_otp_service()
        self.grant_service = grant_service or get_reset_grant_service()

    def register(self, db: Session, username: str, email: str, mobile: str, password: str) -> AuthResult:
        """Register a new user. Returns AuthResult with success/error."""
        username = username.strip()
        if not username:
            return AuthResult.failure(AuthError.VALIDATION, "Username is required")
        if password_too_long(password):
            return AuthResult.failure(AuthError.VALIDATION, PASSWORD_TOO_LONG)
        try:
            email_id = parse_email(email)
            mobile_id = parse_mobile(mobile)
        except InvalidIdentifierError as e:
            return AuthResult.failure(AuthError.VALIDATION, str(e))

        user = User(
            username=username,
            email=email_id.value,
            mobile=mobile_id.value,
            password_hash=hash_password(password),
            is_verified=False,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            return AuthResult.failure(AuthError.CONFLICT, "Username, email or mobile number already registered")
        db.refresh(user)

        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return AuthResult.for_user(user)

    def authenticate(self, db: Session, username: str, password: str) -> AuthResult:
        """Authenticate a user by username and password."""
        user = db.query(User).filter(User.username == username.strip()).first()
        if not user or not verify_password(password, user.password_hash):
            return AuthResult.failure(AuthError.INVALID_CREDENTIALS, "Invalid username or password")

        user.last_login_at = utcnow()
        db.commit()

        return AuthResult.for_user(user)

    def find_user(self, db: Session, identifier: Identifier) -> User | None:
        """Look up a user by the column the identifier addresses."""
        column = getattr(User, identifier.column)
        return db.query(User).filter(column == identifier.value).first()

    def request_password_reset(self, db: Session, identifier: Identifier) -> str | None:
        """Issue and deliver a one-time code for the identifier.

        Returns the code if a user exists, None otherwise.
        Caller should not reveal whether the user was found.
        """
        if self.find_user(db, identifier) is None:
            logger.info("Password reset requested for unknown %s", identifier.kind.value)
            return None

        code = self.otp_service.request_code(db, identifier)
        channel = get_delivery_channel(identifier)
        minutes = self.otp_service.expire_minutes
        if not channel.send(identifier.value, f"Your password reset code is {code}. It expires in {minutes} minutes."):
            logger.warning("Password reset code for %s could not be delivered", identifier.kind.value)
        return code

    def verify_otp(self, db: Session, identifier: Identifier, code: str) -> AuthResult:
        """Verify a one-time code and grant reset permission for the identifier."""
        status = self.otp_service.verify_code(db, identifier, code)
        if status is OtpStatus.EXPIRED:
            return AuthResult.failure(AuthError.EXPIRED, "Code has expired. Please request a new one.")
        if status is not OtpStatus.OK:
            return AuthResult.failure(AuthError.INVALID_CODE, "Invalid code")

        return AuthResult(success=True, grant=self.grant_service.grant(db, identifier))

    def reset_password(self, db: Session, reset_token: str | None, new_password: str) -> AuthResult:
        """Reset the password of the account a reset token was issued for. The token is consumed."""
        if password_too_long(new_password):
            return AuthResult.failure(AuthError.VALIDATION, PASSWORD_TOO_LONG)

        identifier = self.grant_service.consume(db, reset_token)
        if identifier is None:
            return AuthResult.failure(AuthError.UNAUTHORIZED, "Password reset not authorized. Verify your code first.")

        column = getattr(User, identifier.column)
        result = db.execute(
            update(User)
            .where(column == identifier.value)
            .values(password_hash=hash_password(new_password))
            .execution_options(synchronize_session=False)
        )
        db.commit()
        if result.rowcount != 1:
            return AuthResult.failure(AuthError.UNAUTHORIZED, "No account found for this reset request")

        logger.info("Password reset completed via %s", identifier.kind.value)
        return AuthResult(success=True)


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
