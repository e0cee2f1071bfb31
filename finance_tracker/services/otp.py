"""OTP ledger: one active password reset code per identifier."""

import secrets
import string
from datetime import timedelta
from enum import Enum

from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from finance_tracker.config import get_settings
from finance_tracker.database import utcnow
from finance_tracker.identifiers import Identifier
from finance_tracker.models.password_reset import PasswordReset

CODE_LENGTH = 6

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class OtpStatus(str, Enum):
    OK = "ok"
    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"


def generate_code() -> str:
    """Six independent random digits, leading zeros allowed."""
    return "".join(secrets.choice(string.digits) for _ in range(CODE_LENGTH))


class OtpService:
    """Issues and verifies one-time codes.

    Issuing a code replaces any earlier code for the same identifier, so only the
    most recent one can ever verify. A successful verification deletes the row.
    """

    def __init__(self, expire_minutes: int | None = None) -> None:
        self.expire_minutes = expire_minutes or get_settings().OTP_EXPIRE_MINUTES

    def request_code(self, db: Session, identifier: Identifier) -> str:
        """Generate a code for the identifier, store it with its expiry and return it."""
        code = generate_code()
        now = utcnow()
        values = {
            "identifier": identifier.value,
            "code": code,
            "expires_at": now + timedelta(minutes=self.expire_minutes),
            "created_at": now,
        }

        insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)
        if insert is None:
            db.merge(PasswordReset(**values))
        else:
            stmt = insert(PasswordReset).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[PasswordReset.identifier],
                set_={
                    "code": stmt.excluded.code,
                    "expires_at": stmt.excluded.expires_at,
                    "created_at": stmt.excluded.created_at,
                },
            )
            db.execute(stmt)
        db.commit()
        return code

    def verify_code(self, db: Session, identifier: Identifier, code: str) -> OtpStatus:
        """Consume the code if it matches and has not expired."""
        code = code.strip()
        # Single conditional delete: of two concurrent verifications only one can remove the row.
        result = db.execute(
            delete(PasswordReset)
            .where(
                PasswordReset.identifier == identifier.value,
                PasswordReset.code == code,
                PasswordReset.expires_at >= utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
        if result.rowcount == 1:
            return OtpStatus.OK

        row = db.get(PasswordReset, identifier.value)
        if row is not None and row.code == code:
            return OtpStatus.EXPIRED
        return OtpStatus.INVALID_CODE


_otp_service: OtpService | None = None


def get_otp_service() -> OtpService:
    """Get singleton OTP service instance."""
    global _otp_service
    if _otp_service is None:
        _otp_service = OtpService()
    return _otp_service
