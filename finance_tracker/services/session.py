"""Reset permission grants.

Verifying an OTP earns a short-lived, single-use reset token bound to one
identifier. The token is signed, and a matching ``ResetGrant`` row must still
exist when it is consumed; consuming deletes the row.
"""

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import delete
from sqlalchemy.orm import Session

from finance_tracker.database import utcnow
from finance_tracker.identifiers import Identifier, IdentifierKind
from finance_tracker.models.password_reset import ResetGrant
from finance_tracker.services.jwt import RESET_TOKEN_TYPE, get_jwt_service


@dataclass
class IssuedGrant:
    """Reset token handed to the client."""

    token: str
    expires_in: int  # seconds


class ResetGrantService:
    """Issues and consumes reset permissions."""

    def grant(self, db: Session, identifier: Identifier) -> IssuedGrant:
        """Record a reset permission for the identifier and return its token."""
        jwt_service = get_jwt_service()
        token, jti = jwt_service.create_reset_token(identifier.value, identifier.kind.value)
        minutes = jwt_service.reset_expire_minutes
        db.add(
            ResetGrant(
                jti=jti,
                identifier=identifier.value,
                expires_at=utcnow() + timedelta(minutes=minutes),
            )
        )
        db.commit()
        return IssuedGrant(token=token, expires_in=minutes * 60)

    def consume(self, db: Session, token: str | None) -> Identifier | None:
        """Redeem a reset token. Returns the identifier it was issued for, or None if not redeemable."""
        if not token:
            return None

        payload = get_jwt_service().decode_token(token, RESET_TOKEN_TYPE)
        if not payload:
            return None

        result = db.execute(
            delete(ResetGrant)
            .where(
                ResetGrant.jti == payload["jti"],
                ResetGrant.identifier == payload["sub"],
                ResetGrant.expires_at >= utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
        if result.rowcount != 1:
            return None

        return Identifier(IdentifierKind(payload["kind"]), payload["sub"])


_reset_grant_service: ResetGrantService | None = None


def get_reset_grant_service() -> ResetGrantService:
    """Get singleton reset grant service instance."""
    global _reset_grant_service
    if _reset_grant_service is None:
        _reset_grant_service = ResetGrantService()
    return _reset_grant_service
