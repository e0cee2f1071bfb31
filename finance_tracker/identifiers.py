"""Contact identifiers: email addresses and mobile numbers.

Raw user input is parsed once at the API boundary into an ``Identifier`` and the
parsed value is what services, the OTP ledger and reset grants work with.
"""

import re
from dataclasses import dataclass
from enum import Enum

from email_validator import EmailNotValidError, validate_email

_MOBILE_SEPARATORS = re.compile(r"[\s\-().]")
_MOBILE_PATTERN = re.compile(r"^\+?[1-9]\d{7,14}$")


class InvalidIdentifierError(ValueError):
    """Raised when input is neither a valid email address nor a valid mobile number."""


class IdentifierKind(str, Enum):
    EMAIL = "email"
    MOBILE = "mobile"


@dataclass(frozen=True)
class Identifier:
    """A normalized email address or mobile number."""

    kind: IdentifierKind
    value: str

    @property
    def column(self) -> str:
        """Name of the users column this identifier is matched against."""
        return self.kind.value

    @property
    def is_mobile(self) -> bool:
        return self.kind is IdentifierKind.MOBILE


def parse_email(raw: str) -> Identifier:
    """Validate an email address (syntax only, no DNS lookup) and lower-case it."""
    try:
        result = validate_email(raw.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise InvalidIdentifierError(f"Invalid email address: {e}") from None
    return Identifier(IdentifierKind.EMAIL, result.normalized.lower())


def parse_mobile(raw: str) -> Identifier:
    """Validate a phone number in international form.

    The stored form always carries the leading "+": "15551234567" and
    "+1 (555) 123-4567" both become "+15551234567".
    """
    compact = _MOBILE_SEPARATORS.sub("", raw.strip())
    if not _MOBILE_PATTERN.match(compact):
        raise InvalidIdentifierError("Invalid mobile number")
    return Identifier(IdentifierKind.MOBILE, "+" + compact.lstrip("+"))


def parse_identifier(raw: str) -> Identifier:
    """Parse user input as an email address if it contains '@', otherwise as a mobile number."""
    if "@" in raw:
        return parse_email(raw)
    return parse_mobile(raw)
