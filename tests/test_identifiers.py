"""Tests for identifier parsing."""

import pytest

from finance_tracker.identifiers import (
    IdentifierKind,
    InvalidIdentifierError,
    parse_email,
    parse_identifier,
    parse_mobile,
)


class TestParseIdentifier:
    def test_email(self):
        identifier = parse_identifier("  Alice@X.com ")
        assert identifier.kind is IdentifierKind.EMAIL
        assert identifier.value == "alice@x.com"
        assert identifier.column == "email"

    def test_mobile(self):
        identifier = parse_identifier("+1 (555) 123-4567")
        assert identifier.kind is IdentifierKind.MOBILE
        assert identifier.value == "+15551234567"
        assert identifier.is_mobile

    def test_mobile_without_plus(self):
        assert parse_identifier("919876543210").value == "+919876543210"

    @pytest.mark.parametrize("raw", ["", "hello", "12345", "+0123456789", "+1234567890123456789"])
    def test_invalid_mobile(self, raw: str):
        with pytest.raises(InvalidIdentifierError):
            parse_mobile(raw)

    @pytest.mark.parametrize("raw", ["@x.com", "alice@", "a@@x.com", "alice@x"])
    def test_invalid_email(self, raw: str):
        with pytest.raises(InvalidIdentifierError):
            parse_email(raw)

    def test_at_sign_selects_email_parsing(self):
        with pytest.raises(InvalidIdentifierError, match="email"):
            parse_identifier("555@1234")
