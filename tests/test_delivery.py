"""Tests for OTP delivery channels."""

from unittest.mock import MagicMock, patch

import requests

from finance_tracker.config import get_settings
from finance_tracker.identifiers import parse_identifier
from finance_tracker.services.delivery import ConsoleDeliveryChannel, TwilioSmsChannel, get_delivery_channel


class TestTwilioSmsChannel:
    def test_send_posts_message(self):
        channel = TwilioSmsChannel("AC123", "secret", "+15550000000")
        with patch("finance_tracker.services.delivery.requests.post") as mock_post:
            mock_post.return_value = MagicMock(status_code=201)
            assert channel.send("+15551234567", "Your code is 123456") is True

        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"
        assert kwargs["auth"] == ("AC123", "secret")
        assert kwargs["data"] == {"To": "+15551234567", "From": "+15550000000", "Body": "Your code is 123456"}
        assert kwargs["timeout"] == 10

    def test_send_failure_returns_false(self):
        channel = TwilioSmsChannel("AC123", "secret", "+15550000000")
        with patch("finance_tracker.services.delivery.requests.post", side_effect=requests.ConnectionError("down")):
            assert channel.send("+15551234567", "hi") is False

    def test_http_error_returns_false(self):
        channel = TwilioSmsChannel("AC123", "secret", "+15550000000")
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("401 Unauthorized")
        with patch("finance_tracker.services.delivery.requests.post", return_value=response):
            assert channel.send("+15551234567", "hi") is False


class TestChannelSelection:
    def test_email_uses_console(self):
        assert isinstance(get_delivery_channel(parse_identifier("alice@x.com")), ConsoleDeliveryChannel)

    def test_mobile_without_credentials_uses_console(self):
        settings = get_settings()
        with patch.object(settings, "TWILIO_ACCOUNT_SID", ""):
            channel = get_delivery_channel(parse_identifier("+15551234567"))
        assert isinstance(channel, ConsoleDeliveryChannel)

    def test_mobile_with_credentials_uses_sms(self):
        settings = get_settings()
        with (
            patch.object(settings, "TWILIO_ACCOUNT_SID", "AC123"),
            patch.object(settings, "TWILIO_AUTH_TOKEN", "secret"),
            patch.object(settings, "TWILIO_FROM_NUMBER", "+15550000000"),
        ):
            channel = get_delivery_channel(parse_identifier("+15551234567"))
        assert isinstance(channel, TwilioSmsChannel)
        assert channel.from_number == "+15550000000"
