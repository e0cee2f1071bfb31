"""Outbound delivery of one-time codes."""

import logging

import requests

from finance_tracker.config import get_settings
from finance_tracker.identifiers import Identifier

logger = logging.getLogger("finance_tracker")

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{account_sid}/Messages.json"


class ConsoleDeliveryChannel:
    """Writes messages to the server log. Used in development and for email until a mail channel exists."""

    def send(self, destination: str, message: str) -> bool:
        logger.info("OTP DELIVERY to %s: %s", destination, message)
        return True


class TwilioSmsChannel:
    """Sends SMS messages through the Twilio REST API."""

    def __init__(self, account_sid: str, auth_token: str, from_number: str, timeout: float = 10) -> None:
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout

    def send(self, destination: str, message: str) -> bool:
        """Send an SMS. Returns False instead of raising when the provider call fails."""
        try:
            response = requests.post(
                TWILIO_MESSAGES_URL.format(account_sid=self.account_sid),
                auth=(self.account_sid, self.auth_token),
                data={"To": destination, "From": self.from_number, "Body": message},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("SMS delivery to %s failed: %s", destination, e)
            return False
        return True


def get_delivery_channel(identifier: Identifier) -> ConsoleDeliveryChannel | TwilioSmsChannel:
    """Pick the channel for an identifier: SMS for mobile numbers when Twilio is configured."""
    settings = get_settings()
    if identifier.is_mobile and settings.sms_configured:
        return TwilioSmsChannel(
            settings.TWILIO_ACCOUNT_SID,
            settings.TWILIO_AUTH_TOKEN,
            settings.TWILIO_FROM_NUMBER,
        )
    return ConsoleDeliveryChannel()
