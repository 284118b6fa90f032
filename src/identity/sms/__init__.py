"""SMS sender factory.

Provides get_sms_sender() / set_sms_sender() to swap implementations:
- FakeSmsSender for development and testing
- TwilioSmsSender when SMS_ADAPTER=twilio
"""

import os

from identity.sms.fake_adapter import FakeSmsSender
from identity.sms.port import SmsSender

_current_sender: SmsSender | None = None


def get_sms_sender() -> SmsSender:
    """Return the current SMS sender, building it from SMS_ADAPTER on first use."""
    global _current_sender
    if _current_sender is None:
        if os.environ.get("SMS_ADAPTER", "fake").lower() == "twilio":
            from identity.sms.twilio_adapter import TwilioSmsSender

            _current_sender = TwilioSmsSender.from_env()
        else:
            _current_sender = FakeSmsSender()
    return _current_sender


def set_sms_sender(sender: SmsSender) -> None:
    """Override the active SMS sender (useful for tests)."""
    global _current_sender
    _current_sender = sender


def reset_sms_sender() -> None:
    global _current_sender
    _current_sender = None
