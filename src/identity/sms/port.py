"""SMS sender port.

Identity only needs one capability from an SMS provider: deliver a short
text to a phone number and say whether it went out.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SmsResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


class SmsSender(ABC):
    #: Whether OTP codes must be random. Test doubles may use a fixed code.
    requires_random_codes: bool = True

    @abstractmethod
    def send(self, to: str, body: str) -> SmsResult:
        """Send `body` to the international number `to`."""
        ...
