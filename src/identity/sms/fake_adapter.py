"""In-memory SMS sender for development and testing."""

from uuid import uuid4

from identity.sms.port import SmsResult, SmsSender


class FakeSmsSender(SmsSender):
    """Records every message instead of sending it.

    Outside production the OTP flow uses the fixed code "123456" with this
    sender, so manual testing needs no phone.
    """

    requires_random_codes = False

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Carrier rejected the message"
        self.messages: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Carrier rejected the message") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, to: str, body: str) -> SmsResult:
        self.messages.append({"to": to, "body": body})
        if self.should_succeed:
            return SmsResult(success=True, message_id=f"fake_sms_{uuid4().hex[:12]}")
        return SmsResult(success=False, error=self.failure_reason)

    def last_message_to(self, to: str) -> dict | None:
        return next((m for m in reversed(self.messages) if m["to"] == to), None)
