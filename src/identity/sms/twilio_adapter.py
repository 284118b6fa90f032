"""Twilio SMS sender over the Twilio REST API."""

import os

import httpx
import structlog

from identity.sms.port import SmsResult, SmsSender

logger = structlog.get_logger(__name__)

TWILIO_API_URL = "https://api.twilio.com/2010-04-01"
_TIMEOUT = httpx.Timeout(connect=5.0, read=15.0, write=5.0, pool=5.0)


class TwilioSmsSender(SmsSender):
    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        client: httpx.Client | None = None,
    ) -> None:
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._client = client

    @classmethod
    def from_env(cls) -> "TwilioSmsSender":
        return cls(
            account_sid=os.environ.get("TWILIO_ACCOUNT_SID", ""),
            auth_token=os.environ.get("TWILIO_AUTH_TOKEN", ""),
            from_number=os.environ.get("TWILIO_PHONE_NUMBER", ""),
        )

    def send(self, to: str, body: str) -> SmsResult:
        if not (self.account_sid and self.auth_token and self.from_number):
            return SmsResult(success=False, error="Twilio is not configured")

        url = f"{TWILIO_API_URL}/Accounts/{self.account_sid}/Messages.json"
        payload = {"From": self.from_number, "To": to, "Body": body}
        try:
            if self._client is not None:
                response = self._client.post(url, data=payload, auth=(self.account_sid, self.auth_token))
            else:
                with httpx.Client(timeout=_TIMEOUT) as client:
                    response = client.post(url, data=payload, auth=(self.account_sid, self.auth_token))
        except httpx.HTTPError as exc:
            logger.error("Twilio request failed", to=to, error=str(exc))
            return SmsResult(success=False, error=str(exc))

        if response.status_code >= 400:
            message = response.json().get("message", response.text) if response.content else response.text
            logger.warning("Twilio rejected message", to=to, status=response.status_code, error=message)
            return SmsResult(success=False, error=message)

        return SmsResult(success=True, message_id=response.json().get("sid"))
