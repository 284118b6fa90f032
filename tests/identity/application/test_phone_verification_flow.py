"""Application tests for the phone OTP flow through the SMS port."""

import pytest
from identity.account.account import Account
from identity.account.registration import RegisterAccount
from identity.otp.challenge import (
    DEVELOPMENT_CODE,
    ResendPhoneCode,
    StartPhoneVerification,
    VerifyPhoneCode,
)
from identity.otp.verification import PhoneVerification
from identity.sms import set_sms_sender
from identity.sms.port import SmsResult, SmsSender
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

PHONE = "+971501234567"


class RandomCodeSender(SmsSender):
    """Captures codes from message bodies, like a real provider would deliver them."""

    def __init__(self):
        self.codes = []

    def send(self, to, body):
        self.codes.append(body.split(" is ")[1][:6])
        return SmsResult(success=True, message_id="SM123")


def _start(phone=PHONE, purpose="register"):
    return current_domain.process(StartPhoneVerification(phone=phone, purpose=purpose), asynchronous=False)


def _verify(verification_id, code):
    return current_domain.process(VerifyPhoneCode(verification_id=verification_id, code=code), asynchronous=False)


class TestStartVerification:
    def test_fake_sender_uses_development_code(self, fake_sms):
        verification_id = _start("+971 50 123 4567")

        assert fake_sms.messages[0]["to"] == PHONE
        assert DEVELOPMENT_CODE in fake_sms.messages[0]["body"]
        assert _verify(verification_id, DEVELOPMENT_CODE)["verified"] is True

    def test_real_sender_gets_random_code(self):
        sender = RandomCodeSender()
        set_sms_sender(sender)

        verification_id = _start()

        code = sender.codes[0]
        assert len(code) == 6 and code.isdigit()
        assert _verify(verification_id, code)["verified"] is True

    def test_new_challenge_supersedes_pending_one(self):
        first = _start()
        second = _start()

        repo = current_domain.repository_for(PhoneVerification)
        assert repo.get(first).status == "superseded"
        assert repo.get(second).status == "pending"
        assert _verify(first, DEVELOPMENT_CODE)["verified"] is False

    def test_unknown_purpose_rejected(self):
        with pytest.raises(ValidationError):
            _start(purpose="marketing")

    def test_delivery_failure_surfaces_as_validation_error(self, fake_sms):
        fake_sms.configure(should_succeed=False, failure_reason="Unreachable")
        with pytest.raises(ValidationError) as exc:
            _start()
        assert "Unreachable" in str(exc.value)


class TestVerifyCode:
    def test_wrong_code_is_persisted_as_an_attempt(self):
        verification_id = _start()
        result = _verify(verification_id, "999999")

        assert result == {"verified": False, "status": "invalid_code", "attempts_remaining": 4}
        assert current_domain.repository_for(PhoneVerification).get(verification_id).attempts == 1

    def test_lock_after_five_wrong_codes(self):
        verification_id = _start()
        for _ in range(5):
            result = _verify(verification_id, "999999")
        assert result["status"] == "locked"
        assert _verify(verification_id, DEVELOPMENT_CODE)["status"] == "locked"

    def test_success_marks_owning_account_verified(self):
        account_id = current_domain.process(
            RegisterAccount(email="sara@example.com", name="Sara", phone=PHONE), asynchronous=False
        )
        verification_id = _start()
        _verify(verification_id, DEVELOPMENT_CODE)

        assert current_domain.repository_for(Account).get(account_id).phone_verified is True


class TestResend:
    def test_resend_sends_again(self, fake_sms):
        verification_id = _start()
        current_domain.process(ResendPhoneCode(verification_id=verification_id), asynchronous=False)

        assert len(fake_sms.messages) == 2
        assert current_domain.repository_for(PhoneVerification).get(verification_id).sends == 2
