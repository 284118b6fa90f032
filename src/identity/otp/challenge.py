"""Phone OTP flow — start, verify and resend a verification challenge."""

import os
import secrets

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.account.account import Account
from identity.domain import identity
from identity.otp.verification import PhoneVerification, VerificationPurpose, VerificationStatus
from identity.shared.phone import normalize_phone
from identity.sms import get_sms_sender

logger = structlog.get_logger(__name__)

DEVELOPMENT_CODE = "123456"


@identity.command(part_of="PhoneVerification")
class StartPhoneVerification:
    phone: String(required=True, max_length=30)
    purpose: String(max_length=20, default=VerificationPurpose.REGISTER.value)


@identity.command(part_of="PhoneVerification")
class VerifyPhoneCode:
    verification_id: Identifier(required=True)
    code: String(required=True, max_length=10)


@identity.command(part_of="PhoneVerification")
class ResendPhoneCode:
    verification_id: Identifier(required=True)


def generate_code(sender) -> str:
    if not sender.requires_random_codes and os.environ.get("PROTEAN_ENV") != "production":
        return DEVELOPMENT_CODE
    return f"{secrets.randbelow(1_000_000):06d}"


def _send_code(phone, code):
    result = get_sms_sender().send(phone, f"Your SouqHub verification code is {code}. It expires in 10 minutes.")
    if not result.success:
        logger.error("OTP delivery failed", phone=phone, error=result.error)
        raise ValidationError({"phone": [f"Could not send verification code: {result.error}"]})
    return result


def pending_challenges(phone, purpose):
    return (
        current_domain.repository_for(PhoneVerification)
        ._dao.query.filter(phone=phone, purpose=purpose, status=VerificationStatus.PENDING.value)
        .all()
        .items
    )


@identity.command_handler(part_of=PhoneVerification)
class PhoneVerificationHandler:
    @handle(StartPhoneVerification)
    def start_verification(self, command):
        if command.purpose not in {p.value for p in VerificationPurpose}:
            raise ValidationError({"purpose": [f"Unknown verification purpose: {command.purpose}"]})

        phone = normalize_phone(command.phone)
        repo = current_domain.repository_for(PhoneVerification)

        for earlier in pending_challenges(phone, command.purpose):
            earlier.supersede()
            repo.add(earlier)

        code = generate_code(get_sms_sender())
        challenge = PhoneVerification.issue(phone=phone, purpose=command.purpose, code=code)
        _send_code(phone, code)
        repo.add(challenge)

        logger.info("OTP issued", verification_id=str(challenge.id), purpose=command.purpose)
        return str(challenge.id)

    @handle(VerifyPhoneCode)
    def verify_code(self, command):
        """Returns {"verified", "status", "attempts_remaining"}."""
        repo = current_domain.repository_for(PhoneVerification)
        challenge = repo.get(command.verification_id)

        status = challenge.verify(command.code)
        repo.add(challenge)

        if status == VerificationStatus.VERIFIED.value:
            accounts = current_domain.repository_for(Account)._dao.query.filter(phone=challenge.phone).all().items
            for account in accounts:
                if not account.phone_verified:
                    account.mark_phone_verified()
                    current_domain.repository_for(Account).add(account)
        else:
            logger.warning("OTP verification failed", verification_id=str(challenge.id), status=status)

        return {
            "verified": status == VerificationStatus.VERIFIED.value,
            "status": status,
            "attempts_remaining": challenge.attempts_remaining,
        }

    @handle(ResendPhoneCode)
    def resend_code(self, command):
        repo = current_domain.repository_for(PhoneVerification)
        challenge = repo.get(command.verification_id)

        code = generate_code(get_sms_sender())
        challenge.reissue(code)
        _send_code(challenge.phone, code)
        repo.add(challenge)
