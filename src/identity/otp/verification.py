"""PhoneVerification aggregate — a one-time-password challenge for a phone.

State Machine:
    pending → verified | expired | locked | superseded

Only the SHA-256 digest of the code is stored. A challenge lives for
CODE_TTL and tolerates MAX_ATTEMPTS wrong guesses.
"""

import hashlib
import hmac
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String

from identity.domain import identity

CODE_TTL = timedelta(minutes=10)
MAX_ATTEMPTS = 5


class VerificationPurpose(Enum):
    REGISTER = "register"
    LOGIN = "login"
    PHONE_CHANGE = "phone_change"


class VerificationStatus(Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    EXPIRED = "expired"
    LOCKED = "locked"
    SUPERSEDED = "superseded"


def hash_code(phone: str, code: str) -> str:
    return hashlib.sha256(f"{phone}:{code}".encode()).hexdigest()


@identity.event(part_of="PhoneVerification")
class PhoneCodeIssued:
    __version__ = 1

    verification_id: String(required=True)
    phone: String(required=True)
    purpose: String(required=True)
    expires_at: DateTime(required=True)


@identity.event(part_of="PhoneVerification")
class PhoneCodeVerified:
    __version__ = 1

    verification_id: String(required=True)
    phone: String(required=True)
    purpose: String(required=True)
    verified_at: DateTime(required=True)


@identity.event(part_of="PhoneVerification")
class PhoneVerificationLocked:
    __version__ = 1

    verification_id: String(required=True)
    phone: String(required=True)
    attempts: Integer(required=True)


@identity.aggregate
class PhoneVerification:
    phone: String(required=True, max_length=20)
    purpose: String(choices=VerificationPurpose, default=VerificationPurpose.REGISTER.value)
    code_hash: String(required=True, max_length=64)
    expires_at: DateTime(required=True)
    attempts: Integer(default=0)
    sends: Integer(default=1)
    status: String(choices=VerificationStatus, default=VerificationStatus.PENDING.value)
    created_at: DateTime(default=lambda: datetime.now(UTC))
    verified_at: DateTime()

    @classmethod
    def issue(cls, phone, purpose, code, now=None):
        now = now or datetime.now(UTC)
        challenge = cls(
            phone=phone,
            purpose=purpose,
            code_hash=hash_code(phone, code),
            expires_at=now + CODE_TTL,
            created_at=now,
        )
        challenge.raise_(
            PhoneCodeIssued(
                verification_id=str(challenge.id),
                phone=phone,
                purpose=purpose,
                expires_at=challenge.expires_at,
            )
        )
        return challenge

    @property
    def is_pending(self):
        return self.status == VerificationStatus.PENDING.value

    @property
    def attempts_remaining(self):
        return max(0, MAX_ATTEMPTS - (self.attempts or 0))

    def reissue(self, code, now=None):
        """Replace the code and restart the clock; failed attempts are kept."""
        if not self.is_pending:
            raise ValidationError({"status": [f"Cannot resend a {self.status} verification"]})

        now = now or datetime.now(UTC)
        self.code_hash = hash_code(self.phone, code)
        self.expires_at = now + CODE_TTL
        self.sends = (self.sends or 1) + 1
        self.raise_(
            PhoneCodeIssued(
                verification_id=str(self.id),
                phone=self.phone,
                purpose=self.purpose,
                expires_at=self.expires_at,
            )
        )

    def supersede(self):
        if self.is_pending:
            self.status = VerificationStatus.SUPERSEDED.value

    def verify(self, code, now=None):
        """Check a submitted code and return the resulting status value.

        Never raises for a wrong or late code: the attempt counter and any
        status change have to be persisted either way.
        """
        if not self.is_pending:
            return self.status

        now = now or datetime.now(UTC)
        if now > self.expires_at:
            self.status = VerificationStatus.EXPIRED.value
            return self.status

        if hmac.compare_digest(self.code_hash, hash_code(self.phone, code or "")):
            self.status = VerificationStatus.VERIFIED.value
            self.verified_at = now
            self.raise_(
                PhoneCodeVerified(
                    verification_id=str(self.id),
                    phone=self.phone,
                    purpose=self.purpose,
                    verified_at=now,
                )
            )
            return self.status

        self.attempts = (self.attempts or 0) + 1
        if self.attempts >= MAX_ATTEMPTS:
            self.status = VerificationStatus.LOCKED.value
            self.raise_(
                PhoneVerificationLocked(verification_id=str(self.id), phone=self.phone, attempts=self.attempts)
            )
            return self.status
        return "invalid_code"
