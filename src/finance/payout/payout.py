"""Payout aggregate — a vendor's request to withdraw available balance.

State Machine:
    PENDING → APPROVED → PAID
    PENDING → PAID
    PENDING → REJECTED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from finance.domain import finance
from finance.payout.events import PayoutApproved, PayoutPaid, PayoutRejected, PayoutRequested


class PayoutStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    REJECTED = "rejected"


@finance.aggregate
class Payout:
    vendor_id = Identifier(required=True)
    amount = Float(required=True)
    status = String(max_length=10, choices=PayoutStatus, default=PayoutStatus.PENDING.value)
    notes = Text()
    admin_note = Text()
    transaction_reference = String(max_length=255)
    processed_by = Identifier()
    processed_at = DateTime()
    rejection_reason = Text()
    requested_at = DateTime()

    @classmethod
    def request(cls, vendor_id, amount, available_balance, notes=None):
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Invalid amount"]})
        if amount > available_balance:
            raise ValidationError({"amount": ["Insufficient available balance"]})

        now = datetime.now(UTC)
        payout = cls(vendor_id=vendor_id, amount=round(amount, 2), notes=notes, requested_at=now)
        payout.raise_(
            PayoutRequested(payout_id=str(payout.id), vendor_id=str(vendor_id), amount=payout.amount, requested_at=now)
        )
        return payout

    def approve(self, admin_id, note=None):
        if self.status != PayoutStatus.PENDING.value:
            raise ValidationError({"status": ["Request is not pending"]})

        now = datetime.now(UTC)
        self.status = PayoutStatus.APPROVED.value
        self.admin_note = note
        self.processed_by = admin_id
        self.processed_at = now
        self.raise_(
            PayoutApproved(payout_id=str(self.id), vendor_id=str(self.vendor_id), approved_by=admin_id, approved_at=now)
        )

    def mark_paid(self, admin_id, transaction_reference, note=None):
        if not transaction_reference:
            raise ValidationError({"transaction_reference": ["Transaction reference is required"]})
        if self.status not in (PayoutStatus.PENDING.value, PayoutStatus.APPROVED.value):
            raise ValidationError({"status": ["Request must be pending or approved"]})

        now = datetime.now(UTC)
        self.status = PayoutStatus.PAID.value
        self.transaction_reference = transaction_reference
        if note:
            self.admin_note = note
        self.processed_by = admin_id
        self.processed_at = now
        self.raise_(
            PayoutPaid(
                payout_id=str(self.id),
                vendor_id=str(self.vendor_id),
                amount=self.amount,
                transaction_reference=transaction_reference,
                paid_by=admin_id,
                paid_at=now,
            )
        )

    def reject(self, admin_id, reason=None):
        if self.status != PayoutStatus.PENDING.value:
            raise ValidationError({"status": ["Request is not pending"]})

        now = datetime.now(UTC)
        self.status = PayoutStatus.REJECTED.value
        self.rejection_reason = reason
        self.processed_by = admin_id
        self.processed_at = now
        self.raise_(
            PayoutRejected(
                payout_id=str(self.id),
                vendor_id=str(self.vendor_id),
                reason=reason,
                rejected_by=admin_id,
                rejected_at=now,
            )
        )

    def as_dict(self):
        return {
            "payout_id": str(self.id),
            "vendor_id": str(self.vendor_id),
            "amount": self.amount,
            "status": self.status,
            "notes": self.notes,
            "admin_note": self.admin_note,
            "transaction_reference": self.transaction_reference,
            "processed_by": str(self.processed_by) if self.processed_by else None,
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
            "rejection_reason": self.rejection_reason,
            "requested_at": self.requested_at.isoformat() if self.requested_at else None,
        }
