"""Wallet aggregate — one per account, with its transaction ledger.

`balance` is what the owner can withdraw. `locked_balance` holds earnings
that are still inside the product return period; each locked credit
carries its own `unlock_at` and moves to `balance` once released.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, String, Text

from finance.domain import finance
from finance.wallet.events import LockedFundsReleased, WalletCredited, WalletDebited

DEFAULT_RETURN_PERIOD_DAYS = 10


class TransactionType(Enum):
    PURCHASE = "purchase"
    COMMISSION = "commission"
    VENDOR_EARNING = "vendor_earning"
    REFUND = "refund"
    ADJUSTMENT = "adjustment"
    PAYOUT = "payout"


class TransactionDirection(Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionStatus(Enum):
    LOCKED = "locked"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


CREDIT_TYPES = (
    TransactionType.PURCHASE.value,
    TransactionType.COMMISSION.value,
    TransactionType.VENDOR_EARNING.value,
    TransactionType.REFUND.value,
    TransactionType.ADJUSTMENT.value,
)
DEBIT_TYPES = (
    TransactionType.PAYOUT.value,
    TransactionType.REFUND.value,
    TransactionType.ADJUSTMENT.value,
)


def _money(value):
    return round(value, 2)


def _aware(moment):
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


@finance.entity(part_of="Wallet")
class WalletTransaction:
    transaction_type = String(required=True, max_length=20, choices=TransactionType)
    amount = Float(required=True, min_value=0.0)
    direction = String(required=True, max_length=10, choices=TransactionDirection)
    status = String(max_length=10, choices=TransactionStatus, default=TransactionStatus.COMPLETED.value)
    description = Text()
    reference_id = String(max_length=255)
    source_user_id = Identifier()
    unlock_at = DateTime()
    created_at = DateTime()

    def as_dict(self):
        return {
            "transaction_id": str(self.id),
            "type": self.transaction_type,
            "amount": self.amount,
            "direction": self.direction,
            "status": self.status,
            "description": self.description,
            "reference_id": self.reference_id,
            "source_user_id": str(self.source_user_id) if self.source_user_id else None,
            "unlock_at": self.unlock_at.isoformat() if self.unlock_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@finance.aggregate
class Wallet:
    user_id = Identifier(required=True)
    balance = Float(default=0.0)
    locked_balance = Float(default=0.0)
    currency = String(max_length=3, default="AED")
    transactions = HasMany(WalletTransaction)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, balance=0.0, locked_balance=0.0, currency="AED", created_at=now, updated_at=now)

    def has_reference(self, transaction_type, reference_id):
        return any(
            t.transaction_type == transaction_type and t.reference_id == reference_id
            for t in self.transactions or []
        )

    def credit(
        self,
        amount,
        transaction_type,
        description=None,
        reference_id=None,
        source_user_id=None,
        locked=False,
        return_period_days=DEFAULT_RETURN_PERIOD_DAYS,
    ):
        """Add money to the wallet.

        Locked credits count towards `locked_balance` until `unlock_at`,
        which is `return_period_days` from now.
        """
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than zero"]})
        if transaction_type not in CREDIT_TYPES:
            raise ValidationError({"transaction_type": [f"Cannot credit a {transaction_type} transaction"]})

        now = datetime.now(UTC)
        amount = _money(amount)
        unlock_at = now + timedelta(days=return_period_days) if locked else None
        transaction = WalletTransaction(
            transaction_type=transaction_type,
            amount=amount,
            direction=TransactionDirection.CREDIT.value,
            status=TransactionStatus.LOCKED.value if locked else TransactionStatus.COMPLETED.value,
            description=description,
            reference_id=reference_id,
            source_user_id=source_user_id,
            unlock_at=unlock_at,
            created_at=now,
        )
        self.add_transactions(transaction)

        if locked:
            self.locked_balance = _money((self.locked_balance or 0.0) + amount)
        else:
            self.balance = _money((self.balance or 0.0) + amount)
        self.updated_at = now

        self.raise_(
            WalletCredited(
                wallet_id=str(self.id),
                user_id=str(self.user_id),
                transaction_id=str(transaction.id),
                transaction_type=transaction_type,
                amount=amount,
                locked=locked,
                reference_id=reference_id,
                description=description,
                unlock_at=unlock_at,
                credited_at=now,
            )
        )
        return transaction

    def debit(self, amount, transaction_type, description=None, reference_id=None):
        """Take money out of the available balance."""
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than zero"]})
        if transaction_type not in DEBIT_TYPES:
            raise ValidationError({"transaction_type": [f"Cannot debit a {transaction_type} transaction"]})
        if amount > (self.balance or 0.0):
            raise ValidationError({"amount": ["Insufficient funds"]})

        now = datetime.now(UTC)
        amount = _money(amount)
        transaction = WalletTransaction(
            transaction_type=transaction_type,
            amount=amount,
            direction=TransactionDirection.DEBIT.value,
            status=TransactionStatus.COMPLETED.value,
            description=description,
            reference_id=reference_id,
            created_at=now,
        )
        self.add_transactions(transaction)
        self.balance = _money(self.balance - amount)
        self.updated_at = now

        self.raise_(
            WalletDebited(
                wallet_id=str(self.id),
                user_id=str(self.user_id),
                transaction_id=str(transaction.id),
                transaction_type=transaction_type,
                amount=amount,
                reference_id=reference_id,
                description=description,
                debited_at=now,
            )
        )
        return transaction

    def release_due(self, as_of):
        """Move every locked credit whose unlock date has passed to the available balance.

        Returns the released amounts.
        """
        released = []
        for transaction in self.transactions or []:
            if transaction.status != TransactionStatus.LOCKED.value:
                continue
            if transaction.unlock_at is None or _aware(transaction.unlock_at) > _aware(as_of):
                continue

            transaction.status = TransactionStatus.COMPLETED.value
            self.locked_balance = _money(max((self.locked_balance or 0.0) - transaction.amount, 0.0))
            self.balance = _money((self.balance or 0.0) + transaction.amount)
            released.append(transaction.amount)

            self.raise_(
                LockedFundsReleased(
                    wallet_id=str(self.id),
                    user_id=str(self.user_id),
                    transaction_id=str(transaction.id),
                    amount=transaction.amount,
                    reference_id=transaction.reference_id,
                    released_at=as_of,
                )
            )

        if released:
            self.updated_at = datetime.now(UTC)
        return released

    def as_dict(self):
        return {
            "wallet_id": str(self.id),
            "user_id": str(self.user_id),
            "balance": self.balance,
            "locked_balance": self.locked_balance,
            "total_balance": _money((self.balance or 0.0) + (self.locked_balance or 0.0)),
            "currency": self.currency,
        }
