"""Wallet commands — opening, crediting, debiting and releasing locked funds."""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from finance.domain import finance
from finance.projections.platform_setting import return_period_days
from finance.wallet.wallet import Wallet

logger = structlog.get_logger(__name__)


@finance.command(part_of="Wallet")
class EnsureWallet:
    user_id = Identifier(required=True)


@finance.command(part_of="Wallet")
class CreditWallet:
    user_id = Identifier(required=True)
    amount = Float(required=True)
    transaction_type = String(required=True, max_length=20)
    description = Text()
    reference_id = String(max_length=255)
    source_user_id = Identifier()
    locked = Boolean(default=False)


@finance.command(part_of="Wallet")
class DebitWallet:
    user_id = Identifier(required=True)
    amount = Float(required=True)
    transaction_type = String(required=True, max_length=20)
    description = Text()
    reference_id = String(max_length=255)


@finance.command(part_of="Wallet")
class ReleaseLockedFunds:
    as_of = DateTime()


def wallet_for(user_id):
    """The user's wallet, or None when nothing was ever credited."""
    wallets = current_domain.repository_for(Wallet)._dao.query.filter(user_id=str(user_id)).all().items
    return wallets[0] if wallets else None


def ensure_wallet(user_id):
    wallet = wallet_for(user_id)
    if wallet is None:
        wallet = Wallet.open(user_id=str(user_id))
        current_domain.repository_for(Wallet).add(wallet)
        logger.info("Wallet opened", user_id=str(user_id))
    return wallet


def transactions_for(user_id, transaction_type=None):
    """The wallet's transactions, newest first."""
    wallet = wallet_for(user_id)
    if wallet is None:
        return []
    transactions = [
        t for t in wallet.transactions or [] if transaction_type is None or t.transaction_type == transaction_type
    ]
    return sorted(transactions, key=lambda t: t.created_at, reverse=True)


@finance.command_handler(part_of=Wallet)
class WalletCommandHandler:
    @handle(EnsureWallet)
    def ensure_wallet(self, command):
        return str(ensure_wallet(command.user_id).id)

    @handle(CreditWallet)
    def credit_wallet(self, command):
        wallet = ensure_wallet(command.user_id)
        transaction = wallet.credit(
            command.amount,
            command.transaction_type,
            description=command.description,
            reference_id=command.reference_id,
            source_user_id=command.source_user_id,
            locked=command.locked,
            return_period_days=return_period_days(),
        )
        current_domain.repository_for(Wallet).add(wallet)

        logger.info(
            "Wallet credited",
            user_id=str(command.user_id),
            amount=transaction.amount,
            transaction_type=command.transaction_type,
            locked=command.locked,
        )
        return str(transaction.id)

    @handle(DebitWallet)
    def debit_wallet(self, command):
        wallet = ensure_wallet(command.user_id)
        transaction = wallet.debit(
            command.amount,
            command.transaction_type,
            description=command.description,
            reference_id=command.reference_id,
        )
        current_domain.repository_for(Wallet).add(wallet)

        logger.info(
            "Wallet debited",
            user_id=str(command.user_id),
            amount=transaction.amount,
            transaction_type=command.transaction_type,
        )
        return str(transaction.id)

    @handle(ReleaseLockedFunds)
    def release_locked_funds(self, command):
        as_of = command.as_of or datetime.now(UTC)
        repo = current_domain.repository_for(Wallet)

        processed, total = 0, 0.0
        for wallet in repo._dao.query.all().items:
            released = wallet.release_due(as_of)
            if not released:
                continue
            repo.add(wallet)
            processed += len(released)
            total += sum(released)

        logger.info("Locked funds released", processed=processed, total=round(total, 2))
        return {"processed": processed, "total": round(total, 2)}

