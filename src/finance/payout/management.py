"""Payout commands — vendors request, admins approve, pay or reject."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from finance.domain import finance
from finance.payout.payout import Payout
from finance.wallet.management import DebitWallet, wallet_for
from finance.wallet.wallet import TransactionType

logger = structlog.get_logger(__name__)


@finance.command(part_of="Payout")
class RequestPayout:
    vendor_id = Identifier(required=True)
    amount = Float(required=True)
    notes = Text()


@finance.command(part_of="Payout")
class ApprovePayout:
    payout_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    note = Text()


@finance.command(part_of="Payout")
class MarkPayoutPaid:
    payout_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    transaction_reference = String(max_length=255)
    note = Text()


@finance.command(part_of="Payout")
class RejectPayout:
    payout_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    reason = Text()


def available_balance(vendor_id):
    wallet = wallet_for(vendor_id)
    return (wallet.balance or 0.0) if wallet else 0.0


def payouts(vendor_id=None, status=None):
    """Payouts newest first, optionally for one vendor or in one status."""
    filters = {}
    if vendor_id:
        filters["vendor_id"] = str(vendor_id)
    if status:
        filters["status"] = status
    query = current_domain.repository_for(Payout)._dao.query
    if filters:
        query = query.filter(**filters)
    return sorted(query.all().items, key=lambda p: p.requested_at, reverse=True)


@finance.command_handler(part_of=Payout)
class PayoutCommandHandler:
    @handle(RequestPayout)
    def request_payout(self, command):
        payout = Payout.request(
            vendor_id=command.vendor_id,
            amount=command.amount,
            available_balance=available_balance(command.vendor_id),
            notes=command.notes,
        )
        current_domain.repository_for(Payout).add(payout)
        logger.info("Payout requested", payout_id=str(payout.id), vendor_id=str(command.vendor_id), amount=payout.amount)
        return str(payout.id)

    @handle(ApprovePayout)
    def approve_payout(self, command):
        repo = current_domain.repository_for(Payout)
        payout = repo.get(command.payout_id)
        payout.approve(command.admin_id, note=command.note)
        repo.add(payout)
        logger.info("Payout approved", payout_id=str(payout.id), admin_id=str(command.admin_id))

    @handle(MarkPayoutPaid)
    def mark_payout_paid(self, command):
        repo = current_domain.repository_for(Payout)
        payout = repo.get(command.payout_id)
        payout.mark_paid(command.admin_id, command.transaction_reference, note=command.note)

        current_domain.process(
            DebitWallet(
                user_id=str(payout.vendor_id),
                amount=payout.amount,
                transaction_type=TransactionType.PAYOUT.value,
                description=f"Payout {command.transaction_reference}",
                reference_id=str(payout.id),
            ),
            asynchronous=False,
        )
        repo.add(payout)
        logger.info(
            "Payout paid",
            payout_id=str(payout.id),
            amount=payout.amount,
            transaction_reference=command.transaction_reference,
        )

    @handle(RejectPayout)
    def reject_payout(self, command):
        repo = current_domain.repository_for(Payout)
        payout = repo.get(command.payout_id)
        payout.reject(command.admin_id, reason=command.reason)
        repo.add(payout)
        logger.info("Payout rejected", payout_id=str(payout.id), reason=command.reason)
