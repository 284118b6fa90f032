"""Financial log — a flat, append-only record of every wallet movement."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from finance.domain import finance
from finance.wallet.events import LockedFundsReleased, WalletCredited, WalletDebited
from finance.wallet.wallet import Wallet


@finance.projection
class FinancialLog:
    entry_id: Identifier(identifier=True, required=True)
    user_id: Identifier(required=True)
    transaction_id: Identifier(required=True)
    entry_type: String(required=True, max_length=10)  # credit | debit | release
    category: String(max_length=20)
    amount: Float(required=True)
    reference_id: String(max_length=255)
    description: Text()
    recorded_at: DateTime()


@finance.projector(projector_for=FinancialLog, aggregates=[Wallet])
class FinancialLogProjector:
    def _record(self, event, entry_type, category, recorded_at, description=None):
        current_domain.repository_for(FinancialLog).add(
            FinancialLog(
                entry_id=f"{event.transaction_id}:{entry_type}",
                user_id=str(event.user_id),
                transaction_id=str(event.transaction_id),
                entry_type=entry_type,
                category=category,
                amount=event.amount,
                reference_id=event.reference_id,
                description=description,
                recorded_at=recorded_at,
            )
        )

    @on(WalletCredited)
    def on_wallet_credited(self, event):
        self._record(event, "credit", event.transaction_type, event.credited_at, event.description)

    @on(WalletDebited)
    def on_wallet_debited(self, event):
        self._record(event, "debit", event.transaction_type, event.debited_at, event.description)

    @on(LockedFundsReleased)
    def on_locked_funds_released(self, event):
        self._record(event, "release", "vendor_earning", event.released_at, "Return period ended")


def financial_logs_for(user_id):
    logs = current_domain.repository_for(FinancialLog)._dao.query.filter(user_id=str(user_id)).all().items
    return sorted(logs, key=lambda log: log.recorded_at, reverse=True)
