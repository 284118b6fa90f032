"""Inbound cross-domain event handler — vendor earnings on dispatch.

When a paid vendor order leaves the vendor, the vendor's share (the order
total less the platform commission) is credited to their wallet, locked
for the return period.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from finance.domain import finance
from finance.projections.platform_setting import commission_percent
from finance.wallet.management import CreditWallet, wallet_for
from finance.wallet.wallet import TransactionType, Wallet
from shared.events.ordering import VendorOrderDispatched

logger = structlog.get_logger(__name__)

finance.register_external_event(VendorOrderDispatched, "Ordering.VendorOrderDispatched.v1")


def vendor_earning(total_amount, commission_rate):
    return round(total_amount - total_amount * commission_rate / 100, 2)


@finance.event_handler(part_of=Wallet, stream_category="ordering::order")
class VendorEarningEventHandler:
    @handle(VendorOrderDispatched)
    def on_vendor_order_dispatched(self, event: VendorOrderDispatched) -> None:
        reference = str(event.order_id)
        wallet = wallet_for(event.vendor_id)
        if wallet is not None and wallet.has_reference(TransactionType.VENDOR_EARNING.value, reference):
            logger.info("Vendor earning already credited", order_id=reference)
            return

        amount = vendor_earning(event.total_amount or 0.0, commission_percent())
        if amount <= 0:
            logger.warning("Dispatched order has no vendor earning", order_id=reference, total=event.total_amount)
            return

        current_domain.process(
            CreditWallet(
                user_id=str(event.vendor_id),
                amount=amount,
                transaction_type=TransactionType.VENDOR_EARNING.value,
                description=f"Earning for Order #{event.order_number}",
                reference_id=reference,
                source_user_id=str(event.customer_id),
                locked=True,
            ),
            asynchronous=False,
        )
