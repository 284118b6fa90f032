"""Inbound cross-domain event handler — Payments reacts to checkouts.

Every placed order is kept as a BillableOrder for invoicing. Direct-sale
groups also get a hosted checkout session; purchase requests wait for
admin approval and are invoiced manually.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from payments.domain import payments
from payments.projections.billable_order import BillableOrder
from payments.session.opening import OpenPaymentSession
from payments.session.session import PaymentSession
from shared.events.ordering import OrderGroupPlaced

logger = structlog.get_logger(__name__)

payments.register_external_event(OrderGroupPlaced, "Ordering.OrderGroupPlaced.v1")


def record_billable_orders(event):
    repo = current_domain.repository_for(BillableOrder)
    for order in json.loads(event.orders):
        try:
            billable = repo.get(order["order_id"])
        except ObjectNotFoundError:
            billable = BillableOrder(
                order_id=order["order_id"],
                order_group_id=event.order_group_id,
                customer_id=str(event.customer_id),
            )
        billable.order_number = order.get("order_number")
        billable.order_type = event.order_type
        billable.customer_email = event.customer_email
        billable.customer_country = event.customer_country
        billable.shipping_address = event.shipping_address
        billable.vendor_id = order.get("vendor_id")
        billable.vendor_country = order.get("vendor_country")
        billable.items = json.dumps(order.get("items", []))
        billable.vat_percent = order.get("vat_percent") or 0.0
        billable.vendor_vat_percent = order.get("vendor_vat_percent") or 0.0
        billable.vat_amount = order.get("vat_amount") or 0.0
        billable.admin_commission = order.get("admin_commission") or 0.0
        billable.total_amount = order.get("total_amount") or 0.0
        billable.total_shipping = order.get("total_shipping") or 0.0
        billable.total_packing = order.get("total_packing") or 0.0
        billable.currency = event.currency or "AED"
        billable.placed_at = event.placed_at
        repo.add(billable)


@payments.event_handler(part_of=PaymentSession, stream_category="ordering::order_group")
class OrderingCheckoutEventHandler:
    @handle(OrderGroupPlaced)
    def on_order_group_placed(self, event: OrderGroupPlaced) -> None:
        record_billable_orders(event)

        if event.order_type != "direct":
            logger.info("Purchase request awaits approval, no checkout session", order_group_id=event.order_group_id)
            return

        current_domain.process(
            OpenPaymentSession(
                order_group_id=event.order_group_id,
                customer_id=str(event.customer_id),
                customer_email=event.customer_email,
                orders=event.orders,
            ),
            asynchronous=False,
        )
