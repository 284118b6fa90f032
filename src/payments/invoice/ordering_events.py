"""Inbound cross-domain event handler — vendor invoices on delivery.

When an order reaches the customer, the vendor's invoice to the platform
is issued for it. Platform-sold orders have no vendor and no such invoice.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from payments.domain import payments
from payments.invoice.generation import GenerateAdminInvoice
from payments.invoice.invoice import Invoice
from payments.projections.billable_order import BillableOrder
from shared.events.ordering import OrderDelivered

logger = structlog.get_logger(__name__)

payments.register_external_event(OrderDelivered, "Ordering.OrderDelivered.v1")


@payments.event_handler(part_of=Invoice, stream_category="ordering::order")
class OrderDeliveredEventHandler:
    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        repo = current_domain.repository_for(BillableOrder)
        try:
            order = repo.get(str(event.order_id))
        except ObjectNotFoundError:
            order = BillableOrder(
                order_id=str(event.order_id),
                order_group_id=event.order_group_id,
                customer_id=str(event.customer_id),
            )
        order.order_number = event.order_number
        order.vendor_id = event.vendor_id
        order.vendor_country = event.vendor_country
        order.vendor_vat_percent = event.vendor_vat_percent or 0.0
        order.customer_country = event.customer_country
        order.items = event.items or json.dumps([])
        order.total_amount = event.total_amount
        order.vat_amount = event.vat_amount or 0.0
        order.admin_commission = event.admin_commission or 0.0
        order.total_shipping = event.total_shipping or 0.0
        order.total_packing = event.total_packing or 0.0
        order.invoice_comments = event.invoice_comments
        order.delivered_at = event.delivered_at
        repo.add(order)

        if not event.vendor_id:
            return

        logger.info("Issuing vendor invoice for delivered order", order_id=str(event.order_id))
        current_domain.process(
            GenerateAdminInvoice(order_id=str(event.order_id), comments=event.invoice_comments),
            asynchronous=False,
        )
