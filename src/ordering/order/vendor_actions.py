"""Vendor decisions on their own orders — approve, reject, ship."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class VendorApproveOrder:
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    invoice_comments = Text(sanitize=False)


@ordering.command(part_of="Order")
class VendorRejectOrder:
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    reason = Text()


@ordering.command(part_of="Order")
class VendorFulfillOrder:
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    tracking_number = String(max_length=255)


@ordering.command_handler(part_of=Order)
class VendorOrderHandler:
    @handle(VendorApproveOrder)
    def approve(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.vendor_approve(command.vendor_id, invoice_comments=command.invoice_comments)
        repo.add(order)
        logger.info("Order approved by vendor", order_id=str(order.id), vendor_id=str(command.vendor_id))

    @handle(VendorRejectOrder)
    def reject(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.vendor_reject(command.vendor_id, reason=command.reason)
        repo.add(order)
        logger.info("Order rejected by vendor", order_id=str(order.id), vendor_id=str(command.vendor_id))

    @handle(VendorFulfillOrder)
    def fulfil(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.vendor_fulfil(command.vendor_id, tracking_number=command.tracking_number)
        repo.add(order)
        logger.info(
            "Order shipped by vendor",
            order_id=str(order.id),
            vendor_id=str(command.vendor_id),
            paid=order.is_paid,
        )
