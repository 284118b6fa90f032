"""Opening a hosted checkout session for a direct-sale order group.

Each order contributes its items at the VAT-inclusive unit price, plus one
shipping and one packing line when those are charged. Amounts are sent to
the gateway in fils (1/100 AED).
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from payments.domain import payments
from payments.gateway import checkout_urls, get_gateway
from payments.session.session import PaymentSession

logger = structlog.get_logger(__name__)


@payments.command(part_of="PaymentSession")
class OpenPaymentSession:
    order_group_id = String(required=True, max_length=8)
    customer_id = Identifier(required=True)
    customer_email = String(max_length=254)
    orders = Text(required=True)  # JSON list, as carried by OrderGroupPlaced


def _with_vat(amount, vat_percent):
    return round(amount * (1 + (vat_percent or 0) / 100) * 100)


def build_line_items(orders):
    """Gateway line items for every order in a group."""
    line_items = []
    for order in orders:
        vat_percent = order.get("vat_percent") or 0
        for item in order.get("items", []):
            line_items.append(
                {
                    "name": item.get("product_name") or "Product",
                    "unit_amount": _with_vat(item["price"], vat_percent),
                    "quantity": item["quantity"],
                }
            )
        if (order.get("total_shipping") or 0) > 0:
            line_items.append(
                {
                    "name": "Shipping Charges",
                    "unit_amount": _with_vat(order["total_shipping"], vat_percent),
                    "quantity": 1,
                }
            )
        if (order.get("total_packing") or 0) > 0:
            line_items.append(
                {
                    "name": "Packing Charges",
                    "unit_amount": _with_vat(order["total_packing"], vat_percent),
                    "quantity": 1,
                }
            )
    return line_items


def session_for_group(order_group_id):
    sessions = (
        current_domain.repository_for(PaymentSession)
        ._dao.query.filter(order_group_id=str(order_group_id))
        .all()
        .items
    )
    return sessions[0] if sessions else None


def create_gateway_session(order_group_id, line_items, customer_email):
    """Ask the gateway for a hosted checkout page for this group."""
    success_url, cancel_url = checkout_urls(order_group_id)
    return get_gateway().create_checkout_session(
        line_items=line_items,
        metadata={"orderGroupId": order_group_id},
        customer_email=customer_email,
        success_url=success_url,
        cancel_url=cancel_url,
    )


@payments.command_handler(part_of=PaymentSession)
class OpenPaymentSessionHandler:
    @handle(OpenPaymentSession)
    def open_payment_session(self, command):
        existing = session_for_group(command.order_group_id)
        if existing is not None:
            logger.info("Payment session already open", order_group_id=command.order_group_id)
            return str(existing.id)

        orders = json.loads(command.orders)
        line_items = build_line_items(orders)
        amount = round(sum(order.get("total_amount") or 0 for order in orders), 2)

        try:
            gateway_session = create_gateway_session(command.order_group_id, line_items, command.customer_email)
        except Exception:
            logger.exception("Checkout session could not be created", order_group_id=command.order_group_id)
            gateway_session = None

        session = PaymentSession.open(
            order_group_id=command.order_group_id,
            customer_id=command.customer_id,
            customer_email=command.customer_email,
            order_ids=[order["order_id"] for order in orders],
            line_items=line_items,
            amount=amount,
            gateway_session=gateway_session,
        )
        current_domain.repository_for(PaymentSession).add(session)

        logger.info(
            "Payment session opened",
            order_group_id=command.order_group_id,
            session_id=session.session_id,
            status=session.status,
            amount=amount,
        )
        return str(session.id)
