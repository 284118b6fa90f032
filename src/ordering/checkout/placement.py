"""Checkout — turn the customer's active cart into one order per vendor.

Lines are priced from the ProductSnapshot with the customer's discount,
grouped by vendor (platform products under "admin"), and each group gets
its own VAT, commission and totals. Compliance then decides whether the
whole checkout is paid online or submitted as a purchase request.
"""

import json
import random

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.cart.management import active_cart_for
from ordering.domain import ordering
from ordering.order.compliance import assess_order
from ordering.order.group import OrderGroup
from ordering.order.order import Order, OrderType
from ordering.projections.customer_profile import CustomerProfile
from ordering.projections.product_snapshot import ProductSnapshot
from ordering.vat.rule import resolve_vat

logger = structlog.get_logger(__name__)

PLATFORM_VENDOR = "admin"


@ordering.command(part_of=OrderGroup)
class PlaceOrderGroup:
    customer_id = Identifier(required=True)
    shipping_address = Text()  # JSON object
    shipping_costs = Text()  # JSON object: vendor id (or "admin") → shipping total


def _money(value):
    return round(value, 2)


def _number_taken(number):
    orders = current_domain.repository_for(Order)._dao.query.filter(order_number=number).all().items
    if orders:
        return True
    try:
        current_domain.repository_for(OrderGroup).get(number)
        return True
    except ObjectNotFoundError:
        return False


def generate_order_number(exclude=()):
    """A random 8-digit number not used by any order or order group."""
    while True:
        number = str(random.randint(10000000, 99999999))
        if number not in exclude and not _number_taken(number):
            return number


def _customer_profile(customer_id):
    try:
        return current_domain.repository_for(CustomerProfile).get(str(customer_id))
    except ObjectNotFoundError:
        return None


def _priced_lines(cart, discount_percent):
    """Consolidate cart lines per product and price them from the snapshot."""
    snapshots = current_domain.repository_for(ProductSnapshot)
    quantities = {}
    for item in cart.items:
        key = str(item.product_id)
        quantities[key] = quantities.get(key, 0) + item.quantity

    lines, unavailable = [], []
    for product_id, quantity in quantities.items():
        try:
            snapshot = snapshots.get(product_id)
        except ObjectNotFoundError:
            unavailable.append(product_id)
            continue
        if not snapshot.is_purchasable:
            unavailable.append(snapshot.name)
            continue

        price = snapshot.price
        if discount_percent:
            price = _money(price * (1 - discount_percent / 100))
        lines.append(
            {
                "vendor_key": str(snapshot.vendor_id) if snapshot.vendor_id else PLATFORM_VENDOR,
                "vendor_country": snapshot.vendor_country,
                "item": {
                    "product_id": product_id,
                    "product_name": snapshot.name,
                    "quantity": quantity,
                    "price": price,
                    "base_price": snapshot.base_price,
                    "packing_charge": snapshot.packing_charge or 0.0,
                    "shipping_charge": snapshot.shipping_charge or 0.0,
                    "is_controlled": bool(snapshot.is_controlled),
                },
            }
        )

    if unavailable:
        raise ValidationError(
            {"cart": [f"One or more items in your cart are no longer available: {', '.join(unavailable)}"]}
        )
    return lines


def price_vendor_group(vendor_key, vendor_country, items, customer_country, shipping_override=None):
    """Totals for one vendor's share of the checkout."""
    subtotal = sum(i["price"] * i["quantity"] for i in items)
    packing = sum(i["packing_charge"] * i["quantity"] for i in items)
    if shipping_override is not None:
        shipping = float(shipping_override)
    else:
        shipping = sum(i["shipping_charge"] * i["quantity"] for i in items)

    taxable = subtotal + shipping + packing
    rates = resolve_vat(vendor_country, customer_country)
    vat_percent = rates["admin_to_customer_vat"]
    vat = taxable * vat_percent / 100

    if vendor_key == PLATFORM_VENDOR:
        commission = 0.0
    else:
        commission = subtotal - sum(i["base_price"] * i["quantity"] for i in items)

    return {
        "total_amount": _money(taxable + vat),
        "vat_amount": _money(vat),
        "vat_percent": vat_percent,
        "vendor_vat_percent": rates["vendor_to_admin_vat"],
        "admin_commission": _money(commission),
        "total_shipping": _money(shipping),
        "total_packing": _money(packing),
    }


@ordering.command_handler(part_of=OrderGroup)
class CheckoutHandler:
    @handle(PlaceOrderGroup)
    def place_order_group(self, command):
        cart = active_cart_for(customer_id=command.customer_id)
        if cart is None or not cart.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        profile = _customer_profile(command.customer_id)
        if profile and profile.is_suspended:
            raise ValidationError({"customer": ["Account is suspended"]})

        shipping_address = json.loads(command.shipping_address or "{}")
        shipping_costs = json.loads(command.shipping_costs or "{}")
        customer_country = (profile.country if profile else None) or shipping_address.get("country")
        discount_percent = (profile.discount_percent or 0.0) if profile else 0.0

        lines = _priced_lines(cart, discount_percent)

        groups = {}
        for line in lines:
            group = groups.setdefault(line["vendor_key"], {"vendor_country": line["vendor_country"], "items": []})
            group["items"].append(line["item"])

        priced = {
            key: price_vendor_group(
                key, group["vendor_country"], group["items"], customer_country, shipping_costs.get(key)
            )
            for key, group in groups.items()
        }
        grand_total = _money(sum(totals["total_amount"] for totals in priced.values()))

        compliance = assess_order(
            [
                {
                    "name": item["product_name"],
                    "is_controlled": item["is_controlled"],
                    "vendor_country": group["vendor_country"],
                }
                for group in groups.values()
                for item in group["items"]
            ],
            grand_total,
            customer_country,
        )
        order_type = OrderType.REQUEST.value if compliance["type"] == "request" else OrderType.DIRECT.value

        order_group_id = generate_order_number()
        issued = {order_group_id}
        orders = []
        for key, group in groups.items():
            if len(groups) == 1:
                order_number = order_group_id
            else:
                order_number = generate_order_number(exclude=issued)
                issued.add(order_number)

            orders.append(
                Order.place(
                    order_number=order_number,
                    order_group_id=order_group_id,
                    customer_id=command.customer_id,
                    vendor_id=None if key == PLATFORM_VENDOR else key,
                    vendor_country=group["vendor_country"],
                    items=group["items"],
                    totals=priced[key],
                    order_type=order_type,
                    shipping_address=shipping_address,
                    customer_country=customer_country,
                )
            )

        order_repo = current_domain.repository_for(Order)
        for order in orders:
            order_repo.add(order)

        cart.convert()
        current_domain.repository_for(ShoppingCart).add(cart)

        order_group = OrderGroup.place(
            order_group_id=order_group_id,
            customer_id=command.customer_id,
            customer_email=profile.email if profile else None,
            order_type=order_type,
            orders=orders,
        )
        current_domain.repository_for(OrderGroup).add(order_group)

        logger.info(
            "Order group placed",
            order_group_id=order_group_id,
            customer_id=str(command.customer_id),
            order_type=order_type,
            orders=len(orders),
            grand_total=grand_total,
        )
        return {
            "order_group_id": order_group_id,
            "order_ids": [str(order.id) for order in orders],
            "type": order_type,
            "reasons": compliance["reasons"],
            "grand_total": grand_total,
        }
