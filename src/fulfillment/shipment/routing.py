"""Where a shipment goes from and to, and what it is booked as.

The platform warehouse comes from the environment. A customer's delivery
address comes from the order's shipping address unless the caller gives
one explicitly.
"""

import json
import os

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from fulfillment.carrier.port import ShipmentRequest
from fulfillment.projections.shipment_setting import shipment_defaults
from fulfillment.projections.shippable_order import ShippableOrder
from fulfillment.shipment.shipment import ShipmentLeg
from shared.regions import is_uae


def warehouse():
    """(address, contact) of the platform warehouse."""
    address = {
        "street_lines": [os.environ.get("PLATFORM_WAREHOUSE_STREET", "Warehouse 4, Al Quoz Industrial Area 3")],
        "city": os.environ.get("PLATFORM_WAREHOUSE_CITY", "Dubai"),
        "state": os.environ.get("PLATFORM_WAREHOUSE_STATE", "DU"),
        "postal_code": os.environ.get("PLATFORM_WAREHOUSE_POSTAL_CODE", "00000"),
        "country_code": os.environ.get("PLATFORM_WAREHOUSE_COUNTRY_CODE", "AE"),
    }
    contact = {
        "name": os.environ.get("PLATFORM_WAREHOUSE_CONTACT", "SouqHub Warehouse"),
        "phone": os.environ.get("PLATFORM_WAREHOUSE_PHONE", ""),
        "email": os.environ.get("PLATFORM_COMPANY_EMAIL", ""),
        "company": os.environ.get("PLATFORM_COMPANY_NAME", "SouqHub Marketplace LLC"),
    }
    return address, contact


def country_code(country):
    if not country:
        return ""
    if is_uae(country):
        return "AE"
    return str(country).strip().upper()


def from_order_address(shipping_address):
    """Split an order's shipping address into carrier (address, contact)."""
    address = {
        "street_lines": [shipping_address.get("street", "")],
        "city": shipping_address.get("city", ""),
        "state": shipping_address.get("state") or "",
        "postal_code": shipping_address.get("postal_code") or "",
        "country_code": country_code(shipping_address.get("country")),
    }
    contact = {
        "name": shipping_address.get("name") or "",
        "phone": shipping_address.get("phone") or "",
    }
    return address, contact


def _loads(raw):
    if not raw:
        return {}
    return json.loads(raw) if isinstance(raw, str) else raw


def shippable_order(order_id):
    return current_domain.repository_for(ShippableOrder).get(str(order_id))


def build_request(
    leg,
    order=None,
    from_address=None,
    from_contact=None,
    to_address=None,
    to_contact=None,
    weight_kg=1.0,
    package_count=1,
    dimensions=None,
    service_type=None,
    ship_date=None,
):
    """Assemble a ShipmentRequest for one leg, filling in warehouse and order addresses.

    Raises:
        ValidationError: when an end of the route cannot be determined.
    """
    from_address, from_contact = _loads(from_address), _loads(from_contact)
    to_address, to_contact = _loads(to_address), _loads(to_contact)
    warehouse_address, warehouse_contact = warehouse()

    if leg == ShipmentLeg.VENDOR_TO_ADMIN.value:
        if not from_address:
            raise ValidationError({"from_address": ["Pickup address is required for vendor shipments"]})
        to_address, to_contact = warehouse_address, warehouse_contact
    elif leg == ShipmentLeg.ADMIN_TO_CUSTOMER.value:
        if not from_address:
            from_address, from_contact = warehouse_address, warehouse_contact
        if not to_address:
            if order is None or not order.address:
                raise ValidationError({"to_address": ["Delivery address is required"]})
            to_address, order_contact = from_order_address(order.address)
            to_contact = to_contact or order_contact
    else:
        raise ValidationError({"leg": [f"Unknown shipment leg: {leg}"]})

    defaults = shipment_defaults()
    return ShipmentRequest(
        from_address=from_address,
        from_contact=from_contact or {},
        to_address=to_address,
        to_contact=to_contact or {},
        weight_kg=weight_kg or 1.0,
        package_count=package_count or 1,
        ship_date=ship_date,
        service_type=service_type or defaults["service_type"],
        packaging_type=defaults["packaging_type"],
        pickup_type=defaults["pickup_type"],
        dimensions=_loads(dimensions),
    )
