import json
from datetime import UTC, datetime

import pytest
from protean.integrations.pytest import DomainFixture
from shared.events.ordering import OrderDelivered, OrderGroupPlaced


@pytest.fixture(scope="session")
def payments_bed():
    from payments.domain import payments

    bed = DomainFixture(payments)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(payments_bed):
    with payments_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def gateway():
    from payments.gateway import reset_gateway, set_gateway
    from payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


ITEM = {
    "product_id": "prod-1",
    "product_name": "Ballistic Vest",
    "quantity": 2,
    "price": 100.0,
    "base_price": 90.0,
    "packing_charge": 0.0,
    "shipping_charge": 0.0,
    "is_controlled": False,
}


def order_summary(order_id="ord-1", order_number="10000001", vendor_id="vendor-1", **overrides):
    summary = {
        "order_id": order_id,
        "order_number": order_number,
        "vendor_id": vendor_id,
        "vendor_country": "UAE",
        "vat_percent": 5.0,
        "vendor_vat_percent": 5.0,
        "vat_amount": 11.5,
        "admin_commission": 20.0,
        "total_amount": 241.5,
        "total_shipping": 10.0,
        "total_packing": 20.0,
        "items": [ITEM],
    }
    summary.update(overrides)
    return summary


def group_placed(orders=None, order_type="direct", order_group_id="10000001", customer_id="cust-1"):
    orders = orders if orders is not None else [order_summary()]
    return OrderGroupPlaced(
        order_group_id=order_group_id,
        customer_id=customer_id,
        customer_email="aisha@example.com",
        customer_country="UAE",
        shipping_address=json.dumps(
            {"name": "Aisha Rahman", "street": "12 Marina Walk", "city": "Dubai", "country": "UAE"}
        ),
        order_type=order_type,
        orders=json.dumps(orders),
        grand_total=round(sum(o["total_amount"] for o in orders), 2),
        currency="AED",
        placed_at=datetime.now(UTC),
    )


def order_delivered(order_id="ord-1", vendor_id="vendor-1", **overrides):
    fields = {
        "order_id": order_id,
        "order_number": "10000001",
        "order_group_id": "10000001",
        "vendor_id": vendor_id,
        "vendor_country": "UAE",
        "vendor_vat_percent": 5.0,
        "customer_id": "cust-1",
        "customer_country": "UAE",
        "items": json.dumps([ITEM]),
        "total_amount": 241.5,
        "vat_amount": 11.5,
        "admin_commission": 20.0,
        "total_shipping": 10.0,
        "total_packing": 20.0,
        "invoice_comments": "Delivered in two boxes",
        "delivered_at": datetime.now(UTC),
    }
    fields.update(overrides)
    return OrderDelivered(**fields)


@pytest.fixture()
def placed():
    """Builder for OrderGroupPlaced events."""
    return group_placed


@pytest.fixture()
def summary():
    """Builder for one order entry of OrderGroupPlaced.orders."""
    return order_summary


@pytest.fixture()
def delivered():
    """Builder for OrderDelivered events."""
    return order_delivered
