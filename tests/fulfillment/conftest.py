import json
from datetime import UTC, datetime

import pytest
from protean.integrations.pytest import DomainFixture
from shared.events.ordering import OrderGroupPlaced


@pytest.fixture(scope="session")
def fulfillment_bed():
    from fulfillment.domain import fulfillment

    bed = DomainFixture(fulfillment)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(fulfillment_bed):
    with fulfillment_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def carrier():
    from fulfillment.carrier import reset_carrier, set_carrier
    from fulfillment.carrier.fake_adapter import FakeCarrier

    fake = FakeCarrier()
    set_carrier(fake)
    yield fake
    reset_carrier()


SHIPPING_ADDRESS = {
    "name": "Aisha Rahman",
    "phone": "+971501234567",
    "street": "12 Marina Walk",
    "city": "Dubai",
    "postal_code": "00000",
    "country": "UAE",
}

VENDOR_ADDRESS = {"street_lines": ["Unit 7, Jebel Ali Free Zone"], "city": "Dubai", "country_code": "AE"}
VENDOR_CONTACT = {"name": "Falcon Tactical", "phone": "+971500000000"}


def group_placed(order_id="ord-1", vendor_id="vendor-1", customer_id="cust-1", shipping_address=SHIPPING_ADDRESS):
    return OrderGroupPlaced(
        order_group_id="10000001",
        customer_id=customer_id,
        customer_email="aisha@example.com",
        customer_country="UAE",
        shipping_address=json.dumps(shipping_address) if shipping_address else None,
        order_type="direct",
        orders=json.dumps(
            [
                {
                    "order_id": order_id,
                    "order_number": "10000001",
                    "vendor_id": vendor_id,
                    "vendor_country": "UAE",
                    "total_amount": 241.5,
                    "items": [{"product_id": "prod-1", "product_name": "Ballistic Vest", "quantity": 2}],
                }
            ]
        ),
        grand_total=241.5,
        currency="AED",
        placed_at=datetime.now(UTC),
    )


@pytest.fixture()
def placed_order():
    """Record a shippable order the way Ordering's checkout event does."""
    from fulfillment.projections.ordering_events import OrderingEventHandler

    def _place(**kwargs):
        OrderingEventHandler().on_order_group_placed(group_placed(**kwargs))
        return kwargs.get("order_id", "ord-1")

    return _place


@pytest.fixture()
def vendor_route():
    return {"from_address": json.dumps(VENDOR_ADDRESS), "from_contact": json.dumps(VENDOR_CONTACT)}
