"""A vendor books the first carrier leg of a paid order.

Fulfillment records the label, Ordering marks the parcel as handed over by
the vendor, and Finance credits the vendor's locked earning.
"""

import json
from datetime import UTC, datetime

from finance.wallet.management import transactions_for, wallet_for
from finance.wallet.ordering_events import VendorEarningEventHandler
from fulfillment.projections.ordering_events import OrderingEventHandler
from fulfillment.shipment.creation import CreateShipment
from ordering.order.fulfillment_events import FulfillmentEventsHandler
from ordering.order.order import Order, PaymentStatus
from protean.utils.globals import current_domain
from shared.events.fulfillment import ShipmentDelivered, ShipmentLabelCreated
from shared.events.ordering import OrderGroupPlaced, VendorOrderDispatched

SHIPPING_ADDRESS = {"name": "Aisha Rahman", "street": "12 Marina Walk", "city": "Dubai", "country": "UAE"}
VENDOR_ADDRESS = {"street_lines": ["Unit 7, Jebel Ali Free Zone"], "city": "Dubai", "country_code": "AE"}
VENDOR_CONTACT = {"name": "Falcon Tactical", "phone": "+971500000000"}


def _paid_vendor_order():
    order = Order.place(
        order_number="30000001",
        order_group_id="30000001",
        customer_id="cust-1",
        vendor_id="vendor-1",
        vendor_country="UAE",
        items=[{"product_id": "prod-1", "product_name": "Ballistic Vest", "quantity": 1, "price": 100.0}],
        totals={"total_amount": 105.0, "vat_amount": 5.0, "vat_percent": 5.0, "admin_commission": 10.0},
        order_type="direct",
        shipping_address=SHIPPING_ADDRESS,
        customer_country="UAE",
    )
    order.record_payment(PaymentStatus.PAID.value, transaction_ref="cs_test_1")
    current_domain.repository_for(Order).add(order)
    return str(order.id)


def _book_vendor_leg(order_id):
    OrderingEventHandler().on_order_group_placed(
        OrderGroupPlaced(
            order_group_id="30000001",
            customer_id="cust-1",
            customer_email="aisha@example.com",
            customer_country="UAE",
            shipping_address=json.dumps(SHIPPING_ADDRESS),
            order_type="direct",
            orders=json.dumps(
                [
                    {
                        "order_id": order_id,
                        "order_number": "30000001",
                        "vendor_id": "vendor-1",
                        "vendor_country": "UAE",
                        "total_amount": 105.0,
                        "items": [{"product_id": "prod-1", "product_name": "Ballistic Vest", "quantity": 1}],
                    }
                ]
            ),
            grand_total=105.0,
            currency="AED",
            placed_at=datetime.now(UTC),
        )
    )
    return current_domain.process(
        CreateShipment(
            order_id=order_id,
            leg="vendor_to_admin",
            requested_by_vendor="vendor-1",
            from_address=json.dumps(VENDOR_ADDRESS),
            from_contact=json.dumps(VENDOR_CONTACT),
        ),
        asynchronous=False,
    )


def _label_contract(payload):
    return ShipmentLabelCreated(
        shipment_id=payload["shipment_id"],
        order_id=payload["order_id"],
        carrier=payload["carrier"],
        tracking_number=payload["tracking_number"],
        label_url=payload.get("label_url"),
        carrier_shipment_id=payload.get("carrier_shipment_id"),
        leg=payload["leg"],
        created_at=payload["created_at"],
    )


def _dispatch_contract(payload):
    return VendorOrderDispatched(
        order_id=payload["order_id"],
        order_number=payload["order_number"],
        vendor_id=payload["vendor_id"],
        customer_id=payload["customer_id"],
        total_amount=payload["total_amount"],
        dispatched_at=payload["dispatched_at"],
    )


def test_vendor_leg_dispatches_order_and_credits_locked_earning(
    ordering_bed, fulfillment_bed, finance_bed, stored_events
):
    with ordering_bed.domain_context():
        order_id = _paid_vendor_order()

        with fulfillment_bed.domain_context():
            _book_vendor_leg(order_id)
            labels = stored_events("fulfillment::shipment", "Fulfillment.ShipmentLabelCreated.v1")

        assert len(labels) == 1
        assert labels[0]["leg"] == "vendor_to_admin"

        FulfillmentEventsHandler().on_label_created(_label_contract(labels[0]))

        order = current_domain.repository_for(Order).get(order_id)
        assert order.shipment_status == "vendor_shipped"
        dispatched = stored_events("ordering::order", "Ordering.VendorOrderDispatched.v1")
        assert len(dispatched) == 1
        assert not stored_events("ordering::order", "Ordering.OrderDelivered.v1")

        with finance_bed.domain_context():
            VendorEarningEventHandler().on_vendor_order_dispatched(_dispatch_contract(dispatched[0]))

            wallet = wallet_for("vendor-1")
            assert wallet.locked_balance == 94.5
            assert wallet.balance == 0.0
            transaction = transactions_for("vendor-1")[0]
            assert transaction.transaction_type == "vendor_earning"
            assert transaction.status == "locked"
            assert transaction.reference_id == order_id


def test_vendor_leg_arrival_at_warehouse_does_not_deliver_the_order(ordering_bed, stored_events):
    with ordering_bed.domain_context():
        order_id = _paid_vendor_order()
        handler = FulfillmentEventsHandler()
        handler.on_label_created(
            ShipmentLabelCreated(
                shipment_id="shp-1",
                order_id=order_id,
                carrier="fake",
                tracking_number="FAKE-0001",
                leg="vendor_to_admin",
                created_at=datetime.now(UTC),
            )
        )
        handler.on_shipment_delivered(
            ShipmentDelivered(
                shipment_id="shp-1",
                order_id=order_id,
                tracking_number="FAKE-0001",
                leg="vendor_to_admin",
                delivered_at=datetime.now(UTC),
            )
        )

        assert current_domain.repository_for(Order).get(order_id).shipment_status == "admin_received"
        assert not stored_events("ordering::order", "Ordering.OrderDelivered.v1")
