"""Domain tests for the Order aggregate and its three status machines."""

import pytest
from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    VendorOrderDispatched,
)
from ordering.order.order import Order, OrderStatus, PaymentStatus, ShipmentStatus
from protean.exceptions import ValidationError
from shared.access import AccessDenied

TOTALS = {
    "total_amount": 241.5,
    "vat_amount": 11.5,
    "vat_percent": 5.0,
    "admin_commission": 20.0,
    "total_shipping": 20.0,
    "total_packing": 10.0,
}


def _item(**overrides):
    item = {
        "product_id": "prod-1",
        "product_name": "Fire Extinguisher 6kg",
        "quantity": 2,
        "price": 100.0,
        "base_price": 90.0,
        "packing_charge": 5.0,
        "shipping_charge": 10.0,
        "is_controlled": False,
    }
    item.update(overrides)
    return item


def _order(order_type="direct", vendor_id="vendor-1", customer_country="UAE", items=None):
    order = Order.place(
        order_number="12345678",
        order_group_id="12345678",
        customer_id="cust-1",
        vendor_id=vendor_id,
        vendor_country="UAE",
        items=items or [_item()],
        totals=TOTALS,
        order_type=order_type,
        shipping_address={"street": "12 Marina Walk", "city": "Dubai", "country": "UAE"},
        customer_country=customer_country,
    )
    order._events.clear()
    return order


def _paid_order(**kwargs):
    order = _order(**kwargs)
    order.record_payment(PaymentStatus.PAID.value, transaction_ref="cs_test_1")
    order._events.clear()
    return order


class TestPlacement:
    def test_direct_order_starts_pending_payment(self):
        order = Order.place(
            order_number="11111111",
            order_group_id="11111111",
            customer_id="cust-1",
            vendor_id="vendor-1",
            vendor_country="UAE",
            items=[_item()],
            totals=TOTALS,
            order_type="direct",
            shipping_address={},
            customer_country="UAE",
        )

        assert order.order_status == OrderStatus.ORDER_RECEIVED.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.shipment_status == ShipmentStatus.PENDING.value
        assert order.currency == "AED"
        assert order.history[0].note == "Order placed"
        assert isinstance(order._events[0], OrderPlaced)

    def test_purchase_request_has_no_payment_status(self):
        order = _order(order_type="request")

        assert order.payment_status is None
        assert order.history[0].note == "Purchase request submitted"


class TestPayment:
    def test_paid_payment_appends_stripe_note(self):
        order = _paid_order()

        assert order.is_paid
        assert order.transaction_ref == "cs_test_1"
        assert order.history[0].note == "Payment verified via Stripe"

    def test_failed_payment_note(self):
        order = _order()
        order.record_payment("failed")

        assert order.payment_status == PaymentStatus.FAILED.value
        assert order.history[0].note == "Payment attempt failed/incomplete"

    def test_paid_order_never_downgraded(self):
        order = _paid_order()
        order.record_payment("failed")

        assert order.payment_status == PaymentStatus.PAID.value


class TestVendorActions:
    def test_vendor_must_own_the_order(self):
        order = _order()
        with pytest.raises(AccessDenied):
            order.vendor_approve("vendor-2")

    def test_vendor_approval_keeps_invoice_comments(self):
        order = _order()
        order.vendor_approve("vendor-1", invoice_comments="Deliver to gate 3")

        assert order.order_status == OrderStatus.VENDOR_APPROVED.value
        assert order.invoice_comments == "Deliver to gate 3"

    def test_shipping_a_paid_order_dispatches_earnings(self):
        order = _paid_order()
        order.vendor_fulfil("vendor-1", tracking_number="TRK-1")

        assert order.shipment_status == ShipmentStatus.VENDOR_SHIPPED.value
        dispatched = [e for e in order._events if isinstance(e, VendorOrderDispatched)]
        assert len(dispatched) == 1
        assert dispatched[0].total_amount == 241.5

    def test_shipping_an_unpaid_order_does_not_dispatch_earnings(self):
        order = _order()
        order.vendor_fulfil("vendor-1")

        assert not any(isinstance(e, VendorOrderDispatched) for e in order._events)

    def test_rejected_order_cannot_ship(self):
        order = _order()
        order.vendor_reject("vendor-1", reason="Out of stock")
        with pytest.raises(ValidationError):
            order.vendor_fulfil("vendor-1")


class TestTransitions:
    def test_order_status_cannot_leave_a_terminal_state(self):
        order = _order()
        order.admin_update("admin-1", order_status="rejected")
        with pytest.raises(ValidationError):
            order.admin_update("admin-1", order_status="approved")

    def test_vendor_rejected_cannot_be_approved(self):
        order = _order()
        order.vendor_reject("vendor-1")
        with pytest.raises(ValidationError):
            order.admin_update("admin-1", order_status="approved")

    def test_shipment_moves_forward_only(self):
        order = _paid_order()
        order.admin_update("admin-1", shipment_status="processing")
        with pytest.raises(ValidationError):
            order.admin_update("admin-1", shipment_status="admin_received")

    def test_returned_only_after_shipping(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.admin_update("admin-1", shipment_status="returned")

        order.admin_update("admin-1", shipment_status="shipped")
        order.admin_update("admin-1", shipment_status="returned")
        assert order.shipment_status == ShipmentStatus.RETURNED.value

    def test_delivery_emits_order_delivered(self):
        order = _paid_order()
        order.admin_update("admin-1", shipment_status="delivered", tracking_number="TRK-9")

        delivered = [e for e in order._events if isinstance(e, OrderDelivered)]
        assert len(delivered) == 1
        assert delivered[0].order_group_id == "12345678"

    def test_invalid_transition_leaves_order_untouched(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.admin_update("admin-1", order_status="approved", shipment_status="returned")

        assert order.order_status == OrderStatus.ORDER_RECEIVED.value

    def test_admin_update_prepends_history(self):
        order = _order()
        order.admin_update("admin-1", order_status="approved", note="Looks good")

        assert order.history[0].note == "Looks good"
        assert order.history[0].changed_by == "admin-1"
        assert order.history[0].order_status == OrderStatus.APPROVED.value
        assert len(order.history) == 2


class TestCancellation:
    def test_cancel_before_shipping(self):
        order = _order()
        order.cancel(reason="Changed my mind", cancelled_by="cust-1")

        assert order.order_status == OrderStatus.CANCELLED.value
        assert order.shipment_status == ShipmentStatus.CANCELLED.value
        assert any(isinstance(e, OrderCancelled) for e in order._events)

    def test_shipped_orders_cannot_be_cancelled(self):
        order = _order()
        order.admin_update("admin-1", shipment_status="shipped")
        with pytest.raises(ValidationError):
            order.cancel()


class TestControlledRouting:
    def test_controlled_goods_to_uae_customer(self):
        order = _order(items=[_item(is_controlled=True)], customer_country="United Arab Emirates")
        assert order.ships_controlled_goods_to_uae

    def test_controlled_goods_abroad(self):
        order = _order(items=[_item(is_controlled=True)], customer_country="Oman")
        assert not order.ships_controlled_goods_to_uae


class TestCarrierLegs:
    def test_vendor_leg_label_dispatches_earnings(self):
        order = _paid_order()
        order.record_label("794600000010", shipment_id="FDX-10", leg="vendor_to_admin")

        assert order.shipment_status == ShipmentStatus.VENDOR_SHIPPED.value
        assert order.tracking_number is None
        assert len([e for e in order._events if isinstance(e, VendorOrderDispatched)]) == 1

    def test_vendor_leg_delivery_reaches_the_warehouse_only(self):
        order = _paid_order()
        order.record_label("794600000010", leg="vendor_to_admin")
        order.mark_delivered(leg="vendor_to_admin")

        assert order.shipment_status == ShipmentStatus.ADMIN_RECEIVED.value
        assert not any(isinstance(e, OrderDelivered) for e in order._events)
        assert order.history[0].note == "Received at warehouse"

    def test_vendor_leg_label_after_vendor_shipped_keeps_status(self):
        order = _paid_order()
        order.vendor_fulfil("vendor-1")
        order._events.clear()

        order.record_label("794600000010", leg="vendor_to_admin")

        assert order.shipment_status == ShipmentStatus.VENDOR_SHIPPED.value
        assert not any(isinstance(e, VendorOrderDispatched) for e in order._events)

    def test_vendor_can_still_ship_after_vendor_leg_label(self):
        order = _paid_order()
        order.record_label("794600000010", leg="vendor_to_admin")

        order.vendor_fulfil("vendor-1")

        assert order.shipment_status == ShipmentStatus.VENDOR_SHIPPED.value

    def test_customer_leg_ships_then_delivers(self):
        order = _paid_order()
        order.mark_delivered(leg="vendor_to_admin")
        order.record_label("794600000020", shipment_id="FDX-20", label_url="https://labels/20.pdf")

        assert order.shipment_status == ShipmentStatus.SHIPPED.value
        assert order.tracking_number == "794600000020"

        order.mark_delivered()
        assert order.shipment_status == ShipmentStatus.DELIVERED.value
        assert len([e for e in order._events if isinstance(e, OrderDelivered)]) == 1

    def test_late_vendor_leg_delivery_never_moves_back(self):
        order = _paid_order()
        order.record_label("794600000020")

        order.mark_delivered(leg="vendor_to_admin")

        assert order.shipment_status == ShipmentStatus.SHIPPED.value


class TestRepeatedCancellation:
    def test_second_cancel_is_a_no_op(self):
        order = _order()
        order.cancel(reason="Changed my mind", cancelled_by="cust-1")
        history = len(order.history)

        order.cancel(reason="Again", cancelled_by="cust-1")

        assert len(order.history) == history
        assert len([e for e in order._events if isinstance(e, OrderCancelled)]) == 1
