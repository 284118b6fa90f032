"""Order aggregate — one vendor's share of a checkout.

Every order carries three independent statuses. The order status records
the approval decision, the payment status follows the hosted checkout, and
the shipment status follows the parcel from the vendor to the customer.
Each change prepends an entry to the status history.

Order status:
    ORDER_RECEIVED → VENDOR_APPROVED / VENDOR_REJECTED → APPROVED / REJECTED
    CANCELLED (from any non-terminal status)

Shipment status:
    PENDING → VENDOR_SHIPPED → ADMIN_RECEIVED → PROCESSING → SHIPPED → DELIVERED
    RETURNED (from SHIPPED or DELIVERED), CANCELLED (before SHIPPED)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPaymentStatusChanged,
    OrderPlaced,
    OrderShipmentStatusChanged,
    OrderStatusChanged,
    VendorOrderDispatched,
)
from shared.access import AccessDenied
from shared.regions import is_uae


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    ORDER_RECEIVED = "order_received"
    VENDOR_APPROVED = "vendor_approved"
    VENDOR_REJECTED = "vendor_rejected"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class ShipmentStatus(Enum):
    PENDING = "pending"
    VENDOR_SHIPPED = "vendor_shipped"
    ADMIN_RECEIVED = "admin_received"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    RETURNED = "returned"
    CANCELLED = "cancelled"


class OrderType(Enum):
    DIRECT = "direct"
    REQUEST = "request"


# Carrier legs as reported by Fulfillment
VENDOR_LEG = "vendor_to_admin"
CUSTOMER_LEG = "admin_to_customer"


# State machine transition map
_ORDER_TRANSITIONS = {
    OrderStatus.ORDER_RECEIVED: {
        OrderStatus.VENDOR_APPROVED,
        OrderStatus.VENDOR_REJECTED,
        OrderStatus.APPROVED,
        OrderStatus.REJECTED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.VENDOR_APPROVED: {OrderStatus.APPROVED, OrderStatus.REJECTED, OrderStatus.CANCELLED},
    OrderStatus.VENDOR_REJECTED: {OrderStatus.REJECTED, OrderStatus.CANCELLED},
    OrderStatus.APPROVED: {OrderStatus.CANCELLED},
    OrderStatus.REJECTED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Forward path of a parcel; a shipment may skip ahead but never go back
_SHIPMENT_PATH = [
    ShipmentStatus.PENDING,
    ShipmentStatus.VENDOR_SHIPPED,
    ShipmentStatus.ADMIN_RECEIVED,
    ShipmentStatus.PROCESSING,
    ShipmentStatus.SHIPPED,
    ShipmentStatus.DELIVERED,
]


def _shipment_transitions(current):
    if current in _SHIPMENT_PATH:
        position = _SHIPMENT_PATH.index(current)
        allowed = set(_SHIPMENT_PATH[position + 1 :])
        if current in (ShipmentStatus.SHIPPED, ShipmentStatus.DELIVERED):
            allowed.add(ShipmentStatus.RETURNED)
        if position < _SHIPMENT_PATH.index(ShipmentStatus.SHIPPED):
            allowed.add(ShipmentStatus.CANCELLED)
        return allowed
    return set()  # RETURNED and CANCELLED are terminal


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A product line priced at checkout; later catalogue changes never touch it."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)  # Customer unit price, discount applied
    base_price = Float(default=0.0)  # Vendor unit price
    packing_charge = Float(default=0.0)
    shipping_charge = Float(default=0.0)
    is_controlled = Boolean(default=False)

    def as_dict(self):
        return {
            "product_id": str(self.product_id),
            "product_name": self.product_name,
            "quantity": self.quantity,
            "price": self.price,
            "base_price": self.base_price,
            "packing_charge": self.packing_charge,
            "shipping_charge": self.shipping_charge,
            "is_controlled": self.is_controlled,
        }


@ordering.entity(part_of="Order")
class StatusHistoryEntry:
    sequence = Integer(default=0)
    order_status = String(max_length=30)
    payment_status = String(max_length=30)
    shipment_status = String(max_length=30)
    note = Text()
    changed_by = String(max_length=50)
    created_at = DateTime()

    def as_dict(self):
        return {
            "order_status": self.order_status,
            "payment_status": self.payment_status,
            "shipment_status": self.shipment_status,
            "note": self.note,
            "changed_by": self.changed_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=8)
    order_group_id = String(required=True, max_length=8)
    customer_id = Identifier(required=True)
    vendor_id = Identifier()  # None for platform-sold products
    vendor_country = String(max_length=100)
    items = HasMany(OrderItem)

    total_amount = Float(default=0.0)
    vat_amount = Float(default=0.0)
    vat_percent = Float(default=0.0)
    vendor_vat_percent = Float(default=0.0)  # Vendor → platform rate, for the vendor's invoice
    admin_commission = Float(default=0.0)
    total_shipping = Float(default=0.0)
    total_packing = Float(default=0.0)
    currency = String(max_length=3, default="AED")
    type = String(choices=OrderType, default=OrderType.DIRECT.value)

    order_status = String(choices=OrderStatus, default=OrderStatus.ORDER_RECEIVED.value)
    payment_status = String(choices=PaymentStatus)  # None for purchase requests
    shipment_status = String(choices=ShipmentStatus, default=ShipmentStatus.PENDING.value)

    shipping_address = Text()  # JSON
    customer_country = String(max_length=100)
    tracking_number = String(max_length=255)
    shipment_id = String(max_length=255)
    label_url = String(max_length=500)
    transaction_ref = String(max_length=255)
    invoice_comments = Text(sanitize=False)
    status_history = HasMany(StatusHistoryEntry)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_number, order_group_id, customer_id, vendor_id, vendor_country, items, totals,
              order_type, shipping_address, customer_country):
        """Create an order from one vendor group of a checkout.

        Args:
            items: List of dicts with the OrderItem fields.
            totals: Dict with total_amount, vat_amount, vat_percent,
                    vendor_vat_percent, admin_commission, total_shipping,
                    total_packing.
        """
        now = datetime.now(UTC)
        is_request = order_type == OrderType.REQUEST.value
        order = cls(
            order_number=order_number,
            order_group_id=order_group_id,
            customer_id=customer_id,
            vendor_id=vendor_id,
            vendor_country=vendor_country,
            type=order_type,
            payment_status=None if is_request else PaymentStatus.PENDING.value,
            shipping_address=json.dumps(shipping_address or {}),
            customer_country=customer_country,
            currency="AED",
            created_at=now,
            updated_at=now,
            **totals,
        )
        for item in items:
            order.add_items(OrderItem(**item))
        order._record_history("Purchase request submitted" if is_request else "Order placed", "customer")

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                order_group_id=order_group_id,
                customer_id=str(customer_id),
                vendor_id=str(vendor_id) if vendor_id else None,
                order_type=order_type,
                total_amount=order.total_amount,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def is_paid(self):
        return self.payment_status == PaymentStatus.PAID.value

    @property
    def has_controlled_items(self):
        return any(item.is_controlled for item in self.items)

    @property
    def ships_controlled_goods_to_uae(self):
        return self.has_controlled_items and is_uae(self.customer_country)

    @property
    def history(self):
        """Status history, newest first."""
        return sorted(self.status_history, key=lambda h: h.sequence, reverse=True)

    def _record_history(self, note, changed_by=None):
        self.add_status_history(
            StatusHistoryEntry(
                sequence=len(self.status_history) + 1,
                order_status=self.order_status,
                payment_status=self.payment_status,
                shipment_status=self.shipment_status,
                note=note,
                changed_by=str(changed_by) if changed_by else None,
                created_at=datetime.now(UTC),
            )
        )

    def _assert_order_transition(self, target):
        current = OrderStatus(self.order_status)
        if target == current:
            return
        if target not in _ORDER_TRANSITIONS[current]:
            raise ValidationError(
                {"order_status": [f"Cannot transition from {current.value} to {target.value}"]}
            )

    def _assert_shipment_transition(self, target):
        current = ShipmentStatus(self.shipment_status)
        if target == current:
            return
        if target not in _shipment_transitions(current):
            raise ValidationError(
                {"shipment_status": [f"Cannot transition from {current.value} to {target.value}"]}
            )

    # -------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------
    def _change_order_status(self, new_status, changed_by=None):
        target = OrderStatus(new_status)
        self._assert_order_transition(target)
        previous = self.order_status
        if previous == target.value:
            return False

        self.order_status = target.value
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                changed_by=str(changed_by) if changed_by else None,
                changed_at=now,
            )
        )
        return True

    def _change_payment_status(self, new_status, transaction_ref=None):
        target = PaymentStatus(new_status)
        previous = self.payment_status
        if previous == target.value:
            return False
        if previous == PaymentStatus.PAID.value and target != PaymentStatus.REFUNDED:
            raise ValidationError({"payment_status": ["A paid order can only be refunded"]})
        if target == PaymentStatus.REFUNDED and previous != PaymentStatus.PAID.value:
            raise ValidationError({"payment_status": ["Only paid orders can be refunded"]})

        self.payment_status = target.value
        if transaction_ref:
            self.transaction_ref = transaction_ref
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderPaymentStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                order_group_id=self.order_group_id,
                previous_status=previous,
                new_status=target.value,
                transaction_ref=transaction_ref,
                changed_at=now,
            )
        )
        return True

    def _change_shipment_status(self, new_status):
        target = ShipmentStatus(new_status)
        self._assert_shipment_transition(target)
        previous = self.shipment_status
        if previous == target.value:
            return False

        self.shipment_status = target.value
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderShipmentStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                tracking_number=self.tracking_number,
                changed_at=now,
            )
        )

        if target == ShipmentStatus.VENDOR_SHIPPED and self.is_paid and self.vendor_id:
            self.raise_(
                VendorOrderDispatched(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    vendor_id=str(self.vendor_id),
                    customer_id=str(self.customer_id),
                    total_amount=self.total_amount,
                    dispatched_at=now,
                )
            )
        elif target == ShipmentStatus.DELIVERED:
            self.raise_(
                OrderDelivered(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    order_group_id=self.order_group_id,
                    vendor_id=str(self.vendor_id) if self.vendor_id else None,
                    vendor_country=self.vendor_country,
                    vendor_vat_percent=self.vendor_vat_percent,
                    customer_id=str(self.customer_id),
                    customer_country=self.customer_country,
                    items=json.dumps([item.as_dict() for item in self.items]),
                    total_amount=self.total_amount,
                    vat_amount=self.vat_amount,
                    admin_commission=self.admin_commission,
                    total_shipping=self.total_shipping,
                    total_packing=self.total_packing,
                    invoice_comments=self.invoice_comments,
                    delivered_at=now,
                )
            )
        return True

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment(self, status, transaction_ref=None, note=None):
        """Apply the outcome of a checkout session. Paid orders are never downgraded."""
        if self.is_paid:
            return

        if status == PaymentStatus.PAID.value:
            note = note or "Payment verified via Stripe"
        else:
            status = PaymentStatus.FAILED.value
            note = note or "Payment attempt failed/incomplete"

        with atomic_change(self):
            self._change_payment_status(status, transaction_ref=transaction_ref)
            self._record_history(note, "system")

    # -------------------------------------------------------------------
    # Vendor actions
    # -------------------------------------------------------------------
    def _assert_vendor(self, vendor_id):
        if not self.vendor_id or str(self.vendor_id) != str(vendor_id):
            raise AccessDenied("You can only manage your own orders")

    def vendor_approve(self, vendor_id, invoice_comments=None):
        self._assert_vendor(vendor_id)
        with atomic_change(self):
            self._change_order_status(OrderStatus.VENDOR_APPROVED.value, changed_by=vendor_id)
            if invoice_comments is not None:
                self.invoice_comments = invoice_comments
            self._record_history("Approved by vendor", vendor_id)

    def vendor_reject(self, vendor_id, reason=None):
        self._assert_vendor(vendor_id)
        with atomic_change(self):
            self._change_order_status(OrderStatus.VENDOR_REJECTED.value, changed_by=vendor_id)
            self._record_history(f"Rejected by vendor: {reason}" if reason else "Rejected by vendor", vendor_id)

    def vendor_fulfil(self, vendor_id, tracking_number=None):
        self._assert_vendor(vendor_id)
        if self.order_status in (
            OrderStatus.VENDOR_REJECTED.value,
            OrderStatus.REJECTED.value,
            OrderStatus.CANCELLED.value,
        ):
            raise ValidationError({"order_status": [f"Cannot ship a {self.order_status} order"]})

        with atomic_change(self):
            if tracking_number:
                self.tracking_number = tracking_number
            self._change_shipment_status(ShipmentStatus.VENDOR_SHIPPED.value)
            self._record_history("Shipped by vendor", vendor_id)

    # -------------------------------------------------------------------
    # Admin update
    # -------------------------------------------------------------------
    def admin_update(
        self,
        changed_by,
        order_status=None,
        payment_status=None,
        shipment_status=None,
        tracking_number=None,
        shipment_id=None,
        label_url=None,
        note=None,
    ):
        """Apply an admin's edits after validating every requested transition."""
        if order_status:
            self._assert_order_transition(OrderStatus(order_status))
        if shipment_status:
            self._assert_shipment_transition(ShipmentStatus(shipment_status))

        with atomic_change(self):
            if tracking_number is not None:
                self.tracking_number = tracking_number
            if shipment_id is not None:
                self.shipment_id = shipment_id
            if label_url is not None:
                self.label_url = label_url

            if order_status:
                self._change_order_status(order_status, changed_by=changed_by)
            if payment_status:
                self._change_payment_status(payment_status)
            if shipment_status:
                self._change_shipment_status(shipment_status)

            self.updated_at = datetime.now(UTC)
            self._record_history(note or "Order updated via Admin Panel", changed_by)

    # -------------------------------------------------------------------
    # Shipment updates from Fulfillment
    # -------------------------------------------------------------------
    def _advance_shipment(self, target):
        """Move the shipment forward to `target`; a parcel already past it stays put."""
        if target not in _shipment_transitions(ShipmentStatus(self.shipment_status)):
            return False
        return self._change_shipment_status(target.value)

    def record_label(self, tracking_number, shipment_id=None, label_url=None, leg=CUSTOMER_LEG):
        """Copy a carrier label onto the order.

        A label for the vendor-to-warehouse leg means the vendor has handed
        the parcel over; only the warehouse-to-customer label ships the order.
        """
        with atomic_change(self):
            if leg == VENDOR_LEG:
                self._advance_shipment(ShipmentStatus.VENDOR_SHIPPED)
                self._record_history(f"Vendor shipment label created, tracking {tracking_number}", "system")
                return

            self.tracking_number = tracking_number
            self.shipment_id = shipment_id
            self.label_url = label_url
            self._advance_shipment(ShipmentStatus.SHIPPED)
            self._record_history(f"Shipping label created, tracking {tracking_number}", "system")

    def mark_delivered(self, leg=CUSTOMER_LEG):
        if leg == VENDOR_LEG:
            with atomic_change(self):
                if self._advance_shipment(ShipmentStatus.ADMIN_RECEIVED):
                    self._record_history("Received at warehouse", "system")
            return

        if self.shipment_status == ShipmentStatus.DELIVERED.value:
            return
        with atomic_change(self):
            self._change_shipment_status(ShipmentStatus.DELIVERED.value)
            self._record_history("Delivered to customer", "system")

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason=None, cancelled_by=None):
        if self.order_status == OrderStatus.CANCELLED.value:
            return
        if self.shipment_status in (
            ShipmentStatus.SHIPPED.value,
            ShipmentStatus.DELIVERED.value,
            ShipmentStatus.RETURNED.value,
        ):
            raise ValidationError({"order_status": ["Shipped orders cannot be cancelled"]})

        with atomic_change(self):
            self._change_order_status(OrderStatus.CANCELLED.value, changed_by=cancelled_by)
            if self.shipment_status != ShipmentStatus.CANCELLED.value:
                self._change_shipment_status(ShipmentStatus.CANCELLED.value)
            self._record_history(f"Cancelled: {reason}" if reason else "Cancelled", cancelled_by)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                reason=reason,
                cancelled_by=str(cancelled_by) if cancelled_by else None,
                cancelled_at=datetime.now(UTC),
            )
        )

    def as_dict(self):
        return {
            "order_id": str(self.id),
            "order_number": self.order_number,
            "order_group_id": self.order_group_id,
            "customer_id": str(self.customer_id),
            "vendor_id": str(self.vendor_id) if self.vendor_id else None,
            "items": [item.as_dict() for item in self.items],
            "total_amount": self.total_amount,
            "vat_amount": self.vat_amount,
            "vat_percent": self.vat_percent,
            "admin_commission": self.admin_commission,
            "total_shipping": self.total_shipping,
            "total_packing": self.total_packing,
            "currency": self.currency,
            "type": self.type,
            "order_status": self.order_status,
            "payment_status": self.payment_status,
            "shipment_status": self.shipment_status,
            "shipping_address": json.loads(self.shipping_address or "{}"),
            "tracking_number": self.tracking_number,
            "shipment_id": self.shipment_id,
            "label_url": self.label_url,
            "invoice_comments": self.invoice_comments,
            "status_history": [h.as_dict() for h in self.history],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
