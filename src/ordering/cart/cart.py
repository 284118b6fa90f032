"""Shopping Cart aggregate — the products a customer or guest intends to buy.

Carts hold product ids and quantities only. Prices are resolved from the
ProductSnapshot at checkout, so a cart never carries a stale price.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from ordering.cart.events import (
    CartAbandoned,
    CartConverted,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartsMerged,
)
from ordering.domain import ordering


class CartStatus(Enum):
    ACTIVE = "active"
    CONVERTED = "converted"
    ABANDONED = "abandoned"


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@ordering.aggregate
class ShoppingCart:
    customer_id = Identifier()  # Nullable for guest carts
    session_id = String(max_length=255)  # For guest cart identification
    items = HasMany(CartItem)
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_belong_to_someone(self):
        if not self.customer_id and not self.session_id:
            raise ValidationError({"cart": ["A cart needs a customer or a guest session"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id=None, session_id=None):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            session_id=session_id,
            status=CartStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )

    def _assert_active(self, action):
        if CartStatus(self.status) != CartStatus.ACTIVE:
            raise ValidationError({"status": [f"Cannot {action} a {self.status} cart"]})

    def _line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def items_snapshot(self):
        return [{"product_id": str(i.product_id), "quantity": i.quantity} for i in self.items]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity):
        """Add a product, or increase the quantity of its existing line."""
        self._assert_active("add items to")

        now = datetime.now(UTC)
        existing = self._line_for(product_id)
        if existing:
            existing.quantity += quantity
            line_quantity = existing.quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, added_at=now))
            line_quantity = quantity

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line_quantity,
            )
        )

    def update_item_quantity(self, product_id, new_quantity):
        self._assert_active("update")

        item = self._line_for(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id):
        self._assert_active("remove items from")

        item = self._line_for(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    # -------------------------------------------------------------------
    # Cart merging (guest → authenticated)
    # -------------------------------------------------------------------
    def merge_from(self, guest_cart):
        """Fold a guest cart's lines into this cart and retire the guest cart."""
        self._assert_active("merge into")
        if guest_cart.id == self.id:
            raise ValidationError({"cart": ["Cannot merge a cart into itself"]})

        now = datetime.now(UTC)
        for guest_item in guest_cart.items:
            existing = self._line_for(guest_item.product_id)
            if existing:
                existing.quantity += guest_item.quantity
            else:
                self.add_items(CartItem(product_id=guest_item.product_id, quantity=guest_item.quantity, added_at=now))

        self.updated_at = now
        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                source_cart_id=str(guest_cart.id),
                source_session_id=guest_cart.session_id,
                items_merged_count=len(guest_cart.items),
            )
        )
        guest_cart.convert()

    # -------------------------------------------------------------------
    # Cart lifecycle
    # -------------------------------------------------------------------
    def convert(self):
        """Mark the cart as converted, either by checkout or by a merge."""
        self._assert_active("convert")

        self.status = CartStatus.CONVERTED.value
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            CartConverted(
                cart_id=str(self.id),
                customer_id=str(self.customer_id) if self.customer_id else None,
                items=json.dumps(self.items_snapshot()),
                converted_at=now,
            )
        )

    def abandon(self):
        self._assert_active("abandon")

        self.status = CartStatus.ABANDONED.value
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(CartAbandoned(cart_id=str(self.id), abandoned_at=now))
