"""Wishlist aggregate — products saved for later by a customer or guest."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, String

from ordering.domain import ordering


@ordering.entity(part_of="Wishlist")
class WishlistItem:
    product_id = Identifier(required=True)
    added_at = DateTime()


@ordering.aggregate
class Wishlist:
    customer_id = Identifier()
    session_id = String(max_length=255)
    items = HasMany(WishlistItem)
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id=None, session_id=None):
        if not customer_id and not session_id:
            raise ValidationError({"wishlist": ["A wishlist needs a customer or a guest session"]})
        return cls(customer_id=customer_id, session_id=session_id, updated_at=datetime.now(UTC))

    @property
    def product_ids(self):
        return [str(i.product_id) for i in self.items]

    def add_product(self, product_id, added_at=None):
        """Save a product; saving it twice is a no-op."""
        if str(product_id) in self.product_ids:
            return False
        now = datetime.now(UTC)
        self.add_items(WishlistItem(product_id=product_id, added_at=added_at or now))
        self.updated_at = now
        return True

    def remove_product(self, product_id):
        item = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        if item is None:
            raise ValidationError({"product_id": ["Product is not in the wishlist"]})
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def merge_from(self, guest_wishlist):
        merged = 0
        for item in guest_wishlist.items:
            if self.add_product(item.product_id, added_at=item.added_at):
                merged += 1
        return merged
