"""Cross-domain event contracts for Catalogue domain events.

Ordering keeps a local ProductSnapshot of everything it needs at checkout
(customer price, vendor base price, charges, controlled flag) and refreshes it
from these events. They are registered as external events via
domain.register_external_event() with matching __type__ strings.

The source-of-truth events are in src/catalogue/product/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String


class ProductPublished(BaseEvent):
    """A product passed review and is visible to customers.

    `price` is the customer-facing price (commission applied); `base_price`
    is what the vendor receives per unit.
    """

    __version__ = 1

    product_id = Identifier(required=True)
    vendor_id = Identifier()
    vendor_country = String()
    name = String(required=True)
    category_id = Identifier()
    brand_id = Identifier()
    price = Float(required=True)
    base_price = Float(required=True)
    shipping_charge = Float(default=0.0)
    packing_charge = Float(default=0.0)
    currency = String(default="AED")
    is_controlled = Boolean(default=False)
    stock = Integer(default=0)
    min_order_quantity = Integer(default=1)
    is_featured = Boolean(default=False)
    is_top_selling = Boolean(default=False)
    published_at = DateTime(required=True)


class ProductWithdrawn(BaseEvent):
    """A published product was suspended and can no longer be bought."""

    __version__ = 1

    product_id = Identifier(required=True)
    reason = String()
    withdrawn_at = DateTime(required=True)


class ProductStockChanged(BaseEvent):
    """Stock on hand for a product was adjusted."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
