"""Product snapshot — the catalogue data checkout needs, owned by Ordering.

Populated from Catalogue events by the CatalogueSnapshotEventHandler.
Checkout prices lines from `price` (commission already applied) and
computes the platform commission as `price - base_price`.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.projection
class ProductSnapshot:
    product_id = Identifier(identifier=True, required=True)
    vendor_id = Identifier()  # None for products sold by the platform itself
    vendor_country = String(max_length=100)
    name = String(required=True, max_length=255)
    price = Float(required=True)
    base_price = Float(required=True)
    shipping_charge = Float(default=0.0)
    packing_charge = Float(default=0.0)
    stock = Integer(default=0)
    is_controlled = Boolean(default=False)
    is_published = Boolean(default=True)
    is_purchasable = Boolean(default=True)
    updated_at = DateTime()
