"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from catalogue.domain import catalogue


@catalogue.event(part_of="Product")
class ProductCreated:
    """A vendor (or the platform) listed a new product as a draft."""

    __version__ = 1

    product_id: Identifier(required=True)
    vendor_id: Identifier()
    name: String(required=True)
    sku: String()
    category_id: Identifier()
    status: String(required=True)
    created_at: DateTime(required=True)


@catalogue.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    category_id: Identifier()
    brand_id: Identifier()


@catalogue.event(part_of="Product")
class ProductPricingUpdated:
    """Vendor pricing, commission or charges changed."""

    __version__ = 1

    product_id: Identifier(required=True)
    base_price: Float(required=True)
    price: Float(required=True)
    commission: Float(required=True)
    shipping_charge: Float()
    packing_charge: Float()
    pricing_tiers: Text()  # JSON list of {min_quantity, max_quantity, price}


@catalogue.event(part_of="Product")
class ProductSubmittedForReview:
    __version__ = 1

    product_id: Identifier(required=True)
    vendor_id: Identifier()
    submitted_at: DateTime(required=True)


@catalogue.event(part_of="Product")
class ProductApproved:
    __version__ = 1

    product_id: Identifier(required=True)
    reviewed_by: Identifier(required=True)
    reviewed_at: DateTime(required=True)


@catalogue.event(part_of="Product")
class ProductRejected:
    __version__ = 1

    product_id: Identifier(required=True)
    reviewed_by: Identifier(required=True)
    reason: String(required=True)
    reviewed_at: DateTime(required=True)


@catalogue.event(part_of="Product")
class ProductPublished:
    """Product is buyable; carries the customer price and checkout snapshot.

    Mirrors shared.events.catalogue.ProductPublished.
    """

    __version__ = 1

    product_id: Identifier(required=True)
    vendor_id: Identifier()
    vendor_country: String()
    name: String(required=True)
    category_id: Identifier()
    brand_id: Identifier()
    price: Float(required=True)
    base_price: Float(required=True)
    shipping_charge: Float(default=0.0)
    packing_charge: Float(default=0.0)
    currency: String(default="AED")
    is_controlled: Boolean(default=False)
    stock: Integer(default=0)
    min_order_quantity: Integer(default=1)
    is_featured: Boolean(default=False)
    is_top_selling: Boolean(default=False)
    published_at: DateTime(required=True)


@catalogue.event(part_of="Product")
class ProductWithdrawn:
    __version__ = 1

    product_id: Identifier(required=True)
    reason: String()
    withdrawn_at: DateTime(required=True)


@catalogue.event(part_of="Product")
class ProductStockChanged:
    __version__ = 1

    product_id: Identifier(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)


@catalogue.event(part_of="Product")
class ProductAttributesToggled:
    __version__ = 1

    product_id: Identifier(required=True)
    is_featured: Boolean(required=True)
    is_top_selling: Boolean(required=True)


@catalogue.event(part_of="Product")
class ProductRatingUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    rating: Float(required=True)
    review_count: Integer(required=True)


@catalogue.event(part_of="Product")
class ProductSpecificationsUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    specifications: Text(sanitize=False)  # JSON list of {label, value, type, active, sort}
