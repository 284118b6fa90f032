"""Product aggregate root with PricingTier and ProductSpecification entities.

State Machine:
    draft → pending_review | published | rejected
    pending_review → published | rejected
    rejected → pending_review | published
    published → suspended | rejected
    suspended → published | rejected

`approval_status` records the last review decision (pending / approved /
rejected) independently of the lifecycle status.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from catalogue.domain import catalogue
from catalogue.shared.pricing import DEFAULT_COMMISSION_PERCENT, apply_commission, inflate
from catalogue.shared.sku import SKU


class ProductStatus(Enum):
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    PUBLISHED = "published"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class ApprovalStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ProductCondition(Enum):
    NEW = "new"
    USED = "used"
    REFURBISHED = "refurbished"


class SpecificationType(Enum):
    GENERAL = "general"  # label and value side by side
    TITLE_ONLY = "title_only"
    VALUE_ONLY = "value_only"


# Option rows synced from the colour and size pickers
OPTION_LABELS = {"colors": "Color", "sizes": "Size"}

_VALID_TRANSITIONS = {
    ProductStatus.DRAFT: {ProductStatus.PENDING_REVIEW, ProductStatus.PUBLISHED, ProductStatus.REJECTED},
    ProductStatus.PENDING_REVIEW: {ProductStatus.PUBLISHED, ProductStatus.REJECTED},
    ProductStatus.REJECTED: {ProductStatus.PENDING_REVIEW, ProductStatus.PUBLISHED},
    ProductStatus.PUBLISHED: {ProductStatus.SUSPENDED, ProductStatus.REJECTED},
    ProductStatus.SUSPENDED: {ProductStatus.PUBLISHED, ProductStatus.REJECTED},
}


@catalogue.entity(part_of="Product")
class PricingTier:
    """Quantity-break price: `price` applies for min_quantity..max_quantity units."""

    min_quantity: Integer(required=True, min_value=1)
    max_quantity: Integer(min_value=1)
    price: Float(required=True, min_value=0.0)


@catalogue.entity(part_of="Product")
class ProductSpecification:
    """One row of the specification sheet. Colour and size options are rows too."""

    label: String(max_length=255, sanitize=False)
    value: Text(sanitize=False)
    spec_type: String(choices=SpecificationType, default=SpecificationType.GENERAL.value)
    active: Boolean(default=True)
    sort: Integer(default=0)


@catalogue.aggregate
class Product:
    """A listing offered by a vendor, or by the platform when vendor_id is empty."""

    vendor_id: Identifier()
    vendor_country: String(max_length=100)
    sku: ValueObject(SKU)
    name: String(required=True, max_length=255)
    description: Text()
    category_id: Identifier()
    brand_id: Identifier()
    condition: String(choices=ProductCondition, default=ProductCondition.NEW.value)
    country_of_origin: String(max_length=100)

    base_price: Float(required=True, min_value=0.0)
    price: Float(min_value=0.0)
    commission: Float(default=DEFAULT_COMMISSION_PERCENT, min_value=0.0, max_value=100.0)
    shipping_charge: Float(default=0.0, min_value=0.0)
    packing_charge: Float(default=0.0, min_value=0.0)
    currency: String(max_length=3, default="AED")
    pricing_tiers: HasMany(PricingTier)
    individual_product_pricing: Text()  # JSON list of {name, amount}
    specifications: HasMany(ProductSpecification)

    stock: Integer(default=0, min_value=0)
    min_order_quantity: Integer(default=1, min_value=1)
    is_featured: Boolean(default=False)
    is_top_selling: Boolean(default=False)
    is_controlled: Boolean(default=False)

    status: String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    approval_status: String(choices=ApprovalStatus, default=ApprovalStatus.PENDING.value)
    rejection_reason: Text()
    reviewed_by: Identifier()
    reviewed_at: DateTime()

    rating: Float(default=0.0)
    review_count: Integer(default=0)

    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def pricing_tiers_must_not_overlap(self):
        if not self.pricing_tiers:
            return
        tiers = sorted(self.pricing_tiers, key=lambda t: t.min_quantity)
        for tier in tiers:
            if tier.max_quantity is not None and tier.max_quantity < tier.min_quantity:
                raise ValidationError(
                    {"pricing_tiers": [f"Tier starting at {tier.min_quantity} ends before it starts"]}
                )
        for lower, upper in zip(tiers, tiers[1:], strict=False):
            if lower.max_quantity is None or lower.max_quantity >= upper.min_quantity:
                raise ValidationError(
                    {"pricing_tiers": [f"Tiers starting at {lower.min_quantity} and {upper.min_quantity} overlap"]}
                )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        base_price,
        vendor_id=None,
        vendor_country=None,
        sku=None,
        price=None,
        description=None,
        category_id=None,
        brand_id=None,
        condition=None,
        country_of_origin=None,
        commission=None,
        shipping_charge=0.0,
        packing_charge=0.0,
        stock=0,
        min_order_quantity=1,
    ):
        from catalogue.product.events import ProductCreated

        now = datetime.now(UTC)
        product = cls(
            name=name,
            vendor_id=vendor_id,
            vendor_country=vendor_country,
            sku=SKU(code=sku) if isinstance(sku, str) else sku,
            description=description,
            category_id=category_id,
            brand_id=brand_id,
            condition=condition or ProductCondition.NEW.value,
            country_of_origin=country_of_origin,
            base_price=base_price,
            price=price if price is not None else base_price,
            # Platform listings carry no markup
            commission=(0.0 if vendor_id is None else DEFAULT_COMMISSION_PERCENT) if commission is None else commission,
            shipping_charge=shipping_charge or 0.0,
            packing_charge=packing_charge or 0.0,
            stock=stock or 0,
            min_order_quantity=min_order_quantity or 1,
            individual_product_pricing=json.dumps([]),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                vendor_id=vendor_id,
                name=name,
                sku=product.sku.code if product.sku else None,
                category_id=category_id,
                status=ProductStatus.DRAFT.value,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_platform_product(self):
        return self.vendor_id is None

    @property
    def is_purchasable(self):
        return (
            self.status == ProductStatus.PUBLISHED.value
            and self.approval_status == ApprovalStatus.APPROVED.value
            and (self.stock or 0) > 0
        )

    @property
    def customer_price(self):
        return inflate(self.price if self.price is not None else self.base_price, self.commission)

    def pricing_dict(self):
        """Raw vendor pricing, including the commission rate."""
        return {
            "price": self.price,
            "base_price": self.base_price,
            "commission": self.commission,
            "pricing_tiers": [
                {"min_quantity": t.min_quantity, "max_quantity": t.max_quantity, "price": t.price}
                for t in sorted(self.pricing_tiers, key=lambda t: t.min_quantity)
            ],
            "individual_product_pricing": json.loads(self.individual_product_pricing or "[]"),
        }

    def customer_pricing(self):
        """Pricing as shown to customers: commission applied, rate stripped."""
        return apply_commission(self.pricing_dict())

    # -------------------------------------------------------------------
    # Details & pricing
    # -------------------------------------------------------------------
    def update_details(
        self,
        name=None,
        description=None,
        category_id=None,
        brand_id=None,
        condition=None,
        country_of_origin=None,
        min_order_quantity=None,
    ):
        from catalogue.product.events import ProductDetailsUpdated

        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if category_id is not None:
            self.category_id = category_id
        if brand_id is not None:
            self.brand_id = brand_id
        if condition is not None:
            self.condition = condition
        if country_of_origin is not None:
            self.country_of_origin = country_of_origin
        if min_order_quantity is not None:
            self.min_order_quantity = min_order_quantity

        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductDetailsUpdated(
                product_id=self.id,
                name=self.name,
                category_id=self.category_id,
                brand_id=self.brand_id,
            )
        )

    def update_pricing(
        self,
        base_price=None,
        price=None,
        commission=None,
        shipping_charge=None,
        packing_charge=None,
        pricing_tiers=None,
        individual_product_pricing=None,
    ):
        """Replace pricing fields. `pricing_tiers` replaces every existing tier."""
        from catalogue.product.events import ProductPricingUpdated

        with atomic_change(self):
            if base_price is not None:
                self.base_price = base_price
            if price is not None:
                self.price = price
            if commission is not None:
                self.commission = commission
            if shipping_charge is not None:
                self.shipping_charge = shipping_charge
            if packing_charge is not None:
                self.packing_charge = packing_charge
            if individual_product_pricing is not None:
                for item in individual_product_pricing:
                    if float(item.get("amount", 0)) < 0:
                        raise ValidationError({"individual_product_pricing": ["Amounts must not be negative"]})
                self.individual_product_pricing = json.dumps(individual_product_pricing)
            if pricing_tiers is not None:
                for tier in list(self.pricing_tiers):
                    self.remove_pricing_tiers(tier)
                for tier in pricing_tiers:
                    self.add_pricing_tiers(
                        PricingTier(
                            min_quantity=tier["min_quantity"],
                            max_quantity=tier.get("max_quantity"),
                            price=tier["price"],
                        )
                    )

        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPricingUpdated(
                product_id=self.id,
                base_price=self.base_price,
                price=self.price,
                commission=self.commission,
                shipping_charge=self.shipping_charge,
                packing_charge=self.packing_charge,
                pricing_tiers=json.dumps(self.pricing_dict()["pricing_tiers"]),
            )
        )

        if self.status == ProductStatus.PUBLISHED.value:
            self._announce_publication()

    def toggle_attributes(self, is_featured=None, is_top_selling=None):
        from catalogue.product.events import ProductAttributesToggled

        if is_featured is not None:
            self.is_featured = is_featured
        if is_top_selling is not None:
            self.is_top_selling = is_top_selling
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductAttributesToggled(
                product_id=self.id,
                is_featured=self.is_featured,
                is_top_selling=self.is_top_selling,
            )
        )

    def adjust_stock(self, new_stock):
        from catalogue.product.events import ProductStockChanged

        if new_stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        previous = self.stock or 0
        self.stock = new_stock
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductStockChanged(
                product_id=self.id,
                previous_stock=previous,
                new_stock=new_stock,
            )
        )

    # -------------------------------------------------------------------
    # Specifications
    # -------------------------------------------------------------------
    def specification_sheet(self, active_only=True):
        rows = [s for s in self.specifications if s.active or not active_only]
        return [
            {"label": s.label, "value": s.value, "type": s.spec_type, "active": s.active, "sort": s.sort}
            for s in sorted(rows, key=lambda s: (s.sort or 0, s.label or ""))
        ]

    def sync_specifications(self, rows=None, options=None):
        """Replace the sheet and/or individual option rows.

        `rows` replaces every row that is not an option. `options` maps an
        option label (Color, Size) to its values; each label present
        replaces only its own rows, and an empty list removes them.
        """
        from catalogue.product.events import ProductSpecificationsUpdated

        if rows is None and not options:
            return

        options = options or {}
        with atomic_change(self):
            for spec in list(self.specifications):
                if spec.label in options or (rows is not None and spec.label not in OPTION_LABELS.values()):
                    self.remove_specifications(spec)

            for index, row in enumerate(rows or []):
                if not (row.get("label") or row.get("value")):
                    raise ValidationError({"specifications": ["Each row needs a label or a value"]})
                self.add_specifications(
                    ProductSpecification(
                        label=row.get("label"),
                        value=row.get("value"),
                        spec_type=row.get("type") or SpecificationType.GENERAL.value,
                        active=row.get("active", True),
                        sort=index if row.get("sort") is None else row["sort"],
                    )
                )
            for label, values in options.items():
                for index, value in enumerate(values or []):
                    self.add_specifications(ProductSpecification(label=label, value=value, sort=index))

        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductSpecificationsUpdated(
                product_id=self.id,
                specifications=json.dumps(self.specification_sheet(active_only=False)),
            )
        )

    # -------------------------------------------------------------------
    # Review workflow
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target):
        current = ProductStatus(self.status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot move product from {current.value} to {target.value}"]})

    def submit_for_review(self):
        from catalogue.product.events import ProductSubmittedForReview

        self._assert_can_transition(ProductStatus.PENDING_REVIEW)

        now = datetime.now(UTC)
        self.status = ProductStatus.PENDING_REVIEW.value
        self.approval_status = ApprovalStatus.PENDING.value
        self.updated_at = now

        self.raise_(ProductSubmittedForReview(product_id=self.id, vendor_id=self.vendor_id, submitted_at=now))

    def approve(self, reviewed_by, is_controlled=False):
        from catalogue.product.events import ProductApproved

        self._assert_can_transition(ProductStatus.PUBLISHED)

        now = datetime.now(UTC)
        self.status = ProductStatus.PUBLISHED.value
        self.approval_status = ApprovalStatus.APPROVED.value
        self.rejection_reason = None
        self.reviewed_by = reviewed_by
        self.reviewed_at = now
        self.is_controlled = bool(is_controlled)
        self.updated_at = now

        self.raise_(ProductApproved(product_id=self.id, reviewed_by=reviewed_by, reviewed_at=now))
        self._announce_publication()

    def reject(self, reviewed_by, reason=None):
        from catalogue.product.events import ProductRejected

        self._assert_can_transition(ProductStatus.REJECTED)

        was_published = self.status == ProductStatus.PUBLISHED.value
        now = datetime.now(UTC)
        self.status = ProductStatus.REJECTED.value
        self.approval_status = ApprovalStatus.REJECTED.value
        self.rejection_reason = reason or "No reason provided"
        self.reviewed_by = reviewed_by
        self.reviewed_at = now
        self.updated_at = now

        self.raise_(
            ProductRejected(
                product_id=self.id,
                reviewed_by=reviewed_by,
                reason=self.rejection_reason,
                reviewed_at=now,
            )
        )
        if was_published:
            self._announce_withdrawal(self.rejection_reason)

    def suspend(self, reason=None):
        self._assert_can_transition(ProductStatus.SUSPENDED)

        self.status = ProductStatus.SUSPENDED.value
        self.updated_at = datetime.now(UTC)
        self._announce_withdrawal(reason)

    def _announce_publication(self):
        from catalogue.product.events import ProductPublished

        self.raise_(
            ProductPublished(
                product_id=self.id,
                vendor_id=self.vendor_id,
                vendor_country=self.vendor_country,
                name=self.name,
                category_id=self.category_id,
                brand_id=self.brand_id,
                price=self.customer_price,
                base_price=self.base_price,
                shipping_charge=self.shipping_charge or 0.0,
                packing_charge=self.packing_charge or 0.0,
                currency=self.currency,
                is_controlled=self.is_controlled,
                stock=self.stock or 0,
                min_order_quantity=self.min_order_quantity or 1,
                is_featured=self.is_featured,
                is_top_selling=self.is_top_selling,
                published_at=datetime.now(UTC),
            )
        )

    def _announce_withdrawal(self, reason):
        from catalogue.product.events import ProductWithdrawn

        self.raise_(ProductWithdrawn(product_id=self.id, reason=reason, withdrawn_at=datetime.now(UTC)))

    # -------------------------------------------------------------------
    # Ratings
    # -------------------------------------------------------------------
    def record_rating(self, rating, review_count):
        """Take the average rating and review count computed by Reviews."""
        from catalogue.product.events import ProductRatingUpdated

        self.review_count = max(0, review_count or 0)
        self.rating = round(rating or 0.0, 1) if self.review_count else 0.0

        self.raise_(
            ProductRatingUpdated(
                product_id=self.id,
                rating=self.rating,
                review_count=self.review_count,
            )
        )
