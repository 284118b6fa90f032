"""Product card — the public storefront listing projection.

Only products that are currently published (and therefore approved) have a
card. `price` is the customer-facing price with commission applied.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from catalogue.domain import catalogue
from catalogue.product.events import (
    ProductAttributesToggled,
    ProductDetailsUpdated,
    ProductPublished,
    ProductRatingUpdated,
    ProductStockChanged,
    ProductWithdrawn,
)
from catalogue.product.product import Product


@catalogue.projection
class ProductCard:
    product_id: Identifier(identifier=True, required=True)
    vendor_id: Identifier()
    name: String(required=True)
    category_id: Identifier()
    brand_id: Identifier()
    price: Float(required=True)
    currency: String(default="AED")
    stock: Integer(default=0)
    is_featured: Boolean(default=False)
    is_top_selling: Boolean(default=False)
    is_controlled: Boolean(default=False)
    rating: Float(default=0.0)
    review_count: Integer(default=0)
    published_at: DateTime()


def _find_card(product_id):
    try:
        return current_domain.repository_for(ProductCard).get(product_id)
    except ObjectNotFoundError:
        return None


@catalogue.projector(projector_for=ProductCard, aggregates=[Product])
class ProductCardProjector:
    @on(ProductPublished)
    def on_product_published(self, event):
        card = _find_card(event.product_id)
        rating, review_count = (card.rating, card.review_count) if card else (0.0, 0)
        current_domain.repository_for(ProductCard).add(
            ProductCard(
                product_id=event.product_id,
                vendor_id=event.vendor_id,
                name=event.name,
                category_id=event.category_id,
                brand_id=event.brand_id,
                price=event.price,
                currency=event.currency,
                stock=event.stock,
                is_featured=event.is_featured,
                is_top_selling=event.is_top_selling,
                is_controlled=event.is_controlled,
                rating=rating,
                review_count=review_count,
                published_at=event.published_at,
            )
        )

    @on(ProductWithdrawn)
    def on_product_withdrawn(self, event):
        card = _find_card(event.product_id)
        if card is not None:
            current_domain.repository_for(ProductCard)._dao.delete(card)

    @on(ProductDetailsUpdated)
    def on_details_updated(self, event):
        card = _find_card(event.product_id)
        if card is None:
            return
        card.name = event.name
        card.category_id = event.category_id
        card.brand_id = event.brand_id
        current_domain.repository_for(ProductCard).add(card)

    @on(ProductStockChanged)
    def on_stock_changed(self, event):
        card = _find_card(event.product_id)
        if card is None:
            return
        card.stock = event.new_stock
        current_domain.repository_for(ProductCard).add(card)

    @on(ProductAttributesToggled)
    def on_attributes_toggled(self, event):
        card = _find_card(event.product_id)
        if card is None:
            return
        card.is_featured = event.is_featured
        card.is_top_selling = event.is_top_selling
        current_domain.repository_for(ProductCard).add(card)

    @on(ProductRatingUpdated)
    def on_rating_updated(self, event):
        card = _find_card(event.product_id)
        if card is None:
            return
        card.rating = event.rating
        card.review_count = event.review_count
        current_domain.repository_for(ProductCard).add(card)
