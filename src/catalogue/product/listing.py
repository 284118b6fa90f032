"""Product listings and role-aware product views."""

import random
from collections import Counter

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from catalogue.brand.brand import Brand
from catalogue.category.category import Category
from catalogue.category.hierarchy import subtree_ids
from catalogue.product.product import Product
from catalogue.projections.product_card import ProductCard

ADMIN_SCOPES = ("admin", "vendor", "all")
SHELF_SIZE = 6


def _all_cards():
    return current_domain.repository_for(ProductCard)._dao.query.limit(1000).all().items


def public_listing(category_id=None, brand_id=None, vendor_id=None, featured=None, top_selling=None):
    """Storefront listing: published and approved products only, featured first.

    A category matches its own products and those of every subcategory.
    """
    cards = _all_cards()
    if category_id:
        in_tree = set(subtree_ids(category_id))
        cards = [c for c in cards if c.category_id and str(c.category_id) in in_tree]
    if brand_id:
        cards = [c for c in cards if str(c.brand_id) == str(brand_id)]
    if vendor_id:
        cards = [c for c in cards if str(c.vendor_id) == str(vendor_id)]
    if featured is not None:
        cards = [c for c in cards if bool(c.is_featured) == featured]
    if top_selling is not None:
        cards = [c for c in cards if bool(c.is_top_selling) == top_selling]
    return sorted(cards, key=lambda c: (not c.is_featured, c.name.lower()))


def similar_products(product_id, limit=SHELF_SIZE):
    """Other listed products from the same category."""
    product = current_domain.repository_for(Product).get(product_id)
    cards = [c for c in _all_cards() if str(c.product_id) != str(product_id)]
    if product.category_id:
        cards = [c for c in cards if str(c.category_id) == str(product.category_id)]
    return sorted(cards, key=lambda c: c.name.lower())[:limit]


def recommended_products(limit=SHELF_SIZE, exclude_id=None):
    """Best rated listed products; ties go to the most reviewed."""
    cards = [c for c in _all_cards() if str(c.product_id) != str(exclude_id)]
    cards.sort(key=lambda c: (-(c.rating or 0.0), -(c.review_count or 0), c.name.lower()))
    return cards[:limit]


def top_selling_products():
    """A random shelf of exactly six top sellers, or nothing when fewer are flagged."""
    flagged = [c for c in _all_cards() if c.is_top_selling]
    if len(flagged) < SHELF_SIZE:
        return []
    return random.sample(flagged, SHELF_SIZE)


def _name_of(entity_cls, identifier):
    try:
        return current_domain.repository_for(entity_cls).get(identifier).name
    except ObjectNotFoundError:
        return None


def product_filters(cards):
    """Facets for a listing: price range plus category and brand counts."""
    prices = [c.price for c in cards if c.price is not None]

    def _facet(entity_cls, counts):
        facet = []
        for identifier, count in counts.items():
            name = _name_of(entity_cls, identifier)
            if name is not None:
                facet.append({"id": identifier, "name": name, "count": count})
        return sorted(facet, key=lambda f: f["name"].lower())

    return {
        "price": {"min": min(prices) if prices else 0.0, "max": max(prices) if prices else 0.0},
        "categories": _facet(Category, Counter(str(c.category_id) for c in cards if c.category_id)),
        "brands": _facet(Brand, Counter(str(c.brand_id) for c in cards if c.brand_id)),
    }

def vendor_products(vendor_id):
    return (
        current_domain.repository_for(Product)
        ._dao.query.filter(vendor_id=str(vendor_id))
        .order_by("-created_at")
        .limit(1000)
        .all()
        .items
    )


def admin_products(scope="all", status=None):
    """`admin` scope is platform products, `vendor` scope is vendor products."""
    if scope not in ADMIN_SCOPES:
        scope = "all"
    products = current_domain.repository_for(Product)._dao.query.order_by("-created_at").limit(1000).all().items
    if scope == "admin":
        products = [p for p in products if p.vendor_id is None]
    elif scope == "vendor":
        products = [p for p in products if p.vendor_id is not None]
    if status:
        products = [p for p in products if p.status == status]
    return products


def product_view(product, actor=None):
    """Serialise a product for the caller.

    Admins and the owning vendor see raw vendor pricing including the
    commission rate. Everyone else sees customer pricing with the rate
    stripped out.
    """
    data = {
        "id": str(product.id),
        "vendor_id": str(product.vendor_id) if product.vendor_id else None,
        "sku": product.sku.code if product.sku else None,
        "name": product.name,
        "description": product.description,
        "category_id": str(product.category_id) if product.category_id else None,
        "brand_id": str(product.brand_id) if product.brand_id else None,
        "condition": product.condition,
        "country_of_origin": product.country_of_origin,
        "currency": product.currency,
        "shipping_charge": product.shipping_charge,
        "packing_charge": product.packing_charge,
        "stock": product.stock,
        "min_order_quantity": product.min_order_quantity,
        "is_featured": product.is_featured,
        "is_top_selling": product.is_top_selling,
        "is_controlled": product.is_controlled,
        "status": product.status,
        "approval_status": product.approval_status,
        "rating": product.rating,
        "review_count": product.review_count,
    }

    privileged = actor is not None and (
        actor.is_admin or (actor.is_vendor and product.vendor_id and str(product.vendor_id) == actor.id)
    )
    if privileged:
        data.update(product.pricing_dict())
        data["rejection_reason"] = product.rejection_reason
        data["reviewed_by"] = str(product.reviewed_by) if product.reviewed_by else None
    else:
        data.update(product.customer_pricing())
    data["specifications"] = product.specification_sheet(active_only=not privileged)
    return data
