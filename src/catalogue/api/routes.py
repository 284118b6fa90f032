"""FastAPI endpoints for the Catalogue domain.

Thin adapters: resolve the caller, translate the request into a command,
return a small response. Listing endpoints read the ProductCard
projection or the aggregates directly.
"""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from catalogue.api.schemas import (
    AdjustStockRequest,
    BrandIdResponse,
    BrandListResponse,
    BrandResponse,
    CategoryIdResponse,
    CategoryListResponse,
    CategoryResponse,
    CategoryTreeResponse,
    CreateBrandRequest,
    CreateCategoryRequest,
    CreateProductRequest,
    MoveCategoryRequest,
    ProductCardListResponse,
    ProductCardResponse,
    ProductFiltersResponse,
    ProductIdResponse,
    ProductListResponse,
    ReviewProductRequest,
    SpecificationListResponse,
    StatusResponse,
    SuspendProductRequest,
    SyncSpecificationsRequest,
    ToggleProductAttributesRequest,
    UpdateBrandRequest,
    UpdateCategoryRequest,
    UpdateProductDetailsRequest,
    UpdateProductPricingRequest,
)
from catalogue.brand.management import CreateBrand, DeactivateBrand, UpdateBrand, list_brands
from catalogue.category.hierarchy import (
    ancestor_chain,
    build_tree,
    children_of,
    main_categories,
    search_categories,
)
from catalogue.category.management import (
    ActivateCategory,
    CreateCategory,
    DeactivateCategory,
    MoveCategory,
    UpdateCategory,
)
from catalogue.product.creation import CreateProduct
from catalogue.product.details import (
    AdjustStock,
    SyncProductSpecifications,
    ToggleProductAttributes,
    UpdateProductDetails,
    UpdateProductPricing,
)
from catalogue.product.listing import (
    admin_products,
    product_filters,
    product_view,
    public_listing,
    recommended_products,
    similar_products,
    top_selling_products,
    vendor_products,
)
from catalogue.product.product import Product
from catalogue.product.review import ReviewProduct, SubmitProductForReview, SuspendProduct
from shared.access import (
    Actor,
    Permission,
    current_actor,
    optional_actor,
    require_admin,
    require_permission,
    require_vendor,
    serialize_permissions,
)

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])
brand_router = APIRouter(prefix="/brands", tags=["brands"])


def _owner_id(actor: Actor) -> str | None:
    """Vendors act on their own products; admins act on any."""
    if actor.is_admin:
        return None
    require_vendor(actor)
    return actor.id


def _require_catalogue_manager(actor: Actor) -> None:
    require_admin(actor)
    require_permission(actor, Permission.PRODUCT_MANAGE.value)


def _card_response(card) -> ProductCardResponse:
    return ProductCardResponse(
        product_id=str(card.product_id),
        vendor_id=str(card.vendor_id) if card.vendor_id else None,
        name=card.name,
        category_id=str(card.category_id) if card.category_id else None,
        brand_id=str(card.brand_id) if card.brand_id else None,
        price=card.price,
        currency=card.currency,
        stock=card.stock or 0,
        is_featured=bool(card.is_featured),
        is_top_selling=bool(card.is_top_selling),
        rating=card.rating or 0.0,
        review_count=card.review_count or 0,
    )


def _category_response(category) -> CategoryResponse:
    return CategoryResponse(
        category_id=str(category.id),
        name=category.name,
        slug=category.slug,
        description=category.description,
        parent_id=str(category.parent_id) if category.parent_id else None,
        is_controlled=bool(category.is_controlled),
        is_active=bool(category.is_active),
        display_order=category.display_order or 0,
    )


def _brand_response(brand) -> BrandResponse:
    return BrandResponse(
        brand_id=str(brand.id),
        name=brand.name,
        slug=brand.slug,
        logo_url=brand.logo_url,
        is_active=bool(brand.is_active),
    )


# --- Product endpoints ---


@product_router.get("", response_model=ProductCardListResponse)
async def list_products(
    category_id: str | None = None,
    brand_id: str | None = None,
    vendor_id: str | None = None,
    featured: bool | None = None,
    top_selling: bool | None = None,
) -> ProductCardListResponse:
    cards = public_listing(
        category_id=category_id,
        brand_id=brand_id,
        vendor_id=vendor_id,
        featured=featured,
        top_selling=top_selling,
    )
    return ProductCardListResponse(products=[_card_response(c) for c in cards])


@product_router.get("/filters", response_model=ProductFiltersResponse)
async def list_product_filters(
    category_id: str | None = None,
    brand_id: str | None = None,
    vendor_id: str | None = None,
) -> ProductFiltersResponse:
    cards = public_listing(category_id=category_id, brand_id=brand_id, vendor_id=vendor_id)
    return ProductFiltersResponse(**product_filters(cards))


@product_router.get("/top-selling", response_model=ProductCardListResponse)
async def list_top_selling() -> ProductCardListResponse:
    return ProductCardListResponse(products=[_card_response(c) for c in top_selling_products()])


@product_router.get("/recommended", response_model=ProductCardListResponse)
async def list_recommended(limit: int = Query(6, ge=1, le=50)) -> ProductCardListResponse:
    return ProductCardListResponse(products=[_card_response(c) for c in recommended_products(limit)])


@product_router.get("/mine", response_model=ProductListResponse)
async def list_my_products(actor: Actor = Depends(current_actor)) -> ProductListResponse:
    require_vendor(actor)
    return ProductListResponse(products=[product_view(p, actor) for p in vendor_products(actor.id)])


@product_router.get("/admin", response_model=ProductListResponse)
async def list_products_for_admin(
    scope: str = "all",
    status: str | None = None,
    actor: Actor = Depends(current_actor),
) -> ProductListResponse:
    require_admin(actor)
    return ProductListResponse(products=[product_view(p, actor) for p in admin_products(scope, status)])


@product_router.get("/{product_id}")
async def get_product(product_id: str, actor: Actor | None = Depends(optional_actor)) -> dict:
    product = current_domain.repository_for(Product).get(product_id)
    return product_view(product, actor)


@product_router.get("/{product_id}/similar", response_model=ProductCardListResponse)
async def list_similar(product_id: str, limit: int = Query(6, ge=1, le=50)) -> ProductCardListResponse:
    return ProductCardListResponse(products=[_card_response(c) for c in similar_products(product_id, limit)])


@product_router.get("/{product_id}/recommended", response_model=ProductCardListResponse)
async def list_recommended_for(product_id: str, limit: int = Query(6, ge=1, le=50)) -> ProductCardListResponse:
    cards = recommended_products(limit, exclude_id=product_id)
    return ProductCardListResponse(products=[_card_response(c) for c in cards])


@product_router.get("/{product_id}/specifications", response_model=SpecificationListResponse)
async def get_specifications(
    product_id: str, actor: Actor | None = Depends(optional_actor)
) -> SpecificationListResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return SpecificationListResponse(specifications=product_view(product, actor)["specifications"])


@product_router.put("/{product_id}/specifications", response_model=StatusResponse)
async def sync_specifications(
    product_id: str, body: SyncSpecificationsRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    rows = body.specifications
    command = SyncProductSpecifications(
        product_id=product_id,
        vendor_id=_owner_id(actor),
        specifications=json.dumps([r.model_dump(exclude_none=True) for r in rows]) if rows is not None else None,
        colors=json.dumps(body.colors) if body.colors is not None else None,
        sizes=json.dumps(body.sizes) if body.sizes is not None else None,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest, actor: Actor = Depends(current_actor)) -> ProductIdResponse:
    vendor_id = _owner_id(actor)
    if vendor_id is None:
        require_permission(actor, Permission.PRODUCT_MANAGE.value)

    command = CreateProduct(
        name=body.name,
        base_price=body.base_price,
        vendor_id=vendor_id,
        vendor_country=body.vendor_country if vendor_id else None,
        sku=body.sku,
        price=body.price,
        description=body.description,
        category_id=body.category_id,
        brand_id=body.brand_id,
        condition=body.condition,
        country_of_origin=body.country_of_origin,
        # Vendors never set their own commission
        commission=body.commission if vendor_id is None else None,
        shipping_charge=body.shipping_charge,
        packing_charge=body.packing_charge,
        stock=body.stock,
        min_order_quantity=body.min_order_quantity,
        pricing_tiers=json.dumps([t.model_dump() for t in body.pricing_tiers]) if body.pricing_tiers else None,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}/details", response_model=StatusResponse)
async def update_product_details(
    product_id: str, body: UpdateProductDetailsRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = UpdateProductDetails(
        product_id=product_id,
        vendor_id=_owner_id(actor),
        name=body.name,
        description=body.description,
        category_id=body.category_id,
        brand_id=body.brand_id,
        condition=body.condition,
        country_of_origin=body.country_of_origin,
        min_order_quantity=body.min_order_quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/pricing", response_model=StatusResponse)
async def update_product_pricing(
    product_id: str, body: UpdateProductPricingRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    tiers = body.pricing_tiers
    extras = body.individual_product_pricing
    command = UpdateProductPricing(
        product_id=product_id,
        vendor_id=_owner_id(actor),
        base_price=body.base_price,
        price=body.price,
        commission=body.commission,
        shipping_charge=body.shipping_charge,
        packing_charge=body.packing_charge,
        pricing_tiers=json.dumps([t.model_dump() for t in tiers]) if tiers is not None else None,
        individual_product_pricing=json.dumps([e.model_dump() for e in extras]) if extras is not None else None,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/stock", response_model=StatusResponse)
async def adjust_stock(product_id: str, body: AdjustStockRequest, actor: Actor = Depends(current_actor)) -> StatusResponse:
    command = AdjustStock(product_id=product_id, vendor_id=_owner_id(actor), new_stock=body.stock)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/attributes", response_model=StatusResponse)
async def toggle_attributes(
    product_id: str, body: ToggleProductAttributesRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_catalogue_manager(actor)
    command = ToggleProductAttributes(
        product_id=product_id,
        is_featured=body.is_featured,
        is_top_selling=body.is_top_selling,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/submit", response_model=StatusResponse)
async def submit_for_review(product_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    command = SubmitProductForReview(product_id=product_id, vendor_id=_owner_id(actor))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/review", response_model=StatusResponse)
async def review_product(
    product_id: str, body: ReviewProductRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = ReviewProduct(
        product_id=product_id,
        decision=body.decision,
        rejection_reason=body.rejection_reason,
        reviewer_id=actor.id,
        reviewer_type=actor.type,
        reviewer_permissions=serialize_permissions(actor.permissions),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/suspend", response_model=StatusResponse)
async def suspend_product(
    product_id: str, body: SuspendProductRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_catalogue_manager(actor)
    current_domain.process(SuspendProduct(product_id=product_id, reason=body.reason), asynchronous=False)
    return StatusResponse()


# --- Category endpoints ---


@category_router.get("", response_model=CategoryListResponse)
async def list_main_categories() -> CategoryListResponse:
    return CategoryListResponse(categories=[_category_response(c) for c in main_categories()])


@category_router.get("/tree", response_model=CategoryTreeResponse)
async def category_tree() -> CategoryTreeResponse:
    return CategoryTreeResponse(tree=build_tree())


@category_router.get("/search", response_model=CategoryListResponse)
async def find_categories(q: str = "") -> CategoryListResponse:
    return CategoryListResponse(categories=[_category_response(c) for c in search_categories(q)])


@category_router.get("/{category_id}/children", response_model=CategoryListResponse)
async def list_children(category_id: str) -> CategoryListResponse:
    return CategoryListResponse(categories=[_category_response(c) for c in children_of(category_id)])


@category_router.get("/{category_id}/hierarchy", response_model=CategoryListResponse)
async def category_hierarchy(category_id: str) -> CategoryListResponse:
    return CategoryListResponse(categories=[_category_response(c) for c in ancestor_chain(category_id)])


@category_router.post("", status_code=201, response_model=CategoryIdResponse)
async def create_category(body: CreateCategoryRequest, actor: Actor = Depends(current_actor)) -> CategoryIdResponse:
    _require_catalogue_manager(actor)
    command = CreateCategory(
        name=body.name,
        slug=body.slug,
        description=body.description,
        parent_id=body.parent_id,
        is_controlled=body.is_controlled,
        display_order=body.display_order,
    )
    result = current_domain.process(command, asynchronous=False)
    return CategoryIdResponse(category_id=result)


@category_router.put("/{category_id}", response_model=StatusResponse)
async def update_category(
    category_id: str, body: UpdateCategoryRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_catalogue_manager(actor)
    command = UpdateCategory(
        category_id=category_id,
        name=body.name,
        description=body.description,
        display_order=body.display_order,
        is_controlled=body.is_controlled,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@category_router.put("/{category_id}/move", response_model=StatusResponse)
async def move_category(
    category_id: str, body: MoveCategoryRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_catalogue_manager(actor)
    command = MoveCategory(category_id=category_id, new_parent_id=body.new_parent_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@category_router.put("/{category_id}/activate", response_model=StatusResponse)
async def activate_category(category_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_catalogue_manager(actor)
    current_domain.process(ActivateCategory(category_id=category_id), asynchronous=False)
    return StatusResponse()


@category_router.put("/{category_id}/deactivate", response_model=StatusResponse)
async def deactivate_category(category_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_catalogue_manager(actor)
    current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
    return StatusResponse()


# --- Brand endpoints ---


@brand_router.get("", response_model=BrandListResponse)
async def get_brands(include_inactive: bool = False) -> BrandListResponse:
    return BrandListResponse(brands=[_brand_response(b) for b in list_brands(active_only=not include_inactive)])


@brand_router.post("", status_code=201, response_model=BrandIdResponse)
async def create_brand(body: CreateBrandRequest, actor: Actor = Depends(current_actor)) -> BrandIdResponse:
    _require_catalogue_manager(actor)
    result = current_domain.process(CreateBrand(name=body.name, logo_url=body.logo_url), asynchronous=False)
    return BrandIdResponse(brand_id=result)


@brand_router.put("/{brand_id}", response_model=StatusResponse)
async def update_brand(brand_id: str, body: UpdateBrandRequest, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_catalogue_manager(actor)
    current_domain.process(UpdateBrand(brand_id=brand_id, name=body.name, logo_url=body.logo_url), asynchronous=False)
    return StatusResponse()


@brand_router.put("/{brand_id}/deactivate", response_model=StatusResponse)
async def deactivate_brand(brand_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_catalogue_manager(actor)
    current_domain.process(DeactivateBrand(brand_id=brand_id), asynchronous=False)
    return StatusResponse()
