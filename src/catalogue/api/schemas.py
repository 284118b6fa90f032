"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# --- Product Request Schemas ---


class PricingTierSchema(BaseModel):
    min_quantity: int = Field(..., ge=1)
    max_quantity: int | None = Field(None, ge=1)
    price: float = Field(..., ge=0)


class IndividualPriceSchema(BaseModel):
    name: str = Field(..., max_length=100)
    amount: float = Field(..., ge=0)


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Stainless Steel Water Bottle",
                    "sku": "BTL-SS-750",
                    "base_price": 40.0,
                    "category_id": "c3d4e5f6-a7b8-9012-cdef-123456789012",
                    "vendor_country": "UAE",
                    "stock": 120,
                    "shipping_charge": 5.0,
                    "pricing_tiers": [{"min_quantity": 10, "max_quantity": 49, "price": 36.0}],
                }
            ]
        }
    }

    name: str = Field(..., max_length=255)
    base_price: float = Field(..., ge=0)
    sku: str | None = Field(None, max_length=64)
    price: float | None = Field(None, ge=0)
    description: str | None = None
    category_id: str | None = None
    brand_id: str | None = None
    condition: str | None = Field(None, max_length=20)
    country_of_origin: str | None = Field(None, max_length=100)
    vendor_country: str | None = Field(None, max_length=100)
    commission: float | None = Field(None, ge=0, le=100)
    shipping_charge: float = Field(0.0, ge=0)
    packing_charge: float = Field(0.0, ge=0)
    stock: int = Field(0, ge=0)
    min_order_quantity: int = Field(1, ge=1)
    pricing_tiers: list[PricingTierSchema] = []


class UpdateProductDetailsRequest(BaseModel):
    name: str | None = Field(None, max_length=255)
    description: str | None = None
    category_id: str | None = None
    brand_id: str | None = None
    condition: str | None = Field(None, max_length=20)
    country_of_origin: str | None = Field(None, max_length=100)
    min_order_quantity: int | None = Field(None, ge=1)


class UpdateProductPricingRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "base_price": 38.0,
                    "pricing_tiers": [
                        {"min_quantity": 10, "max_quantity": 49, "price": 35.0},
                        {"min_quantity": 50, "price": 32.0},
                    ],
                }
            ]
        }
    }

    base_price: float | None = None
    price: float | None = None
    commission: float | None = None
    shipping_charge: float | None = None
    packing_charge: float | None = None
    pricing_tiers: list[PricingTierSchema] | None = None
    individual_product_pricing: list[IndividualPriceSchema] | None = None


class ToggleProductAttributesRequest(BaseModel):
    is_featured: bool | None = None
    is_top_selling: bool | None = None


class AdjustStockRequest(BaseModel):
    stock: int


class ReviewProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {"examples": [{"decision": "rejected", "rejection_reason": "Images are missing"}]}
    }

    decision: str = Field(..., max_length=20)
    rejection_reason: str | None = None


class SuspendProductRequest(BaseModel):
    reason: str | None = None


class SpecificationSchema(BaseModel):
    label: str | None = Field(None, max_length=255)
    value: str | None = None
    type: str = Field("general", pattern="^(general|title_only|value_only)$")
    active: bool = True
    sort: int | None = None


class SyncSpecificationsRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "specifications": [{"label": "Capacity", "value": "750 ml"}],
                    "colors": ["Black", "Olive"],
                }
            ]
        }
    }

    specifications: list[SpecificationSchema] | None = None
    colors: list[str] | None = None
    sizes: list[str] | None = None


# --- Category Request Schemas ---


class CreateCategoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "Pharmaceuticals", "parent_id": None, "is_controlled": True, "display_order": 4}]
        }
    }

    name: str = Field(..., max_length=150)
    slug: str | None = Field(None, max_length=160)
    description: str | None = None
    parent_id: str | None = None
    is_controlled: bool = False
    display_order: int = 0


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, max_length=150)
    description: str | None = None
    display_order: int | None = None
    is_controlled: bool | None = None


class MoveCategoryRequest(BaseModel):
    new_parent_id: str | None = None


# --- Brand Request Schemas ---


class CreateBrandRequest(BaseModel):
    name: str = Field(..., max_length=120)
    logo_url: str | None = Field(None, max_length=500)


class UpdateBrandRequest(BaseModel):
    name: str | None = Field(None, max_length=120)
    logo_url: str | None = Field(None, max_length=500)


# --- Response Schemas ---


class ProductIdResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"product_id": "b2c3d4e5-f6a7-8901-bcde-f12345678901"}]}}

    product_id: str


class CategoryIdResponse(BaseModel):
    category_id: str


class BrandIdResponse(BaseModel):
    brand_id: str


class ProductCardResponse(BaseModel):
    product_id: str
    vendor_id: str | None = None
    name: str
    category_id: str | None = None
    brand_id: str | None = None
    price: float
    currency: str
    stock: int
    is_featured: bool
    is_top_selling: bool
    rating: float
    review_count: int


class ProductCardListResponse(BaseModel):
    products: list[ProductCardResponse]


class ProductListResponse(BaseModel):
    products: list[dict[str, Any]]


class ProductFiltersResponse(BaseModel):
    price: dict[str, float]
    categories: list[dict[str, Any]]
    brands: list[dict[str, Any]]


class SpecificationListResponse(BaseModel):
    specifications: list[dict[str, Any]]


class CategoryResponse(BaseModel):
    category_id: str
    name: str
    slug: str
    description: str | None = None
    parent_id: str | None = None
    is_controlled: bool
    is_active: bool
    display_order: int


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]


class CategoryTreeResponse(BaseModel):
    tree: list[dict[str, Any]]


class BrandResponse(BaseModel):
    brand_id: str
    name: str
    slug: str
    logo_url: str | None = None
    is_active: bool


class BrandListResponse(BaseModel):
    brands: list[BrandResponse]


class StatusResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "ok"}]}}

    status: str = "ok"
