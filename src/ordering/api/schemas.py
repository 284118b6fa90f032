"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    name: str | None = None
    phone: str | None = None
    street: str
    city: str
    state: str | None = None
    postal_code: str | None = None
    country: str


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)

    model_config = {"json_schema_extra": {"examples": [{"product_id": "prod-001", "quantity": 2}]}}


class UpdateCartQuantityRequest(BaseModel):
    new_quantity: int = Field(ge=1)


class MergeGuestRequest(BaseModel):
    session_id: str


# ---------------------------------------------------------------------------
# Wishlist Request Schemas
# ---------------------------------------------------------------------------
class WishlistItemRequest(BaseModel):
    product_id: str


# ---------------------------------------------------------------------------
# Checkout & Order Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    shipping_address: AddressSchema | None = None
    shipping_costs: dict[str, float] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "street": "12 Marina Walk",
                        "city": "Dubai",
                        "postal_code": "00000",
                        "country": "UAE",
                    },
                    "shipping_costs": {"vendor-001": 35.0},
                }
            ]
        }
    }


class VendorApproveRequest(BaseModel):
    invoice_comments: str | None = None


class VendorRejectRequest(BaseModel):
    reason: str | None = None


class VendorFulfillRequest(BaseModel):
    tracking_number: str | None = None


class AdminUpdateOrderRequest(BaseModel):
    order_status: str | None = None
    payment_status: str | None = None
    shipment_status: str | None = None
    tracking_number: str | None = None
    shipment_id: str | None = None
    label_url: str | None = None
    note: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [{"order_status": "approved", "shipment_status": "admin_received", "note": "Checked in"}]
        }
    }


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class VatRuleRequest(BaseModel):
    scenario: str
    source_region: str = Field(pattern="^(UAE|ROW)$")
    destination_region: str = Field(pattern="^(UAE|ROW)$")
    vendor_to_admin_vat_percent: float = Field(ge=0, le=100, default=0.0)
    admin_to_customer_vat_percent: float = Field(ge=0, le=100, default=0.0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "scenario": "Export",
                    "source_region": "UAE",
                    "destination_region": "ROW",
                    "vendor_to_admin_vat_percent": 5.0,
                    "admin_to_customer_vat_percent": 0.0,
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartResponse(BaseModel):
    cart: dict[str, Any]


class WishlistResponse(BaseModel):
    product_ids: list[str]


class MergeResponse(BaseModel):
    merged: int


class CheckoutResponse(BaseModel):
    order_group_id: str
    order_ids: list[str]
    type: str
    reasons: list[str] = Field(default_factory=list)
    grand_total: float


class OrderResponse(BaseModel):
    order: dict[str, Any]


class OrderListResponse(BaseModel):
    orders: list[dict[str, Any]]


class OrderGroupListResponse(BaseModel):
    groups: list[dict[str, Any]]


class VatRuleListResponse(BaseModel):
    rules: list[dict[str, Any]]


class StatusResponse(BaseModel):
    status: str = "ok"
