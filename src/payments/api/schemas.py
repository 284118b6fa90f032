"""Pydantic request/response schemas for the Payments API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Checkout Session Request Schemas
# ---------------------------------------------------------------------------
class VerifySessionRequest(BaseModel):
    session_id: str

    model_config = {"json_schema_extra": {"examples": [{"session_id": "cs_test_a1b2c3"}]}}


class RetryPaymentRequest(BaseModel):
    order_group_id: str = Field(min_length=1, max_length=8)


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    pays: bool = True
    failure_reason: str = "Checkout session could not be created"


# ---------------------------------------------------------------------------
# Invoice Request Schemas
# ---------------------------------------------------------------------------
class GenerateAdminInvoiceRequest(BaseModel):
    order_id: str
    comments: str | None = None


class GenerateCustomerInvoiceRequest(BaseModel):
    order_group_id: str
    comments: str | None = None
    payment_status: str = Field(default="unpaid", pattern="^(paid|unpaid)$")


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PaymentSessionResponse(BaseModel):
    session: dict[str, Any]


class VerifySessionResponse(BaseModel):
    order_group_id: str
    status: str
    payment_status: str | None = None
    amount: float


class RetryPaymentResponse(BaseModel):
    session_id: str
    url: str | None = None


class WebhookResponse(BaseModel):
    received: bool = True
    result: str


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    pays: bool
    failure_reason: str


class InvoiceIdResponse(BaseModel):
    invoice_id: str


class InvoiceResponse(BaseModel):
    invoice: dict[str, Any]


class InvoiceListResponse(BaseModel):
    invoices: list[dict[str, Any]]


class StatusResponse(BaseModel):
    status: str = "ok"
