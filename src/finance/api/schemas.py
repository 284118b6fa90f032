"""Pydantic request/response schemas for the Finance API."""

from typing import Any

from pydantic import BaseModel, Field


class PayoutRequestBody(BaseModel):
    amount: float = Field(gt=0)
    notes: str | None = None

    model_config = {"json_schema_extra": {"examples": [{"amount": 1500.0, "notes": "Monthly withdrawal"}]}}


class ApprovePayoutRequest(BaseModel):
    admin_note: str | None = None


class MarkPayoutPaidRequest(BaseModel):
    transaction_reference: str = Field(min_length=1, max_length=255)
    admin_note: str | None = None


class RejectPayoutRequest(BaseModel):
    reason: str | None = None


class WalletResponse(BaseModel):
    wallet: dict[str, Any]


class TransactionListResponse(BaseModel):
    transactions: list[dict[str, Any]]


class FinancialLogListResponse(BaseModel):
    logs: list[dict[str, Any]]


class PayoutIdResponse(BaseModel):
    payout_id: str


class PayoutResponse(BaseModel):
    payout: dict[str, Any]


class PayoutListResponse(BaseModel):
    payouts: list[dict[str, Any]]


class ReleaseResponse(BaseModel):
    processed: int
    total: float


class StatusResponse(BaseModel):
    status: str = "ok"
