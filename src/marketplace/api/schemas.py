"""Pydantic request/response schemas for the Marketplace API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------
class SetSettingRequest(BaseModel):
    value: Any = None
    description: str | None = Field(default=None, max_length=255)

    model_config = {"json_schema_extra": {"examples": [{"value": 12.5, "description": "Platform commission"}]}}


class SettingResponse(BaseModel):
    setting: dict[str, Any]


class SettingListResponse(BaseModel):
    settings: list[dict[str, Any]]


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------
class CreateReferenceRequest(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    code: str | None = Field(default=None, max_length=50)
    is_active: bool = True


class UpdateReferenceRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    code: str | None = Field(default=None, max_length=50)
    display_order: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class ReorderReferencesRequest(BaseModel):
    ids: list[str] = Field(min_length=1)


class ReferenceResponse(BaseModel):
    reference: dict[str, Any]


class ReferenceListResponse(BaseModel):
    references: list[dict[str, Any]]


class ReferenceTypesResponse(BaseModel):
    types: list[str]


class ReorderResponse(BaseModel):
    reordered: int


# ---------------------------------------------------------------------------
# Currencies
# ---------------------------------------------------------------------------
class DefineCurrencyRequest(BaseModel):
    code: str = Field(min_length=3, max_length=3)
    name: str = Field(min_length=1, max_length=100)
    rate: float | None = Field(default=None, gt=0)
    is_active: bool = True


class CurrencyResponse(BaseModel):
    currency: dict[str, Any]


class CurrencyListResponse(BaseModel):
    currencies: list[dict[str, Any]]


class ConversionResponse(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    converted: float


class SyncResponse(BaseModel):
    success: bool
    updated: int
    message: str


class HomepageSyncResponse(BaseModel):
    triggered: bool
    result: SyncResponse | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
