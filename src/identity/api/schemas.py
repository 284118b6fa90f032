"""Pydantic request/response schemas for the Identity API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Account Request Schemas ---


class RegisterAccountRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "layla@example.ae",
                    "name": "Layla Haddad",
                    "account_type": "customer",
                    "phone": "+971 50 123 4567",
                    "country": "UAE",
                }
            ]
        }
    }

    email: str = Field(..., max_length=254)
    name: str = Field(..., max_length=150)
    account_type: str = Field("customer", max_length=20)
    phone: str | None = Field(None, max_length=30)
    country: str | None = Field(None, max_length=100)


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(None, max_length=150)
    phone: str | None = Field(None, max_length=30)
    country: str | None = Field(None, max_length=100)
    discount_percent: float | None = Field(None, ge=0, le=100)


class SuspendAccountRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"reason": "Chargeback investigation"}]}}

    reason: str = Field(..., max_length=500)


class GrantPermissionRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"permission": "order.manage"}]}}

    permission: str = Field(..., max_length=50)


class AddAddressRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "label": "home",
                    "contact_name": "Layla Haddad",
                    "phone": "+971501234567",
                    "street": "12 Al Wasl Road",
                    "city": "Dubai",
                    "country": "UAE",
                }
            ]
        }
    }

    label: str | None = Field(None, max_length=20)
    contact_name: str | None = Field(None, max_length=150)
    phone: str | None = Field(None, max_length=30)
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str = Field(..., max_length=100)
    is_default: bool = False


class UpdateAddressRequest(BaseModel):
    label: str | None = Field(None, max_length=20)
    contact_name: str | None = Field(None, max_length=150)
    phone: str | None = Field(None, max_length=30)
    street: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=100)


# --- Phone verification Request Schemas ---


class StartVerificationRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"phone": "+971501234567", "purpose": "register"}]}}

    phone: str = Field(..., max_length=30)
    purpose: str = Field("register", max_length=20)


class VerifyCodeRequest(BaseModel):
    code: str = Field(..., max_length=10)


class ConfigureSmsRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Carrier rejected the message"


# --- Response Schemas ---


class AccountIdResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"account_id": "a1b2c3d4-e5f6-7890-abcd-ef1234567890"}]}}

    account_id: str


class AddressIdResponse(BaseModel):
    address_id: str


class AddressResponse(BaseModel):
    address_id: str
    label: str | None = None
    contact_name: str | None = None
    phone: str | None = None
    street: str
    city: str
    state: str | None = None
    postal_code: str | None = None
    country: str
    is_default: bool


class AccountResponse(BaseModel):
    account_id: str
    email: str
    name: str
    phone: str | None = None
    phone_verified: bool
    account_type: str
    country: str | None = None
    discount_percent: float
    status: str
    permissions: list[str]
    addresses: list[AddressResponse]


class PermissionResponse(BaseModel):
    code: str
    description: str


class PermissionCatalogueResponse(BaseModel):
    permissions: list[PermissionResponse]


class PermissionHoldersResponse(BaseModel):
    permission: str
    account_ids: list[str]


class VerificationIdResponse(BaseModel):
    verification_id: str


class VerificationResultResponse(BaseModel):
    verified: bool
    status: str
    attempts_remaining: int


class SmsConfigResponse(BaseModel):
    sender: str
    should_succeed: bool
    failure_reason: str


class StatusResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "ok"}]}}

    status: str = "ok"
