"""Pydantic request/response schemas for the Vendors API."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


class CompanyBasicsRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"country": "UAE", "company_type": "llc"}]}}

    country: str = Field(..., max_length=100)
    company_type: str | None = Field(None, max_length=50)


class CompanyDetailsRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "company_name": "Gulf Safety Supplies LLC",
                    "trade_license_number": "DED-889102",
                    "license_expiry": "2027-03-31",
                    "company_address": "Warehouse 14, Al Quoz Industrial 3",
                    "city": "Dubai",
                    "company_email": "sales@gulfsafety.ae",
                    "company_phone": "+97143330000",
                }
            ]
        }
    }

    company_name: str | None = Field(None, max_length=255)
    trade_license_number: str | None = Field(None, max_length=100)
    license_expiry: date | None = None
    company_address: str | None = None
    city: str | None = Field(None, max_length=100)
    company_email: str | None = Field(None, max_length=254)
    company_phone: str | None = Field(None, max_length=30)


class ContactPersonRequest(BaseModel):
    contact_name: str | None = Field(None, max_length=150)
    contact_email: str | None = Field(None, max_length=254)
    contact_phone: str | None = Field(None, max_length=30)
    contact_designation: str | None = Field(None, max_length=100)
    terms_accepted: bool = False


class DeclarationRequest(BaseModel):
    compliance_terms_accepted: bool = False
    is_controlled_dealer: bool = False
    controlled_license_number: str | None = Field(None, max_length=100)


class SellingCategoriesRequest(BaseModel):
    selling_categories: list[str] = []
    is_draft: bool = False


class BankDetailsRequest(BaseModel):
    bank_name: str | None = Field(None, max_length=150)
    account_number: str | None = Field(None, max_length=50)
    iban: str | None = Field(None, max_length=50)
    bank_proof_type: str | None = Field(None, max_length=50)
    bank_proof_url: str | None = Field(None, max_length=500)
    is_draft: bool = False


class ReviewOnboardingRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "update_needed",
                    "note": "Bank proof is illegible",
                    "fields_to_clear": ["bank_proof_url"],
                }
            ]
        }
    }

    status: str = Field(..., max_length=30)
    note: str | None = None
    fields_to_clear: list[str] = []
    target_step: int | None = Field(None, ge=0, le=5)


class OnboardingStepResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"current_step": 2, "onboarding_status": "in_progress"}]}}

    current_step: int | None = None
    onboarding_status: str


class OnboardingProfileResponse(BaseModel):
    profile: dict[str, Any]


class OnboardingListResponse(BaseModel):
    profiles: list[dict[str, Any]]


class StatusResponse(BaseModel):
    status: str = "ok"
