"""FastAPI endpoints for vendor onboarding."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from shared.access import (
    Actor,
    Permission,
    current_actor,
    require_admin,
    require_permission,
    require_vendor,
    serialize_permissions,
)
from vendors.api.schemas import (
    BankDetailsRequest,
    CompanyBasicsRequest,
    CompanyDetailsRequest,
    ContactPersonRequest,
    DeclarationRequest,
    OnboardingListResponse,
    OnboardingProfileResponse,
    OnboardingStepResponse,
    ReviewOnboardingRequest,
    SellingCategoriesRequest,
    StatusResponse,
)
from vendors.profile.steps import (
    SaveBankDetails,
    SaveCompanyBasics,
    SaveCompanyDetails,
    SaveContactPerson,
    SaveDeclaration,
    SaveSellingCategories,
)
from vendors.profile.verification import (
    ReviewVendorOnboarding,
    SubmitForVerification,
    profile_for_vendor,
    profiles_by_status,
)

router = APIRouter(prefix="/vendors", tags=["vendors"])


def _step_response(vendor_id: str) -> OnboardingStepResponse:
    profile = profile_for_vendor(vendor_id)
    return OnboardingStepResponse(current_step=profile.current_step, onboarding_status=profile.onboarding_status)


def _require_onboarding_reader(actor: Actor) -> None:
    require_admin(actor)
    require_permission(actor, Permission.VENDOR_APPROVE.value, Permission.VENDOR_CONTROLLED_APPROVE.value)


# ---------------------------------------------------------------------------
# Vendor self-service
# ---------------------------------------------------------------------------
@router.get("/onboarding", response_model=OnboardingProfileResponse)
async def my_onboarding(actor: Actor = Depends(current_actor)) -> OnboardingProfileResponse:
    require_vendor(actor)
    return OnboardingProfileResponse(profile=profile_for_vendor(actor.id).as_dict())


@router.post("/onboarding/step0", response_model=OnboardingStepResponse)
async def save_company_basics(
    body: CompanyBasicsRequest, actor: Actor = Depends(current_actor)
) -> OnboardingStepResponse:
    require_vendor(actor)
    current_domain.process(SaveCompanyBasics(vendor_id=actor.id, **body.model_dump()), asynchronous=False)
    return _step_response(actor.id)


@router.post("/onboarding/step1", response_model=OnboardingStepResponse)
async def save_company_details(
    body: CompanyDetailsRequest, actor: Actor = Depends(current_actor)
) -> OnboardingStepResponse:
    require_vendor(actor)
    current_domain.process(SaveCompanyDetails(vendor_id=actor.id, **body.model_dump()), asynchronous=False)
    return _step_response(actor.id)


@router.post("/onboarding/step2", response_model=OnboardingStepResponse)
async def save_contact_person(
    body: ContactPersonRequest, actor: Actor = Depends(current_actor)
) -> OnboardingStepResponse:
    require_vendor(actor)
    current_domain.process(SaveContactPerson(vendor_id=actor.id, **body.model_dump()), asynchronous=False)
    return _step_response(actor.id)


@router.post("/onboarding/step3", response_model=OnboardingStepResponse)
async def save_declaration(body: DeclarationRequest, actor: Actor = Depends(current_actor)) -> OnboardingStepResponse:
    require_vendor(actor)
    current_domain.process(SaveDeclaration(vendor_id=actor.id, **body.model_dump()), asynchronous=False)
    return _step_response(actor.id)


@router.post("/onboarding/step4", response_model=OnboardingStepResponse)
async def save_selling_categories(
    body: SellingCategoriesRequest, actor: Actor = Depends(current_actor)
) -> OnboardingStepResponse:
    require_vendor(actor)
    command = SaveSellingCategories(
        vendor_id=actor.id,
        selling_categories=json.dumps(body.selling_categories),
        is_draft=body.is_draft,
    )
    current_domain.process(command, asynchronous=False)
    return _step_response(actor.id)


@router.post("/onboarding/step5", response_model=OnboardingStepResponse)
async def save_bank_details(body: BankDetailsRequest, actor: Actor = Depends(current_actor)) -> OnboardingStepResponse:
    require_vendor(actor)
    current_domain.process(SaveBankDetails(vendor_id=actor.id, **body.model_dump()), asynchronous=False)
    return _step_response(actor.id)


@router.post("/onboarding/submit", response_model=OnboardingStepResponse)
async def submit_for_verification(actor: Actor = Depends(current_actor)) -> OnboardingStepResponse:
    require_vendor(actor)
    current_domain.process(SubmitForVerification(vendor_id=actor.id), asynchronous=False)
    return _step_response(actor.id)


# ---------------------------------------------------------------------------
# Admin review
# ---------------------------------------------------------------------------
@router.get("", response_model=OnboardingListResponse)
async def list_onboarding(
    status: str | None = Query(None), actor: Actor = Depends(current_actor)
) -> OnboardingListResponse:
    _require_onboarding_reader(actor)
    return OnboardingListResponse(profiles=[p.as_dict() for p in profiles_by_status(status)])


@router.get("/{vendor_id}/onboarding", response_model=OnboardingProfileResponse)
async def get_onboarding(vendor_id: str, actor: Actor = Depends(current_actor)) -> OnboardingProfileResponse:
    _require_onboarding_reader(actor)
    return OnboardingProfileResponse(profile=profile_for_vendor(vendor_id).as_dict())


@router.put("/{vendor_id}/onboarding", response_model=StatusResponse)
async def review_onboarding(
    vendor_id: str, body: ReviewOnboardingRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = ReviewVendorOnboarding(
        vendor_id=vendor_id,
        status=body.status,
        note=body.note,
        fields_to_clear=json.dumps(body.fields_to_clear),
        target_step=body.target_step,
        reviewer_id=actor.id,
        reviewer_type=actor.type,
        reviewer_permissions=serialize_permissions(actor.permissions),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=body.status)
