"""FastAPI endpoints for the Identity domain."""

import os

from fastapi import APIRouter, Depends, HTTPException
from protean.utils.globals import current_domain

from identity.account.account import Account, AccountType
from identity.account.addresses import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from identity.account.permissions import (
    GrantPermission,
    RevokePermission,
    accounts_with_permission,
    permission_catalogue,
)
from identity.account.registration import RegisterAccount, UpdateProfile
from identity.account.status import ReactivateAccount, SuspendAccount
from identity.api.schemas import (
    AccountIdResponse,
    AccountResponse,
    AddAddressRequest,
    AddressIdResponse,
    AddressResponse,
    ConfigureSmsRequest,
    GrantPermissionRequest,
    PermissionCatalogueResponse,
    PermissionHoldersResponse,
    PermissionResponse,
    RegisterAccountRequest,
    SmsConfigResponse,
    StartVerificationRequest,
    StatusResponse,
    SuspendAccountRequest,
    UpdateAddressRequest,
    UpdateProfileRequest,
    VerificationIdResponse,
    VerificationResultResponse,
    VerifyCodeRequest,
)
from identity.otp.challenge import ResendPhoneCode, StartPhoneVerification, VerifyPhoneCode
from identity.sms import get_sms_sender
from identity.sms.fake_adapter import FakeSmsSender
from shared.access import AccessDenied, Actor, ActorType, current_actor, optional_actor, require_admin

router = APIRouter(prefix="/accounts", tags=["accounts"])
verification_router = APIRouter(prefix="/phone-verifications", tags=["phone-verifications"])


def _require_self_or_admin(actor: Actor, account_id: str) -> None:
    if actor.id != account_id and not actor.is_admin:
        raise AccessDenied("You can only manage your own account")


def _require_super_admin(actor: Actor) -> None:
    if actor.type != ActorType.SUPER_ADMIN.value:
        raise AccessDenied("Super admin access required")


def _account_response(account) -> AccountResponse:
    return AccountResponse(
        account_id=str(account.id),
        email=account.email.address,
        name=account.name,
        phone=account.phone,
        phone_verified=bool(account.phone_verified),
        account_type=account.account_type,
        country=account.country,
        discount_percent=account.discount_percent or 0.0,
        status=account.status,
        permissions=account.permission_codes,
        addresses=[AddressResponse(**a.as_dict()) for a in account.addresses],
    )


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
@router.post("", status_code=201, response_model=AccountIdResponse)
async def register_account(
    body: RegisterAccountRequest, actor: Actor | None = Depends(optional_actor)
) -> AccountIdResponse:
    """Customers and vendors sign up themselves; admin accounts need a super admin."""
    if body.account_type in (AccountType.ADMIN.value, AccountType.SUPER_ADMIN.value):
        if actor is None:
            raise AccessDenied("Super admin access required")
        _require_super_admin(actor)

    command = RegisterAccount(
        email=body.email,
        name=body.name,
        account_type=body.account_type,
        phone=body.phone,
        country=body.country,
    )
    result = current_domain.process(command, asynchronous=False)
    return AccountIdResponse(account_id=result)


@router.get("/permissions", response_model=PermissionCatalogueResponse)
async def list_permissions(actor: Actor = Depends(current_actor)) -> PermissionCatalogueResponse:
    require_admin(actor)
    return PermissionCatalogueResponse(permissions=[PermissionResponse(**p) for p in permission_catalogue()])


@router.get("/permissions/{code}", response_model=PermissionHoldersResponse)
async def list_permission_holders(code: str, actor: Actor = Depends(current_actor)) -> PermissionHoldersResponse:
    require_admin(actor)
    return PermissionHoldersResponse(
        permission=code,
        account_ids=[str(a.id) for a in accounts_with_permission(code)],
    )


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(account_id: str, actor: Actor = Depends(current_actor)) -> AccountResponse:
    _require_self_or_admin(actor, account_id)
    account = current_domain.repository_for(Account).get(account_id)
    return _account_response(account)


@router.put("/{account_id}/profile", response_model=StatusResponse)
async def update_profile(
    account_id: str, body: UpdateProfileRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_self_or_admin(actor, account_id)
    if body.discount_percent is not None:
        require_admin(actor)

    command = UpdateProfile(
        account_id=account_id,
        name=body.name,
        phone=body.phone,
        country=body.country,
        discount_percent=body.discount_percent,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.put("/{account_id}/suspend", response_model=StatusResponse)
async def suspend_account(
    account_id: str, body: SuspendAccountRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_admin(actor)
    current_domain.process(SuspendAccount(account_id=account_id, reason=body.reason), asynchronous=False)
    return StatusResponse()


@router.put("/{account_id}/reactivate", response_model=StatusResponse)
async def reactivate_account(account_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_admin(actor)
    current_domain.process(ReactivateAccount(account_id=account_id), asynchronous=False)
    return StatusResponse()


@router.post("/{account_id}/permissions", response_model=StatusResponse)
async def grant_permission(
    account_id: str, body: GrantPermissionRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_super_admin(actor)
    command = GrantPermission(account_id=account_id, permission=body.permission, granted_by=actor.id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.delete("/{account_id}/permissions/{code}", response_model=StatusResponse)
async def revoke_permission(account_id: str, code: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_super_admin(actor)
    command = RevokePermission(account_id=account_id, permission=code, revoked_by=actor.id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Address book
# ---------------------------------------------------------------------------
@router.post("/{account_id}/addresses", status_code=201, response_model=AddressIdResponse)
async def add_address(
    account_id: str, body: AddAddressRequest, actor: Actor = Depends(current_actor)
) -> AddressIdResponse:
    _require_self_or_admin(actor, account_id)
    command = AddAddress(account_id=account_id, **body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return AddressIdResponse(address_id=result)


@router.put("/{account_id}/addresses/{address_id}", response_model=StatusResponse)
async def update_address(
    account_id: str, address_id: str, body: UpdateAddressRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_self_or_admin(actor, account_id)
    command = UpdateAddress(account_id=account_id, address_id=address_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@router.delete("/{account_id}/addresses/{address_id}", response_model=StatusResponse)
async def remove_address(account_id: str, address_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    _require_self_or_admin(actor, account_id)
    current_domain.process(RemoveAddress(account_id=account_id, address_id=address_id), asynchronous=False)
    return StatusResponse()


@router.put("/{account_id}/addresses/{address_id}/default", response_model=StatusResponse)
async def set_default_address(
    account_id: str, address_id: str, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_self_or_admin(actor, account_id)
    current_domain.process(SetDefaultAddress(account_id=account_id, address_id=address_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Phone verification
# ---------------------------------------------------------------------------
@verification_router.post("", status_code=201, response_model=VerificationIdResponse)
async def start_verification(body: StartVerificationRequest) -> VerificationIdResponse:
    command = StartPhoneVerification(phone=body.phone, purpose=body.purpose)
    result = current_domain.process(command, asynchronous=False)
    return VerificationIdResponse(verification_id=result)


@verification_router.post("/{verification_id}/verify", response_model=VerificationResultResponse)
async def verify_code(verification_id: str, body: VerifyCodeRequest) -> VerificationResultResponse:
    result = current_domain.process(
        VerifyPhoneCode(verification_id=verification_id, code=body.code), asynchronous=False
    )
    if not result["verified"]:
        raise HTTPException(status_code=400, detail=result)
    return VerificationResultResponse(**result)


@verification_router.post("/{verification_id}/resend", response_model=StatusResponse)
async def resend_code(verification_id: str) -> StatusResponse:
    current_domain.process(ResendPhoneCode(verification_id=verification_id), asynchronous=False)
    return StatusResponse(status="sent")


@verification_router.post("/sms/configure", response_model=SmsConfigResponse)
async def configure_sms(body: ConfigureSmsRequest) -> SmsConfigResponse:
    """Configure the FakeSmsSender behaviour (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="SMS configuration not available in production")

    sender = get_sms_sender()
    if not isinstance(sender, FakeSmsSender):
        raise HTTPException(status_code=400, detail="SMS configuration only available for FakeSmsSender")

    sender.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return SmsConfigResponse(
        sender=type(sender).__name__,
        should_succeed=sender.should_succeed,
        failure_reason=sender.failure_reason,
    )
