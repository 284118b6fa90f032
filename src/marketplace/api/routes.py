"""FastAPI routes for the Marketplace domain.

Reads of references, currencies and public settings are open; every write
needs the `settings.manage` permission.
"""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.schemas import (
    ConversionResponse,
    CreateReferenceRequest,
    CurrencyListResponse,
    CurrencyResponse,
    DefineCurrencyRequest,
    HomepageSyncResponse,
    ReferenceListResponse,
    ReferenceResponse,
    ReferenceTypesResponse,
    ReorderReferencesRequest,
    ReorderResponse,
    SetSettingRequest,
    SettingListResponse,
    SettingResponse,
    StatusResponse,
    SyncResponse,
    UpdateReferenceRequest,
)
from marketplace.currency.conversion import DefineCurrency, all_rates, convert_amount
from marketplace.currency.sync import SyncCurrencyRates, sync_if_due
from marketplace.reference.management import (
    CreateReference,
    DeactivateReference,
    ReorderReferences,
    UpdateReference,
    list_references,
    reference_types,
)
from marketplace.setting.management import SetPlatformSetting, all_settings, public_settings
from shared.access import Actor, Permission, current_actor, optional_actor, require_permission, verify_cron_secret


def _require_settings_manager(actor: Actor) -> None:
    require_permission(actor, Permission.SETTINGS_MANAGE.value)


# ---------------------------------------------------------------------------
# Settings Router
# ---------------------------------------------------------------------------
settings_router = APIRouter(prefix="/settings", tags=["settings"])


@settings_router.get("", response_model=SettingListResponse)
async def list_settings(actor: Actor = Depends(current_actor)) -> SettingListResponse:
    _require_settings_manager(actor)
    return SettingListResponse(settings=all_settings())


@settings_router.get("/public")
async def get_public_settings() -> dict:
    """Settings the storefront shows, such as the VAT rate."""
    return public_settings()


@settings_router.put("/{key}", response_model=SettingResponse)
async def set_setting(key: str, body: SetSettingRequest, actor: Actor = Depends(current_actor)) -> SettingResponse:
    _require_settings_manager(actor)
    command = SetPlatformSetting(
        key=key,
        value=json.dumps(body.value),
        description=body.description,
        updated_by=actor.id,
    )
    return SettingResponse(setting=current_domain.process(command, asynchronous=False))


# ---------------------------------------------------------------------------
# Reference Router
# ---------------------------------------------------------------------------
reference_router = APIRouter(prefix="/references", tags=["references"])


@reference_router.get("", response_model=ReferenceTypesResponse)
async def list_reference_types() -> ReferenceTypesResponse:
    return ReferenceTypesResponse(types=reference_types())


@reference_router.get("/{ref_type}", response_model=ReferenceListResponse)
async def list_reference_entries(
    ref_type: str,
    include_inactive: bool = Query(default=False),
    actor: Actor | None = Depends(optional_actor),
) -> ReferenceListResponse:
    """Active entries of a list; managers may include inactive ones."""
    if include_inactive:
        if actor is None:
            include_inactive = False
        else:
            _require_settings_manager(actor)
    entries = list_references(ref_type, include_inactive=include_inactive)
    return ReferenceListResponse(references=[e.as_dict() for e in entries])


@reference_router.post("/{ref_type}", status_code=201, response_model=ReferenceResponse)
async def create_reference(
    ref_type: str, body: CreateReferenceRequest, actor: Actor = Depends(current_actor)
) -> ReferenceResponse:
    _require_settings_manager(actor)
    command = CreateReference(ref_type=ref_type, name=body.name, code=body.code, is_active=body.is_active)
    return ReferenceResponse(reference=current_domain.process(command, asynchronous=False))


@reference_router.post("/{ref_type}/reorder", response_model=ReorderResponse)
async def reorder_references(
    ref_type: str, body: ReorderReferencesRequest, actor: Actor = Depends(current_actor)
) -> ReorderResponse:
    _require_settings_manager(actor)
    command = ReorderReferences(ref_type=ref_type, reference_ids=json.dumps(body.ids))
    return ReorderResponse(reordered=current_domain.process(command, asynchronous=False))


@reference_router.put("/{ref_type}/{reference_id}", response_model=ReferenceResponse)
async def update_reference(
    ref_type: str, reference_id: str, body: UpdateReferenceRequest, actor: Actor = Depends(current_actor)
) -> ReferenceResponse:
    _require_settings_manager(actor)
    command = UpdateReference(
        reference_id=reference_id,
        ref_type=ref_type,
        name=body.name,
        code=body.code,
        display_order=body.display_order,
        is_active=body.is_active,
    )
    return ReferenceResponse(reference=current_domain.process(command, asynchronous=False))


@reference_router.delete("/{ref_type}/{reference_id}", response_model=StatusResponse)
async def deactivate_reference(
    ref_type: str, reference_id: str, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_settings_manager(actor)
    current_domain.process(DeactivateReference(reference_id=reference_id, ref_type=ref_type), asynchronous=False)
    return StatusResponse(status="deactivated")


# ---------------------------------------------------------------------------
# Currency Router
# ---------------------------------------------------------------------------
currency_router = APIRouter(prefix="/currencies", tags=["currencies"])


@currency_router.get("", response_model=CurrencyListResponse)
async def list_currencies() -> CurrencyListResponse:
    return CurrencyListResponse(currencies=[c.as_dict() for c in all_rates()])


@currency_router.get("/convert", response_model=ConversionResponse)
async def convert(
    amount: float = Query(...),
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3),
    to_currency: str = Query(..., alias="to", min_length=3, max_length=3),
) -> ConversionResponse:
    return ConversionResponse(
        amount=amount,
        from_currency=from_currency.upper(),
        to_currency=to_currency.upper(),
        converted=convert_amount(amount, from_currency, to_currency),
    )


@currency_router.post("", status_code=201, response_model=CurrencyResponse)
async def define_currency(body: DefineCurrencyRequest, actor: Actor = Depends(current_actor)) -> CurrencyResponse:
    _require_settings_manager(actor)
    command = DefineCurrency(code=body.code, name=body.name, rate=body.rate, is_active=body.is_active)
    return CurrencyResponse(currency=current_domain.process(command, asynchronous=False))


@currency_router.post("/sync", response_model=SyncResponse)
async def sync_currencies(
    force: bool = Query(default=True), actor: Actor = Depends(current_actor)
) -> SyncResponse:
    _require_settings_manager(actor)
    return SyncResponse(**current_domain.process(SyncCurrencyRates(force=force), asynchronous=False))


@currency_router.post("/homepage-sync", response_model=HomepageSyncResponse)
async def homepage_sync() -> HomepageSyncResponse:
    """Called as the storefront loads; syncs at most once a day when enabled."""
    result = sync_if_due()
    return HomepageSyncResponse(triggered=result is not None, result=SyncResponse(**result) if result else None)


# ---------------------------------------------------------------------------
# Maintenance Router
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post(
    "/sync-currencies",
    response_model=SyncResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def cron_sync_currencies() -> SyncResponse:
    """Scheduler hook: refresh exchange rates."""
    return SyncResponse(**current_domain.process(SyncCurrencyRates(force=True), asynchronous=False))
