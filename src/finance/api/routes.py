"""FastAPI routes for the Finance domain — wallets and payouts."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from finance.api.schemas import (
    ApprovePayoutRequest,
    FinancialLogListResponse,
    MarkPayoutPaidRequest,
    PayoutIdResponse,
    PayoutListResponse,
    PayoutRequestBody,
    PayoutResponse,
    RejectPayoutRequest,
    ReleaseResponse,
    StatusResponse,
    TransactionListResponse,
    WalletResponse,
)
from finance.payout.management import ApprovePayout, MarkPayoutPaid, RejectPayout, RequestPayout, payouts
from finance.payout.payout import Payout
from finance.projections.financial_log import financial_logs_for
from finance.wallet.management import ReleaseLockedFunds, ensure_wallet, transactions_for
from shared.access import (
    AccessDenied,
    Actor,
    Permission,
    current_actor,
    require_permission,
    require_vendor,
    verify_cron_secret,
)

# ---------------------------------------------------------------------------
# Wallet Router
# ---------------------------------------------------------------------------
finance_router = APIRouter(prefix="/finance", tags=["finance"])


def _wallet_owner(actor: Actor, user_id: str | None) -> str:
    """Admins may look at any wallet; everyone else sees their own."""
    if user_id and user_id != actor.id:
        if not actor.is_admin:
            raise AccessDenied("You can only view your own wallet")
        return user_id
    return actor.id


@finance_router.get("/wallet", response_model=WalletResponse)
async def get_wallet(
    user_id: str | None = Query(default=None), actor: Actor = Depends(current_actor)
) -> WalletResponse:
    return WalletResponse(wallet=ensure_wallet(_wallet_owner(actor, user_id)).as_dict())


@finance_router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    transaction_type: str | None = Query(default=None, alias="type"),
    user_id: str | None = Query(default=None),
    actor: Actor = Depends(current_actor),
) -> TransactionListResponse:
    """Wallet transactions, newest first."""
    owner = _wallet_owner(actor, user_id)
    return TransactionListResponse(transactions=[t.as_dict() for t in transactions_for(owner, transaction_type)])


@finance_router.get("/logs", response_model=FinancialLogListResponse)
async def list_financial_logs(
    user_id: str | None = Query(default=None), actor: Actor = Depends(current_actor)
) -> FinancialLogListResponse:
    owner = _wallet_owner(actor, user_id)
    return FinancialLogListResponse(
        logs=[
            {
                "transaction_id": str(log.transaction_id),
                "type": log.entry_type,
                "category": log.category,
                "amount": log.amount,
                "reference_id": log.reference_id,
                "description": log.description,
                "recorded_at": log.recorded_at.isoformat() if log.recorded_at else None,
            }
            for log in financial_logs_for(owner)
        ]
    )


@finance_router.post(
    "/maintenance/release-locked-funds",
    response_model=ReleaseResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def release_locked_funds() -> ReleaseResponse:
    """Scheduler hook: make earnings whose return period ended available."""
    result = current_domain.process(ReleaseLockedFunds(), asynchronous=False)
    return ReleaseResponse(**result)


# ---------------------------------------------------------------------------
# Payout Router
# ---------------------------------------------------------------------------
payout_router = APIRouter(prefix="/payouts", tags=["payouts"])


def _require_payout_manager(actor: Actor) -> None:
    require_permission(actor, Permission.PAYOUT_MANAGE.value)


@payout_router.post("", status_code=201, response_model=PayoutIdResponse)
async def request_payout(body: PayoutRequestBody, actor: Actor = Depends(current_actor)) -> PayoutIdResponse:
    require_vendor(actor)
    payout_id = current_domain.process(
        RequestPayout(vendor_id=actor.id, amount=body.amount, notes=body.notes),
        asynchronous=False,
    )
    return PayoutIdResponse(payout_id=payout_id)


@payout_router.get("", response_model=PayoutListResponse)
async def list_payouts(
    status: str | None = Query(default=None, pattern="^(pending|approved|paid|rejected)$"),
    actor: Actor = Depends(current_actor),
) -> PayoutListResponse:
    """Admins see every payout, vendors their own."""
    vendor_id = None if actor.is_admin else actor.id
    return PayoutListResponse(payouts=[p.as_dict() for p in payouts(vendor_id=vendor_id, status=status)])


@payout_router.get("/{payout_id}", response_model=PayoutResponse)
async def get_payout(payout_id: str, actor: Actor = Depends(current_actor)) -> PayoutResponse:
    payout = current_domain.repository_for(Payout).get(payout_id)
    if not actor.is_admin and str(payout.vendor_id) != actor.id:
        raise AccessDenied("Forbidden")
    return PayoutResponse(payout=payout.as_dict())


@payout_router.post("/{payout_id}/approve", response_model=StatusResponse)
async def approve_payout(
    payout_id: str, body: ApprovePayoutRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_payout_manager(actor)
    current_domain.process(
        ApprovePayout(payout_id=payout_id, admin_id=actor.id, note=body.admin_note),
        asynchronous=False,
    )
    return StatusResponse(status="approved")


@payout_router.post("/{payout_id}/pay", response_model=StatusResponse)
async def mark_payout_paid(
    payout_id: str, body: MarkPayoutPaidRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_payout_manager(actor)
    current_domain.process(
        MarkPayoutPaid(
            payout_id=payout_id,
            admin_id=actor.id,
            transaction_reference=body.transaction_reference,
            note=body.admin_note,
        ),
        asynchronous=False,
    )
    return StatusResponse(status="paid")


@payout_router.post("/{payout_id}/reject", response_model=StatusResponse)
async def reject_payout(
    payout_id: str, body: RejectPayoutRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    _require_payout_manager(actor)
    current_domain.process(
        RejectPayout(payout_id=payout_id, admin_id=actor.id, reason=body.reason),
        asynchronous=False,
    )
    return StatusResponse(status="rejected")
