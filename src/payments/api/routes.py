"""FastAPI routes for the Payments domain — checkout sessions and invoices."""

import json
import os

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from protean.utils.globals import current_domain

from payments.api.schemas import (
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    GenerateAdminInvoiceRequest,
    GenerateCustomerInvoiceRequest,
    InvoiceIdResponse,
    InvoiceListResponse,
    InvoiceResponse,
    PaymentSessionResponse,
    RetryPaymentRequest,
    RetryPaymentResponse,
    StatusResponse,
    VerifySessionRequest,
    VerifySessionResponse,
    WebhookResponse,
)
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import WebhookVerificationError
from payments.invoice.generation import GenerateAdminInvoice, GenerateCustomerInvoice
from payments.invoice.invoice import Invoice, InvoiceType
from payments.invoice.listing import (
    all_invoices,
    invoice_by_id,
    invoice_by_token,
    invoices_for_customer,
    invoices_for_group,
    invoices_for_order,
    invoices_for_vendor,
)
from payments.invoice.rendering import render_invoice
from payments.invoice.settlement import MarkInvoicePaid
from payments.session.opening import session_for_group
from payments.session.retry import RetryPaymentSession
from payments.session.verification import VerifyPaymentSession
from payments.session.webhook import HandleCheckoutWebhook
from shared.access import AccessDenied, Actor, Permission, current_actor, require_admin, require_permission

# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.get("/sessions/{order_group_id}", response_model=PaymentSessionResponse)
async def get_payment_session(order_group_id: str, actor: Actor = Depends(current_actor)) -> PaymentSessionResponse:
    """The checkout session for an order group, with its payment URL."""
    session = session_for_group(order_group_id)
    if session is None:
        raise HTTPException(status_code=404, detail="No payment session for this order group")
    if not actor.is_admin and str(session.customer_id) != actor.id:
        raise AccessDenied("This checkout belongs to another customer")
    return PaymentSessionResponse(session=session.as_dict())


@payment_router.post("/verify-session", response_model=VerifySessionResponse)
async def verify_session(body: VerifySessionRequest, actor: Actor = Depends(current_actor)) -> VerifySessionResponse:
    """Confirm the outcome of a checkout when the customer returns from the gateway."""
    result = current_domain.process(
        VerifyPaymentSession(session_id=body.session_id, customer_id=actor.id),
        asynchronous=False,
    )
    return VerifySessionResponse(**result)


@payment_router.post("/retry", response_model=RetryPaymentResponse)
async def retry_payment(body: RetryPaymentRequest, actor: Actor = Depends(current_actor)) -> RetryPaymentResponse:
    """Open a fresh checkout session for an unpaid order group."""
    result = current_domain.process(
        RetryPaymentSession(order_group_id=body.order_group_id, customer_id=actor.id),
        asynchronous=False,
    )
    return RetryPaymentResponse(**result)


@payment_router.post("/webhook", response_model=WebhookResponse)
async def checkout_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
) -> WebhookResponse:
    """Receive checkout events from the payment gateway."""
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing stripe-signature header")

    payload = await request.body()
    try:
        event = get_gateway().verify_webhook(payload, stripe_signature)
    except WebhookVerificationError as exc:
        raise HTTPException(status_code=401, detail="Invalid webhook signature") from exc

    result = current_domain.process(HandleCheckoutWebhook(event=json.dumps(event)), asynchronous=False)
    return WebhookResponse(received=True, result=result)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available when PROTEAN_ENV is not 'production'.
    It decides whether new sessions can be created and whether they come
    back paid.
    """
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        pays=body.pays,
        failure_reason=body.failure_reason,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        pays=gateway.pays,
        failure_reason=gateway.failure_reason,
    )


# ---------------------------------------------------------------------------
# Invoice Router
# ---------------------------------------------------------------------------
invoice_router = APIRouter(prefix="/invoices", tags=["invoices"])


def _can_view(invoice: Invoice, actor: Actor) -> bool:
    if actor.is_admin:
        return True
    if actor.is_vendor:
        return invoice.invoice_type == InvoiceType.ADMIN.value and str(invoice.vendor_id) == actor.id
    return invoice.invoice_type == InvoiceType.CUSTOMER.value and str(invoice.customer_id) == actor.id


def _visible(invoices, actor: Actor) -> list[dict]:
    return [invoice.as_dict() for invoice in invoices if _can_view(invoice, actor)]


@invoice_router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    invoice_type: str | None = Query(default=None, pattern="^(admin|customer)$"),
    actor: Actor = Depends(current_actor),
) -> InvoiceListResponse:
    """All invoices (admin only)."""
    require_admin(actor)
    return InvoiceListResponse(invoices=[i.as_dict() for i in all_invoices(invoice_type)])


@invoice_router.get("/mine", response_model=InvoiceListResponse)
async def my_invoices(actor: Actor = Depends(current_actor)) -> InvoiceListResponse:
    """Vendors see the invoices they issued, customers the invoices addressed to them."""
    if actor.is_vendor:
        invoices = invoices_for_vendor(actor.id)
    else:
        invoices = invoices_for_customer(actor.id)
    return InvoiceListResponse(invoices=[i.as_dict() for i in invoices])


@invoice_router.get("/public/{access_token}", response_class=HTMLResponse)
async def public_invoice(access_token: str) -> HTMLResponse:
    """Printable invoice behind its shareable link."""
    return HTMLResponse(content=render_invoice(invoice_by_token(access_token)))


@invoice_router.get("/orders/{order_id}", response_model=InvoiceListResponse)
async def order_invoices(order_id: str, actor: Actor = Depends(current_actor)) -> InvoiceListResponse:
    return InvoiceListResponse(invoices=_visible(invoices_for_order(order_id), actor))


@invoice_router.get("/groups/{order_group_id}", response_model=InvoiceListResponse)
async def group_invoices(order_group_id: str, actor: Actor = Depends(current_actor)) -> InvoiceListResponse:
    return InvoiceListResponse(invoices=_visible(invoices_for_group(order_group_id), actor))


@invoice_router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(invoice_id: str, actor: Actor = Depends(current_actor)) -> InvoiceResponse:
    invoice = invoice_by_id(invoice_id)
    if not _can_view(invoice, actor):
        raise AccessDenied("You can only view your own invoices")
    return InvoiceResponse(invoice=invoice.as_dict(include_token=True))


@invoice_router.post("/admin", status_code=201, response_model=InvoiceIdResponse)
async def generate_admin_invoice(
    body: GenerateAdminInvoiceRequest, actor: Actor = Depends(current_actor)
) -> InvoiceIdResponse:
    """Issue the vendor's invoice for an order by hand."""
    require_permission(actor, Permission.ORDER_MANAGE.value)
    result = current_domain.process(
        GenerateAdminInvoice(order_id=body.order_id, comments=body.comments),
        asynchronous=False,
    )
    return InvoiceIdResponse(invoice_id=result)


@invoice_router.post("/customer", status_code=201, response_model=InvoiceIdResponse)
async def generate_customer_invoice(
    body: GenerateCustomerInvoiceRequest, actor: Actor = Depends(current_actor)
) -> InvoiceIdResponse:
    """Issue the customer's invoice for an order group, e.g. for an approved purchase request."""
    require_permission(actor, Permission.ORDER_MANAGE.value)
    result = current_domain.process(
        GenerateCustomerInvoice(
            order_group_id=body.order_group_id,
            comments=body.comments,
            payment_status=body.payment_status,
        ),
        asynchronous=False,
    )
    return InvoiceIdResponse(invoice_id=result)


@invoice_router.post("/{invoice_id}/mark-paid", response_model=StatusResponse)
async def mark_invoice_paid(invoice_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_permission(actor, Permission.ORDER_MANAGE.value)
    current_domain.process(MarkInvoicePaid(invoice_id=invoice_id), asynchronous=False)
    return StatusResponse(status="paid")
