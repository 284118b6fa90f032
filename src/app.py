"""SouqHub FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from shared.access import register_access_handlers
from shared.domains import DOMAIN_NAMES, load_domain
from shared.logging import add_context, clear_context, configure_logging

configure_logging(os.environ.get("LOG_DIR", "logs"))

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (projectors fire in UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
domains = {name: load_domain(name) for name in DOMAIN_NAMES}

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/accounts": domains["identity"],
    "/phone-verifications": domains["identity"],
    "/products": domains["catalogue"],
    "/categories": domains["catalogue"],
    "/brands": domains["catalogue"],
    "/vendors": domains["vendors"],
    "/carts": domains["ordering"],
    "/wishlist": domains["ordering"],
    "/checkout": domains["ordering"],
    "/orders": domains["ordering"],
    "/vat-rules": domains["ordering"],
    "/payments": domains["payments"],
    "/invoices": domains["payments"],
    "/finance": domains["finance"],
    "/payouts": domains["finance"],
    "/shipments": domains["fulfillment"],
    "/reviews": domains["reviews"],
    "/settings": domains["marketplace"],
    "/references": domains["marketplace"],
    "/currencies": domains["marketplace"],
    "/maintenance": domains["marketplace"],
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path == prefix or path.startswith(prefix + "/"):
            return domain
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="SouqHub API",
    description="Multi-vendor marketplace — catalogue, vendors, ordering, payments, finance, fulfillment and reviews",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    clear_context()
    add_context(path=request.url.path, actor_id=request.headers.get("x-actor-id"))
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: health check, docs
    return await call_next(request)


register_exception_handlers(app)
register_access_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from catalogue.api import brand_router, category_router, product_router  # noqa: E402
from finance.api import finance_router, payout_router  # noqa: E402
from fulfillment.api import shipment_router  # noqa: E402
from identity.api.routes import router as account_router  # noqa: E402
from identity.api.routes import verification_router  # noqa: E402
from marketplace.api import currency_router, maintenance_router, reference_router, settings_router  # noqa: E402
from ordering.api.routes import cart_router, order_router, vat_router, wishlist_router  # noqa: E402
from payments.api.routes import invoice_router, payment_router  # noqa: E402
from reviews.api import review_router  # noqa: E402
from vendors.api import router as vendor_router  # noqa: E402

for router in (
    account_router,
    verification_router,
    product_router,
    category_router,
    brand_router,
    vendor_router,
    cart_router,
    wishlist_router,
    order_router,
    vat_router,
    payment_router,
    invoice_router,
    finance_router,
    payout_router,
    shipment_router,
    review_router,
    settings_router,
    reference_router,
    currency_router,
    maintenance_router,
):
    app.include_router(router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {name: {"name": domain.name} for name, domain in domains.items()},
        }
    )
