"""Ordering bounded context — carts, wishlists, checkout and vendor orders.

Splits a customer's cart into one order per vendor at checkout, prices each
order with VAT and platform commission, decides whether it is a direct sale
or a purchase request that needs approval, and tracks every order through
its order, payment and shipment statuses.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
