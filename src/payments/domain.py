"""Payments & Billing bounded context — Checkout Sessions and Invoicing.

Opens hosted checkout sessions for direct-sale order groups, settles them
from the gateway (on return or by webhook), and issues vendor and customer
invoices.
"""

import structlog
from protean.domain import Domain

payments = Domain(name="payments")

logger = structlog.get_logger(__name__)
