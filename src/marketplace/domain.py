"""Marketplace bounded context — platform-wide configuration.

Holds the settings other contexts tune themselves by (VAT, commission,
return period, shipment defaults), the reference lists that populate
admin and storefront dropdowns, and currency exchange rates synced daily
from a public feed with AED as the base.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
