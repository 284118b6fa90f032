"""Catalogue bounded context — categories, brands and vendor products.

Owns the category tree (including the controlled-goods flag that drives
compliance), the brand register, and products with their approval
workflow and commission-inflated customer pricing.
"""

import structlog
from protean.domain import Domain

catalogue = Domain(name="catalogue")

logger = structlog.get_logger(__name__)
