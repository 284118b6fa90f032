"""Vendors bounded context — onboarding profiles and their admin review.

A vendor fills in a six-step onboarding form, submits it for verification,
and an admin approves it for general or controlled trade, rejects it, or
sends it back for updates with selected fields cleared.
"""

import structlog
from protean.domain import Domain

vendors = Domain(name="vendors")

logger = structlog.get_logger(__name__)
