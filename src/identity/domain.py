"""Identity bounded context — accounts, addresses, admin permissions and
phone verification."""

import structlog
from protean.domain import Domain

identity = Domain(name="identity")

logger = structlog.get_logger(__name__)
