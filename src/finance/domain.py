"""Finance bounded context — Wallets and Payouts.

Every account that earns money holds a wallet. Vendor earnings arrive
locked for the return period and become available once it lapses; vendors
then request payouts against their available balance, which admins approve
and pay out.
"""

import structlog
from protean.domain import Domain

finance = Domain(name="finance")

logger = structlog.get_logger(__name__)
