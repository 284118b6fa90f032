"""Cross-domain event contracts for Identity domain events.

Ordering keeps a CustomerProfile of each buyer (country, discount, whether
the account is suspended) so checkout never reaches into Identity, and
Payments keeps the names and contacts printed on invoices.
Registered as external events via domain.register_external_event() with
matching __type__ strings.

The source-of-truth events are in src/identity/account/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String


class AccountRegistered(BaseEvent):
    """A customer, vendor or admin account was created."""

    __version__ = 1

    account_id = Identifier(required=True)
    email = String(required=True)
    name = String(required=True)
    account_type = String(required=True)
    country = String()
    registered_at = DateTime(required=True)


class ProfileUpdated(BaseEvent):
    """Name, phone, country or the customer discount changed."""

    __version__ = 1

    account_id = Identifier(required=True)
    name = String(required=True)
    phone = String()
    country = String()
    discount_percent = Float()


class AccountSuspended(BaseEvent):
    """An account was suspended, blocking further activity."""

    __version__ = 1

    account_id = Identifier(required=True)
    reason = String(required=True)
    suspended_at = DateTime(required=True)


class AccountReactivated(BaseEvent):
    """A previously suspended account was restored."""

    __version__ = 1

    account_id = Identifier(required=True)
    reactivated_at = DateTime(required=True)
