"""Cross-domain event contracts for Marketplace domain events.

Finance reads the return period and commission rate, and Fulfillment the
`shipment.*` defaults, from platform settings. Each keeps its own copy of
the keys it needs. Registered as an external event via
domain.register_external_event() with a matching __type__ string.

The source-of-truth event is in src/marketplace/setting/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, String, Text


class PlatformSettingChanged(BaseEvent):
    """A platform setting was created or given a new value."""

    __version__ = 1

    key = String(required=True)
    value = Text()  # JSON
    changed_at = DateTime(required=True)
