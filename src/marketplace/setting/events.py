"""Domain events for the PlatformSetting aggregate.

PlatformSettingChanged is consumed by Finance and Fulfillment, which keep
their own copies of the keys they read.
"""

from protean.fields import DateTime, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="PlatformSetting")
class PlatformSettingChanged:
    """A platform setting was created or given a new value."""

    __version__ = 1

    key = String(required=True)
    value = Text()  # JSON
    changed_at = DateTime(required=True)
