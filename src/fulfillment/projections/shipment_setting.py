"""Shipment defaults, kept in step with Marketplace platform settings.

Only `shipment.*` keys are tracked. Missing keys fall back to the FedEx
defaults the platform ships with.
"""

import json

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, String, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment

SETTING_PREFIX = "shipment."

DEFAULTS = {
    "shipment.service_type": "FEDEX_INTERNATIONAL_PRIORITY",
    "shipment.packaging_type": "YOUR_PACKAGING",
    "shipment.pickup_type": "USE_SCHEDULED_PICKUP",
}


@fulfillment.projection
class ShipmentSetting:
    key: String(identifier=True, required=True, max_length=100)
    value: Text()  # JSON
    changed_at: DateTime()


def shipment_setting(key):
    default = DEFAULTS.get(key)
    try:
        raw = current_domain.repository_for(ShipmentSetting).get(key).value
    except ObjectNotFoundError:
        return default
    try:
        value = json.loads(raw) if raw is not None else None
    except ValueError:
        value = raw
    return default if value in (None, "") else value


def shipment_defaults():
    """{service_type, packaging_type, pickup_type} with platform overrides applied."""
    return {key.removeprefix(SETTING_PREFIX): shipment_setting(key) for key in DEFAULTS}
