"""PlatformSetting aggregate — one key/value pair of platform configuration.

Values are stored as JSON text so a setting can hold a number, a flag or a
timestamp. Well-known keys are validated against their expected type.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from marketplace.domain import marketplace
from marketplace.setting.events import PlatformSettingChanged

VAT_PERCENT = "vat_percent"
COMMISSION_PERCENT = "commission_percent"
PRODUCT_RETURN_PERIOD = "product_return_period"
CURRENCY_SYNC_ENABLED = "currency_sync_enabled"
CURRENCY_HOMEPAGE_SYNC_ENABLED = "currency_homepage_sync_enabled"
CURRENCY_LAST_SYNC = "currency_last_sync"

DEFAULTS = {
    VAT_PERCENT: 5.0,
    COMMISSION_PERCENT: 10.0,
    PRODUCT_RETURN_PERIOD: 10,
    CURRENCY_SYNC_ENABLED: True,
    CURRENCY_HOMEPAGE_SYNC_ENABLED: False,
    CURRENCY_LAST_SYNC: None,
}


def _percentage(value):
    return isinstance(value, int | float) and not isinstance(value, bool) and 0 <= value <= 100


def _days(value):
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _flag(value):
    return isinstance(value, bool)


def _timestamp(value):
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


_CHECKS = {
    VAT_PERCENT: (_percentage, "must be a number between 0 and 100"),
    COMMISSION_PERCENT: (_percentage, "must be a number between 0 and 100"),
    PRODUCT_RETURN_PERIOD: (_days, "must be a whole number of days"),
    CURRENCY_SYNC_ENABLED: (_flag, "must be true or false"),
    CURRENCY_HOMEPAGE_SYNC_ENABLED: (_flag, "must be true or false"),
    CURRENCY_LAST_SYNC: (_timestamp, "must be an ISO 8601 timestamp"),
}


def decode_value(raw):
    """The Python value behind a stored setting; non-JSON text comes back as-is."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw


@marketplace.aggregate
class PlatformSetting:
    key = String(identifier=True, required=True, max_length=100)
    value = Text()  # JSON
    description = String(max_length=255)
    updated_by = Identifier()
    updated_at = DateTime()

    @classmethod
    def validate(cls, key, value):
        check = _CHECKS.get(key)
        if check and value is not None and not check[0](value):
            raise ValidationError({"value": [f"{key} {check[1]}"]})

    def change(self, value, description=None, updated_by=None):
        """Give the setting a new value and announce it."""
        self.validate(self.key, value)
        now = datetime.now(UTC)
        self.value = json.dumps(value)
        if description is not None:
            self.description = description
        self.updated_by = updated_by
        self.updated_at = now

        self.raise_(PlatformSettingChanged(key=self.key, value=self.value, changed_at=now))

    @property
    def decoded(self):
        return decode_value(self.value)

    def as_dict(self):
        return {
            "key": self.key,
            "value": self.decoded,
            "description": self.description,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
