"""Changing and reading platform settings."""

import json
from datetime import datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.setting.setting import (
    COMMISSION_PERCENT,
    CURRENCY_HOMEPAGE_SYNC_ENABLED,
    CURRENCY_LAST_SYNC,
    CURRENCY_SYNC_ENABLED,
    DEFAULTS,
    PRODUCT_RETURN_PERIOD,
    VAT_PERCENT,
    PlatformSetting,
)


@marketplace.command(part_of=PlatformSetting)
class SetPlatformSetting:
    key = String(required=True, max_length=100)
    value = Text()  # JSON
    description = String(max_length=255)
    updated_by = Identifier()


def store_setting(key, value, description=None, updated_by=None):
    """Create or update a setting in the current unit of work."""
    repo = current_domain.repository_for(PlatformSetting)
    try:
        setting = repo.get(key)
    except ObjectNotFoundError:
        setting = PlatformSetting(key=key)
    setting.change(value, description=description, updated_by=updated_by)
    repo.add(setting)
    return setting


@marketplace.command_handler(part_of=PlatformSetting)
class PlatformSettingHandler:
    @handle(SetPlatformSetting)
    def set_platform_setting(self, command):
        try:
            value = json.loads(command.value) if command.value is not None else None
        except ValueError as exc:
            raise ValidationError({"value": ["Value must be valid JSON"]}) from exc

        setting = store_setting(command.key, value, command.description, command.updated_by)
        logger.info("Platform setting changed", key=command.key, updated_by=str(command.updated_by))
        return setting.as_dict()


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def setting_value(key, default=None):
    """The stored value for `key`, or `default` when it is unset or empty."""
    try:
        value = current_domain.repository_for(PlatformSetting).get(key).decoded
    except ObjectNotFoundError:
        return default
    return default if value in (None, "") else value


def _number(key, cast):
    try:
        return cast(setting_value(key, DEFAULTS[key]))
    except (TypeError, ValueError):
        return DEFAULTS[key]


def vat_percent():
    return _number(VAT_PERCENT, float)


def commission_percent():
    return _number(COMMISSION_PERCENT, float)


def product_return_period():
    """Days a delivered order can still be returned."""
    return _number(PRODUCT_RETURN_PERIOD, int)


def _flag(key):
    value = setting_value(key, DEFAULTS[key])
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


def currency_sync_enabled():
    return _flag(CURRENCY_SYNC_ENABLED)


def currency_homepage_sync_enabled():
    return _flag(CURRENCY_HOMEPAGE_SYNC_ENABLED)


def currency_last_sync():
    value = setting_value(CURRENCY_LAST_SYNC)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def all_settings():
    """Every known key with its effective value, plus any custom keys that were set."""
    stored = {s.key: s for s in current_domain.repository_for(PlatformSetting)._dao.query.all().items}
    listing = [
        stored[key].as_dict() if key in stored else {"key": key, "value": default, "description": None, "updated_at": None}
        for key, default in DEFAULTS.items()
    ]
    listing.extend(s.as_dict() for key, s in sorted(stored.items()) if key not in DEFAULTS)
    return listing


def public_settings():
    return {
        VAT_PERCENT: vat_percent(),
        PRODUCT_RETURN_PERIOD: product_return_period(),
    }
