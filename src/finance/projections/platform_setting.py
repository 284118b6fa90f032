"""Platform settings Finance depends on, kept in step with Marketplace."""

import json

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, String, Text
from protean.utils.globals import current_domain

from finance.domain import finance
from finance.wallet.wallet import DEFAULT_RETURN_PERIOD_DAYS

RETURN_PERIOD_KEY = "product_return_period"
COMMISSION_KEY = "commission_percent"
DEFAULT_COMMISSION_PERCENT = 10.0


@finance.projection
class FinanceSetting:
    key: String(identifier=True, required=True, max_length=100)
    value: Text()  # JSON
    changed_at: DateTime()


def _setting(key, default):
    try:
        raw = current_domain.repository_for(FinanceSetting).get(key).value
    except ObjectNotFoundError:
        return default
    try:
        value = json.loads(raw) if raw is not None else None
    except ValueError:
        value = raw
    return default if value in (None, "") else value


def return_period_days():
    """Days a vendor earning stays locked."""
    try:
        return int(_setting(RETURN_PERIOD_KEY, DEFAULT_RETURN_PERIOD_DAYS))
    except (TypeError, ValueError):
        return DEFAULT_RETURN_PERIOD_DAYS


def commission_percent():
    try:
        return float(_setting(COMMISSION_KEY, DEFAULT_COMMISSION_PERCENT))
    except (TypeError, ValueError):
        return DEFAULT_COMMISSION_PERCENT
