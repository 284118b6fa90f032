"""SyncCurrencyRates — refresh stored rates from the exchange-rate feed.

Runs from the maintenance cron, from an admin, or opportunistically when the
storefront loads (only when that is switched on and a day has passed).
Every outcome is reported as `{success, updated, message}` rather than
raised, so schedulers can log it.
"""

from datetime import UTC, datetime, timedelta

from protean import handle
from protean.fields import Boolean
from protean.utils.globals import current_domain

from marketplace.currency.currency import BASE_CURRENCY, CurrencyRate
from marketplace.currency.feed import get_feed
from marketplace.domain import logger, marketplace
from marketplace.setting.management import (
    currency_homepage_sync_enabled,
    currency_last_sync,
    currency_sync_enabled,
    store_setting,
)
from marketplace.setting.setting import CURRENCY_LAST_SYNC

SYNC_INTERVAL = timedelta(hours=24)


@marketplace.command(part_of=CurrencyRate)
class SyncCurrencyRates:
    force = Boolean(default=False)


def sync_due(now=None):
    last = currency_last_sync()
    if last is None:
        return True
    if last.tzinfo is None:
        last = last.replace(tzinfo=UTC)
    return (now or datetime.now(UTC)) - last >= SYNC_INTERVAL


def _result(success, updated, message):
    return {"success": success, "updated": updated, "message": message}


@marketplace.command_handler(part_of=CurrencyRate)
class CurrencySyncHandler:
    @handle(SyncCurrencyRates)
    def sync_currency_rates(self, command):
        if not currency_sync_enabled():
            return _result(False, 0, "Currency sync is disabled")
        if not command.force and not sync_due():
            return _result(True, 0, "Currency rates were synced less than 24 hours ago")

        repo = current_domain.repository_for(CurrencyRate)
        currencies = [c for c in repo._dao.query.all().items if c.is_active]
        if not currencies:
            return _result(False, 0, "No currencies found")

        rates = get_feed().fetch_rates(BASE_CURRENCY)
        if rates is None:
            return _result(False, 0, "Failed to fetch rates from API")

        now = datetime.now(UTC)
        updated = 0
        for currency in currencies:
            if currency.is_base or currency.code == BASE_CURRENCY:
                currency.is_base = True
                currency.apply_rate(1.0, at=now)
            else:
                rate = rates.get(currency.code.lower())
                if not isinstance(rate, int | float) or isinstance(rate, bool) or rate <= 0:
                    continue
                currency.apply_rate(rate, at=now)
            repo.add(currency)
            updated += 1

        store_setting(CURRENCY_LAST_SYNC, now.isoformat(), description="Last currency exchange rate sync timestamp")

        logger.info("Currency rates synced", updated=updated, forced=bool(command.force))
        return _result(True, updated, f"Successfully updated {updated} currencies")


def sync_if_due():
    """Storefront hook: sync when homepage syncing is on and the rates are stale."""
    if not currency_homepage_sync_enabled() or not sync_due():
        return None
    return current_domain.process(SyncCurrencyRates(force=False), asynchronous=False)
