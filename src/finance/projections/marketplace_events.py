"""Inbound cross-domain event handler — Finance follows platform settings."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from finance.domain import finance
from finance.projections.platform_setting import COMMISSION_KEY, RETURN_PERIOD_KEY, FinanceSetting
from finance.wallet.wallet import Wallet
from shared.events.marketplace import PlatformSettingChanged

logger = structlog.get_logger(__name__)

finance.register_external_event(PlatformSettingChanged, "Marketplace.PlatformSettingChanged.v1")

TRACKED_KEYS = (RETURN_PERIOD_KEY, COMMISSION_KEY)


@finance.event_handler(part_of=Wallet, stream_category="marketplace::platform_setting")
class PlatformSettingEventHandler:
    @handle(PlatformSettingChanged)
    def on_platform_setting_changed(self, event: PlatformSettingChanged) -> None:
        if event.key not in TRACKED_KEYS:
            return

        repo = current_domain.repository_for(FinanceSetting)
        try:
            setting = repo.get(event.key)
        except ObjectNotFoundError:
            setting = FinanceSetting(key=event.key)
        setting.value = event.value
        setting.changed_at = event.changed_at
        repo.add(setting)
        logger.info("Platform setting recorded", key=event.key)
