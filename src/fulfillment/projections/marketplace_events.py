"""Inbound cross-domain event handler — Fulfillment follows `shipment.*` settings."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from fulfillment.domain import fulfillment
from fulfillment.projections.shipment_setting import SETTING_PREFIX, ShipmentSetting
from fulfillment.shipment.shipment import Shipment
from shared.events.marketplace import PlatformSettingChanged

logger = structlog.get_logger(__name__)

fulfillment.register_external_event(PlatformSettingChanged, "Marketplace.PlatformSettingChanged.v1")


@fulfillment.event_handler(part_of=Shipment, stream_category="marketplace::platform_setting")
class PlatformSettingEventHandler:
    @handle(PlatformSettingChanged)
    def on_platform_setting_changed(self, event: PlatformSettingChanged) -> None:
        if not event.key.startswith(SETTING_PREFIX):
            return

        repo = current_domain.repository_for(ShipmentSetting)
        try:
            setting = repo.get(event.key)
        except ObjectNotFoundError:
            setting = ShipmentSetting(key=event.key)
        setting.value = event.value
        setting.changed_at = event.changed_at
        repo.add(setting)
        logger.info("Shipment setting recorded", key=event.key)
