"""Inbound cross-domain event handler — Ordering reacts to Catalogue events.

Refreshes the ProductSnapshot checkout prices from. Withdrawn products stay
in the snapshot but can no longer be bought.
"""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.projections.product_snapshot import ProductSnapshot
from shared.events.catalogue import ProductPublished, ProductStockChanged, ProductWithdrawn

logger = structlog.get_logger(__name__)

ordering.register_external_event(ProductPublished, "Catalogue.ProductPublished.v1")
ordering.register_external_event(ProductWithdrawn, "Catalogue.ProductWithdrawn.v1")
ordering.register_external_event(ProductStockChanged, "Catalogue.ProductStockChanged.v1")


def _existing(product_id):
    try:
        return current_domain.repository_for(ProductSnapshot).get(str(product_id))
    except ObjectNotFoundError:
        return None


@ordering.event_handler(part_of=ProductSnapshot, stream_category="catalogue::product")
class CatalogueSnapshotEventHandler:
    @handle(ProductPublished)
    def on_product_published(self, event: ProductPublished) -> None:
        logger.info("Refreshing product snapshot", product_id=str(event.product_id), price=event.price)
        current_domain.repository_for(ProductSnapshot).add(
            ProductSnapshot(
                product_id=str(event.product_id),
                vendor_id=str(event.vendor_id) if event.vendor_id else None,
                vendor_country=event.vendor_country,
                name=event.name,
                price=event.price,
                base_price=event.base_price,
                shipping_charge=event.shipping_charge or 0.0,
                packing_charge=event.packing_charge or 0.0,
                stock=event.stock or 0,
                is_controlled=event.is_controlled,
                is_published=True,
                is_purchasable=(event.stock or 0) > 0,
                updated_at=event.published_at,
            )
        )

    @handle(ProductWithdrawn)
    def on_product_withdrawn(self, event: ProductWithdrawn) -> None:
        snapshot = _existing(event.product_id)
        if snapshot is None:
            return
        snapshot.is_published = False
        snapshot.is_purchasable = False
        snapshot.updated_at = event.withdrawn_at
        current_domain.repository_for(ProductSnapshot).add(snapshot)

    @handle(ProductStockChanged)
    def on_stock_changed(self, event: ProductStockChanged) -> None:
        snapshot = _existing(event.product_id)
        if snapshot is None:
            return
        snapshot.stock = event.new_stock
        snapshot.is_purchasable = snapshot.is_published and event.new_stock > 0
        snapshot.updated_at = datetime.now(UTC)
        current_domain.repository_for(ProductSnapshot).add(snapshot)
