"""Fulfillment bounded context — Shipments and Carrier Logistics.

Books shipments with the carrier for both legs of a marketplace order
(vendor to platform warehouse, warehouse to customer), tracks them through
carrier webhooks or polling, and schedules pickups. Uses CQRS because the
carrier owns tracking state and the shipment only mirrors it.
"""

from protean.domain import Domain

fulfillment = Domain(name="fulfillment")
