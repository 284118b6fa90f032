from protean.utils.globals import current_domain

from fulfillment.shipment.shipment import Shipment


def shipments_for_order(order_id):
    shipments = current_domain.repository_for(Shipment)._dao.query.filter(order_id=str(order_id)).all().items
    return sorted(shipments, key=lambda s: s.created_at)


def shipments_for_vendor(vendor_id):
    shipments = current_domain.repository_for(Shipment)._dao.query.filter(vendor_id=str(vendor_id)).all().items
    return sorted(shipments, key=lambda s: s.created_at, reverse=True)
