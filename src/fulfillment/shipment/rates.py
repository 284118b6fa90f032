"""Rate quotes — priced with the carrier, never stored."""

import structlog

from fulfillment.carrier import get_carrier
from fulfillment.shipment.routing import build_request, shippable_order

logger = structlog.get_logger(__name__)


def quote_rates(leg, order_id=None, **route):
    """Carrier rates for a leg, for a known order or an ad hoc route.

    Keyword arguments are passed to `build_request` (addresses, weight,
    package count, dimensions, service type, ship date).

    Returns:
        The carrier's result dict: {"success": True, "data": [rate, ...]} or
        {"success": False, "error": str}.
    """
    order = shippable_order(order_id) if order_id else None
    request = build_request(leg, order=order, **route)
    result = get_carrier().get_rates(request)
    if not result["success"]:
        logger.warning("Rate quote failed", order_id=order_id, leg=leg, error=result["error"])
    return result


def pickup_availability(postal_code, country):
    result = get_carrier().get_pickup_availability(postal_code, country)
    if not result["success"]:
        logger.warning("Pickup availability lookup failed", postal_code=postal_code, error=result["error"])
    return result
