"""Order queries for customers, vendors and admins."""

from protean.utils.globals import current_domain

from ordering.order.order import Order, PaymentStatus


def _newest_first(orders):
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


def orders_for_customer(customer_id):
    orders = current_domain.repository_for(Order)._dao.query.filter(customer_id=str(customer_id)).all().items
    return _newest_first(orders)


def order_groups_for_customer(customer_id):
    """The customer's orders bundled by checkout, newest checkout first."""
    groups = {}
    for order in orders_for_customer(customer_id):
        group = groups.setdefault(
            order.order_group_id,
            {"order_group_id": order.order_group_id, "type": order.type, "grand_total": 0.0, "orders": []},
        )
        group["grand_total"] = round(group["grand_total"] + order.total_amount, 2)
        group["orders"].append(order.as_dict())
    return list(groups.values())


def orders_for_vendor(vendor_id):
    """A vendor only sees orders the customer has paid for."""
    orders = (
        current_domain.repository_for(Order)
        ._dao.query.filter(vendor_id=str(vendor_id), payment_status=PaymentStatus.PAID.value)
        .all()
        .items
    )
    return _newest_first(orders)


def orders_for_admin(order_status=None, payment_status=None, shipment_status=None, order_type=None):
    query = current_domain.repository_for(Order)._dao.query
    filters = {
        "order_status": order_status,
        "payment_status": payment_status,
        "shipment_status": shipment_status,
        "type": order_type,
    }
    filters = {key: value for key, value in filters.items() if value}
    if filters:
        query = query.filter(**filters)
    return _newest_first(query.limit(1000).all().items)
