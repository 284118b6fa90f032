"""Admin order management and cancellation.

Admins need `order.manage` to edit an order. Orders that ship controlled
goods to a UAE customer need `order.controlled.approve` instead.
Customers may cancel their own orders until the vendor has acted on them.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus
from shared.access import AccessDenied, Permission, actor_from, require_admin, require_permission

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class AdminUpdateOrder:
    order_id = Identifier(required=True)
    order_status = String(max_length=30)
    payment_status = String(max_length=30)
    shipment_status = String(max_length=30)
    tracking_number = String(max_length=255)
    shipment_id = String(max_length=255)
    label_url = String(max_length=500)
    note = Text()
    actor_id = Identifier(required=True)
    actor_type = String(required=True, max_length=20)
    actor_permissions = Text()


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = Text()
    actor_id = Identifier(required=True)
    actor_type = String(required=True, max_length=20)
    actor_permissions = Text()


def required_order_permission(order) -> str:
    if order.ships_controlled_goods_to_uae:
        return Permission.ORDER_CONTROLLED_APPROVE.value
    return Permission.ORDER_MANAGE.value


@ordering.command_handler(part_of=Order)
class OrderAdministrationHandler:
    @handle(AdminUpdateOrder)
    def admin_update(self, command):
        actor = actor_from(command.actor_id, command.actor_type, command.actor_permissions)
        require_admin(actor)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        required = required_order_permission(order)
        require_permission(actor, required)

        order.admin_update(
            changed_by=actor.id,
            order_status=command.order_status,
            payment_status=command.payment_status,
            shipment_status=command.shipment_status,
            tracking_number=command.tracking_number,
            shipment_id=command.shipment_id,
            label_url=command.label_url,
            note=command.note,
        )
        repo.add(order)
        logger.info(
            "Order updated by admin",
            order_id=str(order.id),
            admin_id=actor.id,
            required_permission=required,
            order_status=order.order_status,
            payment_status=order.payment_status,
            shipment_status=order.shipment_status,
        )

    @handle(CancelOrder)
    def cancel(self, command):
        actor = actor_from(command.actor_id, command.actor_type, command.actor_permissions)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if actor.is_admin:
            require_permission(actor, required_order_permission(order))
        else:
            if str(order.customer_id) != actor.id:
                raise AccessDenied("You can only cancel your own orders")
            if order.order_status != OrderStatus.ORDER_RECEIVED.value:
                raise ValidationError({"order_status": ["Order can no longer be cancelled"]})

        order.cancel(reason=command.reason, cancelled_by=actor.id)
        repo.add(order)
        logger.info("Order cancelled", order_id=str(order.id), cancelled_by=actor.id)
