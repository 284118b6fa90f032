"""FastAPI routes for the Ordering domain — carts, wishlists, checkout and orders."""

import json

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddToCartRequest,
    AdminUpdateOrderRequest,
    CancelOrderRequest,
    CartResponse,
    CheckoutRequest,
    CheckoutResponse,
    MergeGuestRequest,
    MergeResponse,
    OrderGroupListResponse,
    OrderListResponse,
    OrderResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
    VatRuleListResponse,
    VatRuleRequest,
    VendorApproveRequest,
    VendorFulfillRequest,
    VendorRejectRequest,
    WishlistItemRequest,
    WishlistResponse,
)
from ordering.cart.cart import ShoppingCart
from ordering.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from ordering.cart.management import CreateCart, MergeGuestCart
from ordering.checkout.placement import PlaceOrderGroup
from ordering.order.administration import AdminUpdateOrder, CancelOrder
from ordering.order.listing import (
    order_groups_for_customer,
    orders_for_admin,
    orders_for_vendor,
)
from ordering.order.order import Order
from ordering.order.vendor_actions import VendorApproveOrder, VendorFulfillOrder, VendorRejectOrder
from ordering.projections.product_snapshot import ProductSnapshot
from ordering.vat.rule import DefineVatRule, list_vat_rules
from ordering.wishlist.management import AddToWishlist, MergeGuestWishlist, RemoveFromWishlist, wishlist_for
from shared.access import (
    AccessDenied,
    Actor,
    Permission,
    current_actor,
    require_admin,
    require_permission,
    require_vendor,
    serialize_permissions,
)


def _cart_view(cart_id: str) -> dict:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    snapshots = current_domain.repository_for(ProductSnapshot)
    items, subtotal = [], 0.0
    for item in cart.items:
        line = {"product_id": str(item.product_id), "quantity": item.quantity}
        try:
            snapshot = snapshots.get(str(item.product_id))
            line.update(name=snapshot.name, price=snapshot.price, is_purchasable=snapshot.is_purchasable)
            subtotal += snapshot.price * item.quantity
        except ObjectNotFoundError:
            line.update(name=None, price=None, is_purchasable=False)
        items.append(line)
    return {
        "cart_id": str(cart.id),
        "customer_id": str(cart.customer_id) if cart.customer_id else None,
        "session_id": cart.session_id,
        "status": cart.status,
        "items": items,
        "subtotal": round(subtotal, 2),
    }


def _open_cart(customer_id: str | None = None, session_id: str | None = None) -> str:
    return current_domain.process(CreateCart(customer_id=customer_id, session_id=session_id), asynchronous=False)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/mine", response_model=CartResponse)
async def my_cart(actor: Actor = Depends(current_actor)) -> CartResponse:
    return CartResponse(cart=_cart_view(_open_cart(customer_id=actor.id)))


@cart_router.post("/mine/items", response_model=CartResponse)
async def add_to_my_cart(body: AddToCartRequest, actor: Actor = Depends(current_actor)) -> CartResponse:
    cart_id = _open_cart(customer_id=actor.id)
    current_domain.process(
        AddToCart(cart_id=cart_id, product_id=body.product_id, quantity=body.quantity), asynchronous=False
    )
    return CartResponse(cart=_cart_view(cart_id))


@cart_router.put("/mine/items/{product_id}", response_model=CartResponse)
async def update_my_cart_item(
    product_id: str, body: UpdateCartQuantityRequest, actor: Actor = Depends(current_actor)
) -> CartResponse:
    cart_id = _open_cart(customer_id=actor.id)
    current_domain.process(
        UpdateCartQuantity(cart_id=cart_id, product_id=product_id, new_quantity=body.new_quantity),
        asynchronous=False,
    )
    return CartResponse(cart=_cart_view(cart_id))


@cart_router.delete("/mine/items/{product_id}", response_model=CartResponse)
async def remove_from_my_cart(product_id: str, actor: Actor = Depends(current_actor)) -> CartResponse:
    cart_id = _open_cart(customer_id=actor.id)
    current_domain.process(RemoveFromCart(cart_id=cart_id, product_id=product_id), asynchronous=False)
    return CartResponse(cart=_cart_view(cart_id))


@cart_router.post("/mine/merge", response_model=CartResponse)
async def merge_guest_cart(body: MergeGuestRequest, actor: Actor = Depends(current_actor)) -> CartResponse:
    cart_id = current_domain.process(
        MergeGuestCart(customer_id=actor.id, session_id=body.session_id), asynchronous=False
    )
    return CartResponse(cart=_cart_view(cart_id))


@cart_router.get("/guest/{session_id}", response_model=CartResponse)
async def guest_cart(session_id: str) -> CartResponse:
    return CartResponse(cart=_cart_view(_open_cart(session_id=session_id)))


@cart_router.post("/guest/{session_id}/items", response_model=CartResponse)
async def add_to_guest_cart(session_id: str, body: AddToCartRequest) -> CartResponse:
    cart_id = _open_cart(session_id=session_id)
    current_domain.process(
        AddToCart(cart_id=cart_id, product_id=body.product_id, quantity=body.quantity), asynchronous=False
    )
    return CartResponse(cart=_cart_view(cart_id))


@cart_router.put("/guest/{session_id}/items/{product_id}", response_model=CartResponse)
async def update_guest_cart_item(session_id: str, product_id: str, body: UpdateCartQuantityRequest) -> CartResponse:
    cart_id = _open_cart(session_id=session_id)
    current_domain.process(
        UpdateCartQuantity(cart_id=cart_id, product_id=product_id, new_quantity=body.new_quantity),
        asynchronous=False,
    )
    return CartResponse(cart=_cart_view(cart_id))


@cart_router.delete("/guest/{session_id}/items/{product_id}", response_model=CartResponse)
async def remove_from_guest_cart(session_id: str, product_id: str) -> CartResponse:
    cart_id = _open_cart(session_id=session_id)
    current_domain.process(RemoveFromCart(cart_id=cart_id, product_id=product_id), asynchronous=False)
    return CartResponse(cart=_cart_view(cart_id))


# ---------------------------------------------------------------------------
# Wishlist Router
# ---------------------------------------------------------------------------
wishlist_router = APIRouter(prefix="/wishlist", tags=["wishlist"])


def _wishlist_response(customer_id=None, session_id=None) -> WishlistResponse:
    wishlist = wishlist_for(customer_id=customer_id, session_id=session_id)
    return WishlistResponse(product_ids=wishlist.product_ids if wishlist else [])


@wishlist_router.get("", response_model=WishlistResponse)
async def my_wishlist(actor: Actor = Depends(current_actor)) -> WishlistResponse:
    return _wishlist_response(customer_id=actor.id)


@wishlist_router.post("", response_model=WishlistResponse)
async def add_to_wishlist(body: WishlistItemRequest, actor: Actor = Depends(current_actor)) -> WishlistResponse:
    current_domain.process(AddToWishlist(product_id=body.product_id, customer_id=actor.id), asynchronous=False)
    return _wishlist_response(customer_id=actor.id)


@wishlist_router.delete("/{product_id}", response_model=WishlistResponse)
async def remove_from_wishlist(product_id: str, actor: Actor = Depends(current_actor)) -> WishlistResponse:
    current_domain.process(RemoveFromWishlist(product_id=product_id, customer_id=actor.id), asynchronous=False)
    return _wishlist_response(customer_id=actor.id)


@wishlist_router.post("/merge", response_model=MergeResponse)
async def merge_guest_wishlist(body: MergeGuestRequest, actor: Actor = Depends(current_actor)) -> MergeResponse:
    merged = current_domain.process(
        MergeGuestWishlist(customer_id=actor.id, session_id=body.session_id), asynchronous=False
    )
    return MergeResponse(merged=merged)


@wishlist_router.get("/guest/{session_id}", response_model=WishlistResponse)
async def guest_wishlist(session_id: str) -> WishlistResponse:
    return _wishlist_response(session_id=session_id)


@wishlist_router.post("/guest/{session_id}", response_model=WishlistResponse)
async def add_to_guest_wishlist(session_id: str, body: WishlistItemRequest) -> WishlistResponse:
    current_domain.process(AddToWishlist(product_id=body.product_id, session_id=session_id), asynchronous=False)
    return _wishlist_response(session_id=session_id)


# ---------------------------------------------------------------------------
# Checkout & Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(tags=["orders"])


def _order_for(order_id: str, actor: Actor) -> Order:
    """Load an order the caller is allowed to see."""
    order = current_domain.repository_for(Order).get(order_id)
    if actor.is_admin:
        require_permission(actor, Permission.ORDER_VIEW.value, Permission.ORDER_CONTROLLED_APPROVE.value)
    elif actor.is_vendor:
        if str(order.vendor_id) != actor.id or not order.is_paid:
            raise AccessDenied("You can only view your own orders")
    elif str(order.customer_id) != actor.id:
        raise AccessDenied("You can only view your own orders")
    return order


@order_router.post("/checkout", status_code=201, response_model=CheckoutResponse)
async def checkout(body: CheckoutRequest, actor: Actor = Depends(current_actor)) -> CheckoutResponse:
    command = PlaceOrderGroup(
        customer_id=actor.id,
        shipping_address=json.dumps(body.shipping_address.model_dump() if body.shipping_address else {}),
        shipping_costs=json.dumps(body.shipping_costs),
    )
    result = current_domain.process(command, asynchronous=False)
    return CheckoutResponse(**result)


@order_router.get("/orders/mine", response_model=OrderGroupListResponse)
async def my_orders(actor: Actor = Depends(current_actor)) -> OrderGroupListResponse:
    return OrderGroupListResponse(groups=order_groups_for_customer(actor.id))


@order_router.get("/orders/vendor", response_model=OrderListResponse)
async def vendor_orders(actor: Actor = Depends(current_actor)) -> OrderListResponse:
    require_vendor(actor)
    return OrderListResponse(orders=[o.as_dict() for o in orders_for_vendor(actor.id)])


@order_router.get("/orders", response_model=OrderListResponse)
async def admin_orders(
    order_status: str | None = Query(None),
    payment_status: str | None = Query(None),
    shipment_status: str | None = Query(None),
    type: str | None = Query(None),
    actor: Actor = Depends(current_actor),
) -> OrderListResponse:
    require_admin(actor)
    require_permission(actor, Permission.ORDER_VIEW.value, Permission.ORDER_CONTROLLED_APPROVE.value)
    orders = orders_for_admin(
        order_status=order_status,
        payment_status=payment_status,
        shipment_status=shipment_status,
        order_type=type,
    )
    return OrderListResponse(orders=[o.as_dict() for o in orders])


@order_router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    return OrderResponse(order=_order_for(order_id, actor).as_dict())


@order_router.put("/orders/{order_id}", response_model=OrderResponse)
async def admin_update_order(
    order_id: str, body: AdminUpdateOrderRequest, actor: Actor = Depends(current_actor)
) -> OrderResponse:
    command = AdminUpdateOrder(
        order_id=order_id,
        actor_id=actor.id,
        actor_type=actor.type,
        actor_permissions=serialize_permissions(actor.permissions),
        **body.model_dump(),
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse(order=current_domain.repository_for(Order).get(order_id).as_dict())


@order_router.post("/orders/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str, body: CancelOrderRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = CancelOrder(
        order_id=order_id,
        reason=body.reason,
        actor_id=actor.id,
        actor_type=actor.type,
        actor_permissions=serialize_permissions(actor.permissions),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="cancelled")


@order_router.post("/orders/{order_id}/vendor-approve", response_model=StatusResponse)
async def vendor_approve(
    order_id: str, body: VendorApproveRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_vendor(actor)
    current_domain.process(
        VendorApproveOrder(order_id=order_id, vendor_id=actor.id, invoice_comments=body.invoice_comments),
        asynchronous=False,
    )
    return StatusResponse(status="vendor_approved")


@order_router.post("/orders/{order_id}/vendor-reject", response_model=StatusResponse)
async def vendor_reject(
    order_id: str, body: VendorRejectRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_vendor(actor)
    current_domain.process(
        VendorRejectOrder(order_id=order_id, vendor_id=actor.id, reason=body.reason), asynchronous=False
    )
    return StatusResponse(status="vendor_rejected")


@order_router.post("/orders/{order_id}/vendor-ship", response_model=StatusResponse)
async def vendor_ship(
    order_id: str, body: VendorFulfillRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_vendor(actor)
    current_domain.process(
        VendorFulfillOrder(order_id=order_id, vendor_id=actor.id, tracking_number=body.tracking_number),
        asynchronous=False,
    )
    return StatusResponse(status="vendor_shipped")


# ---------------------------------------------------------------------------
# VAT Rule Router
# ---------------------------------------------------------------------------
vat_router = APIRouter(prefix="/vat-rules", tags=["vat"])


@vat_router.get("", response_model=VatRuleListResponse)
async def vat_rules(actor: Actor = Depends(current_actor)) -> VatRuleListResponse:
    require_admin(actor)
    return VatRuleListResponse(rules=[rule.as_dict() for rule in list_vat_rules()])


@vat_router.put("", response_model=VatRuleListResponse)
async def define_vat_rule(body: VatRuleRequest, actor: Actor = Depends(current_actor)) -> VatRuleListResponse:
    require_admin(actor)
    require_permission(actor, Permission.SETTINGS_MANAGE.value)
    current_domain.process(DefineVatRule(**body.model_dump()), asynchronous=False)
    return VatRuleListResponse(rules=[rule.as_dict() for rule in list_vat_rules()])
