"""Cart management — commands and handler.

Handles cart creation, guest cart merging, and abandonment.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import CartStatus, ShoppingCart
from ordering.domain import ordering


@ordering.command(part_of="ShoppingCart")
class CreateCart:
    """Open a cart for a registered customer or guest session."""

    customer_id = Identifier()  # Optional for guest carts
    session_id = String(max_length=255)


@ordering.command(part_of="ShoppingCart")
class MergeGuestCart:
    """Fold the guest session's active cart into the customer's active cart."""

    customer_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)


@ordering.command(part_of="ShoppingCart")
class AbandonCart:
    cart_id = Identifier(required=True)


def active_cart_for(customer_id=None, session_id=None):
    """The active cart of a customer, or of a guest session, if any."""
    query = current_domain.repository_for(ShoppingCart)._dao.query.filter(status=CartStatus.ACTIVE.value)
    if customer_id:
        carts = query.filter(customer_id=str(customer_id)).all().items
    elif session_id:
        # Guest carts only; a signed-in customer's cart may share the session
        carts = [c for c in query.filter(session_id=session_id).all().items if not c.customer_id]
    else:
        return None
    return carts[0] if carts else None


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        existing = active_cart_for(customer_id=command.customer_id, session_id=command.session_id)
        if existing:
            return str(existing.id)

        cart = ShoppingCart.create(customer_id=command.customer_id, session_id=command.session_id)
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        guest_cart = active_cart_for(session_id=command.session_id)
        if guest_cart is None:
            raise ValidationError({"session_id": ["No active guest cart for this session"]})

        cart = active_cart_for(customer_id=command.customer_id)
        if cart is None:
            cart = ShoppingCart.create(customer_id=command.customer_id)

        cart.merge_from(guest_cart)
        repo.add(guest_cart)
        repo.add(cart)
        return str(cart.id)

    @handle(AbandonCart)
    def abandon_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.abandon()
        repo.add(cart)
