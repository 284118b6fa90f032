"""Wishlist commands and handler.

Wishlists are found by owner rather than by id; one is opened on the first
save.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.wishlist.wishlist import Wishlist


@ordering.command(part_of="Wishlist")
class AddToWishlist:
    product_id = Identifier(required=True)
    customer_id = Identifier()
    session_id = String(max_length=255)


@ordering.command(part_of="Wishlist")
class RemoveFromWishlist:
    product_id = Identifier(required=True)
    customer_id = Identifier()
    session_id = String(max_length=255)


@ordering.command(part_of="Wishlist")
class MergeGuestWishlist:
    customer_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)


def wishlist_for(customer_id=None, session_id=None):
    query = current_domain.repository_for(Wishlist)._dao.query
    if customer_id:
        found = query.filter(customer_id=str(customer_id)).all().items
    elif session_id:
        found = [w for w in query.filter(session_id=session_id).all().items if not w.customer_id]
    else:
        return None
    return found[0] if found else None


@ordering.command_handler(part_of=Wishlist)
class ManageWishlistHandler:
    @handle(AddToWishlist)
    def add_to_wishlist(self, command):
        wishlist = wishlist_for(command.customer_id, command.session_id)
        if wishlist is None:
            wishlist = Wishlist.create(customer_id=command.customer_id, session_id=command.session_id)
        wishlist.add_product(command.product_id)
        current_domain.repository_for(Wishlist).add(wishlist)
        return str(wishlist.id)

    @handle(RemoveFromWishlist)
    def remove_from_wishlist(self, command):
        wishlist = wishlist_for(command.customer_id, command.session_id)
        if wishlist is None:
            raise ValidationError({"wishlist": ["Wishlist is empty"]})
        wishlist.remove_product(command.product_id)
        current_domain.repository_for(Wishlist).add(wishlist)

    @handle(MergeGuestWishlist)
    def merge_guest_wishlist(self, command):
        repo = current_domain.repository_for(Wishlist)
        guest = wishlist_for(session_id=command.session_id)
        if guest is None:
            return 0

        wishlist = wishlist_for(customer_id=command.customer_id)
        if wishlist is None:
            wishlist = Wishlist.create(customer_id=command.customer_id)

        merged = wishlist.merge_from(guest)
        repo.add(wishlist)
        repo._dao.delete(guest)
        return merged
