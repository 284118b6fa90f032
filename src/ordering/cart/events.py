"""Domain events for the ShoppingCart aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the shopping cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart line was changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A product was removed from the shopping cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.event(part_of="ShoppingCart")
class CartsMerged:
    """A guest cart was merged into a customer's cart after sign-in."""

    __version__ = 1

    cart_id = Identifier(required=True)
    source_cart_id = Identifier()
    source_session_id = String()
    items_merged_count = Integer(required=True)


@ordering.event(part_of="ShoppingCart")
class CartConverted:
    """The cart was checked out or folded into another cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier()
    items = Text(required=True)  # JSON list of {product_id, quantity}
    converted_at = DateTime(required=True)


@ordering.event(part_of="ShoppingCart")
class CartAbandoned:
    """The cart was given up without checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    abandoned_at = DateTime(required=True)
