"""Customer profile projection — buyer details checkout relies on.

Populated by the Identity → Ordering cross-domain event handler. Checkout
reads the customer discount and email from here and refuses suspended
accounts.
"""

from protean.fields import Boolean, Float, Identifier, String

from ordering.domain import ordering


@ordering.projection
class CustomerProfile:
    customer_id = Identifier(identifier=True, required=True)
    email = String(max_length=254)
    name = String(max_length=150)
    country = String(max_length=100)
    discount_percent = Float(default=0.0)
    is_suspended = Boolean(default=False)
