"""VerifiedPurchases — maps customer+product to order delivery for verified reviews.

Populated by the OrderDelivered cross-domain event handler.
"""

from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from reviews.domain import reviews


@reviews.projection
class VerifiedPurchases:
    vp_id = String(identifier=True, required=True, max_length=255)  # "{order_id}:{product_id}"
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


def purchase_of(customer_id, product_id):
    """The earliest delivered purchase of a product by a customer, if any."""
    purchases = (
        current_domain.repository_for(VerifiedPurchases)
        ._dao.query.filter(customer_id=str(customer_id), product_id=str(product_id))
        .all()
        .items
    )
    return min(purchases, key=lambda p: p.delivered_at) if purchases else None
