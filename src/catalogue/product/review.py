"""Product approval workflow — submit, review and suspend.

Approval needs `product.manage`. A product that sits in a controlled
category and belongs to a UAE vendor needs `product.controlled.approve`
instead.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from catalogue.category.hierarchy import is_category_controlled
from catalogue.domain import catalogue
from catalogue.product.product import Product
from shared.access import AccessDenied, Permission, actor_from, require_admin, require_permission
from shared.regions import is_uae

logger = structlog.get_logger(__name__)

DECISIONS = ("approved", "rejected")


@catalogue.command(part_of="Product")
class SubmitProductForReview:
    product_id: Identifier(required=True)
    vendor_id: Identifier()


@catalogue.command(part_of="Product")
class ReviewProduct:
    product_id: Identifier(required=True)
    decision: String(required=True, max_length=20)
    rejection_reason: Text()
    reviewer_id: Identifier(required=True)
    reviewer_type: String(required=True, max_length=20)
    reviewer_permissions: Text()  # comma-separated permission codes


@catalogue.command(part_of="Product")
class SuspendProduct:
    product_id: Identifier(required=True)
    reason: Text()


def required_review_permission(product) -> str:
    """Permission code needed to approve or reject this product."""
    if is_uae(product.vendor_country) and is_category_controlled(product.category_id):
        return Permission.PRODUCT_CONTROLLED_APPROVE.value
    return Permission.PRODUCT_MANAGE.value


@catalogue.command_handler(part_of=Product)
class ProductReviewHandler:
    @handle(SubmitProductForReview)
    def submit_for_review(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        if command.vendor_id and str(product.vendor_id) != str(command.vendor_id):
            raise AccessDenied("You can only submit your own products")
        product.submit_for_review()
        repo.add(product)

    @handle(ReviewProduct)
    def review_product(self, command):
        if command.decision not in DECISIONS:
            raise ValidationError({"decision": [f"Decision must be one of {', '.join(DECISIONS)}"]})

        reviewer = actor_from(command.reviewer_id, command.reviewer_type, command.reviewer_permissions)
        require_admin(reviewer)

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        require_permission(reviewer, required_review_permission(product))

        if command.decision == "approved":
            product.approve(reviewed_by=reviewer.id, is_controlled=is_category_controlled(product.category_id))
        else:
            product.reject(reviewed_by=reviewer.id, reason=command.rejection_reason)

        repo.add(product)
        logger.info(
            "Product reviewed",
            product_id=str(product.id),
            decision=command.decision,
            reviewer_id=reviewer.id,
        )

    @handle(SuspendProduct)
    def suspend_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.suspend(command.reason)
        repo.add(product)
