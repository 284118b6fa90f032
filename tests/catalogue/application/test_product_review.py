"""Application tests for the product approval workflow and its permissions."""

import pytest
from catalogue.category.management import CreateCategory
from catalogue.product.creation import CreateProduct
from catalogue.product.product import Product
from catalogue.product.review import ReviewProduct, SubmitProductForReview, SuspendProduct
from catalogue.projections.product_card import ProductCard
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from shared.access import AccessDenied


def _category(controlled=False, parent_id=None, name="Pharmacy"):
    return current_domain.process(
        CreateCategory(name=name, is_controlled=controlled, parent_id=parent_id), asynchronous=False
    )


def _product(category_id=None, vendor_country="UAE", vendor_id="vendor-1"):
    return current_domain.process(
        CreateProduct(
            name="Paracetamol 500mg",
            base_price=12.0,
            vendor_id=vendor_id,
            vendor_country=vendor_country,
            category_id=category_id,
            stock=40,
        ),
        asynchronous=False,
    )


def _review(product_id, decision="approved", actor_type="admin", permissions="product.manage", reason=None):
    current_domain.process(
        ReviewProduct(
            product_id=product_id,
            decision=decision,
            rejection_reason=reason,
            reviewer_id="admin-1",
            reviewer_type=actor_type,
            reviewer_permissions=permissions,
        ),
        asynchronous=False,
    )


def _get(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestSubmitForReview:
    def test_owner_submits(self):
        product_id = _product()
        current_domain.process(SubmitProductForReview(product_id=product_id, vendor_id="vendor-1"), asynchronous=False)
        assert _get(product_id).status == "pending_review"

    def test_other_vendor_denied(self):
        product_id = _product()
        with pytest.raises(AccessDenied):
            current_domain.process(
                SubmitProductForReview(product_id=product_id, vendor_id="vendor-9"), asynchronous=False
            )


class TestReviewProduct:
    def test_approve_with_product_manage(self):
        product_id = _product()
        _review(product_id)

        product = _get(product_id)
        assert product.status == "published"
        assert product.approval_status == "approved"
        assert str(product.reviewed_by) == "admin-1"

    def test_reject_defaults_reason(self):
        product_id = _product()
        _review(product_id, decision="rejected")
        product = _get(product_id)
        assert product.status == "rejected"
        assert product.rejection_reason == "No reason provided"

    def test_unknown_decision_rejected(self):
        product_id = _product()
        with pytest.raises(ValidationError):
            _review(product_id, decision="maybe")

    def test_vendor_cannot_review(self):
        product_id = _product()
        with pytest.raises(AccessDenied):
            _review(product_id, actor_type="vendor")

    def test_admin_without_permission_denied(self):
        product_id = _product()
        with pytest.raises(AccessDenied):
            _review(product_id, permissions="order.view")

    def test_controlled_uae_product_needs_controlled_permission(self):
        root = _category(controlled=True)
        leaf = _category(parent_id=root, name="Painkillers")
        product_id = _product(category_id=leaf)

        with pytest.raises(AccessDenied) as exc:
            _review(product_id, permissions="product.manage")
        assert "product.controlled.approve" in exc.value.message

        _review(product_id, permissions="product.controlled.approve")
        product = _get(product_id)
        assert product.status == "published"
        assert product.is_controlled is True

    def test_controlled_product_from_abroad_needs_product_manage(self):
        category_id = _category(controlled=True)
        product_id = _product(category_id=category_id, vendor_country="India")

        _review(product_id, permissions="product.manage")
        assert _get(product_id).status == "published"

    def test_super_admin_needs_no_codes(self):
        category_id = _category(controlled=True)
        product_id = _product(category_id=category_id)
        _review(product_id, actor_type="super_admin", permissions="")
        assert _get(product_id).status == "published"


class TestPublicationProjection:
    def test_approved_product_gets_card_with_customer_price(self):
        product_id = _product()
        _review(product_id)

        card = current_domain.repository_for(ProductCard).get(product_id)
        assert card.price == 13.2
        assert card.stock == 40

    def test_suspended_product_loses_card(self):
        product_id = _product()
        _review(product_id)
        current_domain.process(SuspendProduct(product_id=product_id, reason="Recall"), asynchronous=False)

        assert _get(product_id).status == "suspended"
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(ProductCard).get(product_id)
