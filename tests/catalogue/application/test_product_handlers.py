"""Application tests for product creation, details, pricing and stock."""

import json

import pytest
from catalogue.product.creation import CreateProduct
from catalogue.product.details import (
    AdjustStock,
    SyncProductSpecifications,
    ToggleProductAttributes,
    UpdateProductDetails,
    UpdateProductPricing,
)
from catalogue.product.product import Product
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from shared.access import AccessDenied


def _create_product(**overrides):
    defaults = {"name": "Engine Oil 5W-30", "base_price": 80.0, "vendor_id": "vendor-1", "stock": 20}
    defaults.update(overrides)
    return current_domain.process(CreateProduct(**defaults), asynchronous=False)


def _get(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestCreateProduct:
    def test_create_product(self):
        product = _get(_create_product(sku="OIL-5W30"))
        assert product.name == "Engine Oil 5W-30"
        assert product.sku.code == "OIL-5W30"
        assert product.status == "draft"

    def test_create_with_tiers(self):
        tiers = [{"min_quantity": 10, "max_quantity": 49, "price": 75.0}, {"min_quantity": 50, "price": 70.0}]
        product = _get(_create_product(pricing_tiers=json.dumps(tiers)))
        assert len(product.pricing_tiers) == 2


class TestUpdateDetails:
    def test_owner_updates_details(self):
        product_id = _create_product()
        current_domain.process(
            UpdateProductDetails(product_id=product_id, vendor_id="vendor-1", name="Engine Oil 5W-40"),
            asynchronous=False,
        )
        assert _get(product_id).name == "Engine Oil 5W-40"

    def test_other_vendor_denied(self):
        product_id = _create_product()
        with pytest.raises(AccessDenied):
            current_domain.process(
                UpdateProductDetails(product_id=product_id, vendor_id="vendor-2", name="Hijacked"),
                asynchronous=False,
            )


class TestUpdatePricing:
    def test_replace_tiers_and_extras(self):
        product_id = _create_product()
        current_domain.process(
            UpdateProductPricing(
                product_id=product_id,
                vendor_id="vendor-1",
                pricing_tiers=json.dumps([{"min_quantity": 5, "price": 78.0}]),
                individual_product_pricing=json.dumps([{"name": "Filter", "amount": 15.0}]),
            ),
            asynchronous=False,
        )
        product = _get(product_id)
        assert product.pricing_tiers[0].price == 78.0
        assert product.customer_pricing()["individual_product_pricing"][0]["amount"] == 16.5

    def test_negative_price_rejected(self):
        product_id = _create_product()
        with pytest.raises(ValidationError):
            current_domain.process(
                UpdateProductPricing(product_id=product_id, shipping_charge=-2.0),
                asynchronous=False,
            )

    def test_vendor_cannot_set_commission(self):
        product_id = _create_product()
        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                UpdateProductPricing(product_id=product_id, vendor_id="vendor-1", commission=0.0),
                asynchronous=False,
            )
        assert "commission" in exc.value.messages

    def test_admin_sets_commission(self):
        product_id = _create_product()
        current_domain.process(UpdateProductPricing(product_id=product_id, commission=15.0), asynchronous=False)
        assert _get(product_id).commission == 15.0


class TestAttributesAndStock:
    def test_toggle_featured(self):
        product_id = _create_product()
        current_domain.process(ToggleProductAttributes(product_id=product_id, is_featured=True), asynchronous=False)
        product = _get(product_id)
        assert product.is_featured is True
        assert product.is_top_selling is False

    def test_adjust_stock(self):
        product_id = _create_product()
        current_domain.process(AdjustStock(product_id=product_id, new_stock=7), asynchronous=False)
        assert _get(product_id).stock == 7

    def test_negative_stock_rejected(self):
        product_id = _create_product()
        with pytest.raises(ValidationError):
            current_domain.process(AdjustStock(product_id=product_id, new_stock=-3), asynchronous=False)


class TestSyncSpecifications:
    def test_owner_syncs_sheet_and_options(self):
        product_id = _create_product()
        current_domain.process(
            SyncProductSpecifications(
                product_id=product_id,
                vendor_id="vendor-1",
                specifications=json.dumps([{"label": "Viscosity", "value": "5W-30"}]),
                colors=json.dumps(["Amber"]),
            ),
            asynchronous=False,
        )

        sheet = _get(product_id).specification_sheet()
        assert {(row["label"], row["value"]) for row in sheet} == {("Viscosity", "5W-30"), ("Color", "Amber")}

    def test_absent_sizes_leave_size_rows_alone(self):
        product_id = _create_product()
        current_domain.process(
            SyncProductSpecifications(product_id=product_id, sizes=json.dumps(["1 L", "4 L"])), asynchronous=False
        )
        current_domain.process(
            SyncProductSpecifications(product_id=product_id, colors=json.dumps(["Amber"])), asynchronous=False
        )

        values = [row["value"] for row in _get(product_id).specification_sheet() if row["label"] == "Size"]
        assert values == ["1 L", "4 L"]

    def test_other_vendor_denied(self):
        product_id = _create_product()
        with pytest.raises(AccessDenied):
            current_domain.process(
                SyncProductSpecifications(product_id=product_id, vendor_id="vendor-2", colors=json.dumps(["Red"])),
                asynchronous=False,
            )
