"""Product details, pricing, specifications, merchandising flags and stock: commands and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from catalogue.domain import catalogue
from catalogue.product.product import OPTION_LABELS, Product
from shared.access import AccessDenied


@catalogue.command(part_of="Product")
class UpdateProductDetails:
    product_id: Identifier(required=True)
    vendor_id: Identifier()  # When set, the caller must own the product
    name: String(max_length=255)
    description: Text()
    category_id: Identifier()
    brand_id: Identifier()
    condition: String(max_length=20)
    country_of_origin: String(max_length=100)
    min_order_quantity: Integer(min_value=1)


@catalogue.command(part_of="Product")
class UpdateProductPricing:
    product_id: Identifier(required=True)
    vendor_id: Identifier()
    base_price: Float()
    price: Float()
    commission: Float()
    shipping_charge: Float()
    packing_charge: Float()
    pricing_tiers: Text()  # JSON list
    individual_product_pricing: Text()  # JSON list of {name, amount}


@catalogue.command(part_of="Product")
class ToggleProductAttributes:
    product_id: Identifier(required=True)
    is_featured: Boolean()
    is_top_selling: Boolean()


@catalogue.command(part_of="Product")
class SyncProductSpecifications:
    product_id: Identifier(required=True)
    vendor_id: Identifier()
    specifications: Text(sanitize=False)  # JSON list of rows; absent keeps the sheet
    colors: Text(sanitize=False)  # JSON list of values; absent keeps the rows
    sizes: Text(sanitize=False)


@catalogue.command(part_of="Product")
class AdjustStock:
    product_id: Identifier(required=True)
    vendor_id: Identifier()
    new_stock: Integer(required=True)


def _load_owned(repo, product_id, vendor_id):
    product = repo.get(product_id)
    if vendor_id and str(product.vendor_id) != str(vendor_id):
        raise AccessDenied("You can only manage your own products")
    return product


@catalogue.command_handler(part_of=Product)
class ManageProductDetailsHandler:
    @handle(UpdateProductDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Product)
        product = _load_owned(repo, command.product_id, command.vendor_id)
        product.update_details(
            name=command.name,
            description=command.description,
            category_id=command.category_id,
            brand_id=command.brand_id,
            condition=command.condition,
            country_of_origin=command.country_of_origin,
            min_order_quantity=command.min_order_quantity,
        )
        repo.add(product)

    @handle(UpdateProductPricing)
    def update_pricing(self, command):
        repo = current_domain.repository_for(Product)
        product = _load_owned(repo, command.product_id, command.vendor_id)

        if command.vendor_id and command.commission is not None:
            raise ValidationError({"commission": ["Commission is set by the platform"]})
        for field in ("base_price", "price", "shipping_charge", "packing_charge"):
            value = getattr(command, field)
            if value is not None and value < 0:
                raise ValidationError({field: ["Must not be negative"]})

        product.update_pricing(
            base_price=command.base_price,
            price=command.price,
            commission=command.commission,
            shipping_charge=command.shipping_charge,
            packing_charge=command.packing_charge,
            pricing_tiers=json.loads(command.pricing_tiers) if command.pricing_tiers else None,
            individual_product_pricing=(
                json.loads(command.individual_product_pricing) if command.individual_product_pricing else None
            ),
        )
        repo.add(product)

    @handle(ToggleProductAttributes)
    def toggle_attributes(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.toggle_attributes(is_featured=command.is_featured, is_top_selling=command.is_top_selling)
        repo.add(product)

    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = _load_owned(repo, command.product_id, command.vendor_id)
        product.adjust_stock(command.new_stock)
        repo.add(product)

    @handle(SyncProductSpecifications)
    def sync_specifications(self, command):
        repo = current_domain.repository_for(Product)
        product = _load_owned(repo, command.product_id, command.vendor_id)

        options = {}
        for key, label in OPTION_LABELS.items():
            raw = getattr(command, key)
            if raw is not None:
                options[label] = json.loads(raw)
        rows = json.loads(command.specifications) if command.specifications is not None else None

        product.sync_specifications(rows=rows, options=options)
        repo.add(product)
