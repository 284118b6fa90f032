"""CreateProduct — list a new product as a draft."""

import json

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from catalogue.domain import catalogue
from catalogue.product.product import Product


@catalogue.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=255)
    base_price: Float(required=True, min_value=0.0)
    vendor_id: Identifier()
    vendor_country: String(max_length=100)
    sku: String(max_length=64)
    price: Float(min_value=0.0)
    description: Text()
    category_id: Identifier()
    brand_id: Identifier()
    condition: String(max_length=20)
    country_of_origin: String(max_length=100)
    commission: Float(min_value=0.0, max_value=100.0)
    shipping_charge: Float(default=0.0)
    packing_charge: Float(default=0.0)
    stock: Integer(default=0)
    min_order_quantity: Integer(default=1)
    pricing_tiers: Text()  # JSON list of {min_quantity, max_quantity, price}


@catalogue.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        product = Product.create(
            name=command.name,
            base_price=command.base_price,
            vendor_id=command.vendor_id,
            vendor_country=command.vendor_country,
            sku=command.sku,
            price=command.price,
            description=command.description,
            category_id=command.category_id,
            brand_id=command.brand_id,
            condition=command.condition,
            country_of_origin=command.country_of_origin,
            commission=command.commission,
            shipping_charge=command.shipping_charge,
            packing_charge=command.packing_charge,
            stock=command.stock,
            min_order_quantity=command.min_order_quantity,
        )
        if command.pricing_tiers:
            product.update_pricing(pricing_tiers=json.loads(command.pricing_tiers))

        current_domain.repository_for(Product).add(product)
        return str(product.id)
