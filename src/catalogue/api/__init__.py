"""Catalogue domain API package."""

from catalogue.api.routes import brand_router, category_router, product_router

__all__ = ["product_router", "category_router", "brand_router"]
