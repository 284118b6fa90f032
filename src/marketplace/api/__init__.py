"""Marketplace domain API package."""

from marketplace.api.routes import currency_router, maintenance_router, reference_router, settings_router

__all__ = ["settings_router", "reference_router", "currency_router", "maintenance_router"]
