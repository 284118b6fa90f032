"""Registry of SouqHub bounded contexts, used by the app, the engine runner and manage.py."""

from importlib import import_module

from protean.domain import Domain

DOMAIN_NAMES = (
    "identity",
    "catalogue",
    "vendors",
    "ordering",
    "payments",
    "finance",
    "fulfillment",
    "reviews",
    "marketplace",
)


def load_domain(name: str, initialize: bool = True) -> Domain:
    """Import a bounded context's domain object, initializing it unless asked not to."""
    if name not in DOMAIN_NAMES:
        raise ValueError(f"Unknown domain: {name}")
    domain = getattr(import_module(f"{name}.domain"), name)
    if initialize:
        domain.init()
    return domain
