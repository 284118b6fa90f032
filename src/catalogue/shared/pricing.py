"""Customer-facing price calculation.

Vendors quote their own prices; the platform's commission is added on top
before anything reaches a customer, and the commission rate itself is never
exposed.
"""

import copy

DEFAULT_COMMISSION_PERCENT = 10


def inflate(amount, commission_percent):
    """Apply a commission percentage to a single amount, rounded to fils."""
    if amount is None:
        return None
    if not commission_percent or commission_percent <= 0:
        return round(float(amount), 2)
    return round(float(amount) * (1 + commission_percent / 100), 2)


def apply_commission(product: dict) -> dict:
    """Return a copy of a product dict with commission baked into every price.

    Touches `price`, `base_price`, each `pricing_tiers[].price` and each
    `individual_product_pricing[].amount`. The `commission` key is removed.
    """
    if not product:
        return product

    result = copy.deepcopy(product)
    commission = float(result.pop("commission", 0) or 0)

    if commission > 0:
        for key in ("price", "base_price"):
            if result.get(key):
                result[key] = inflate(result[key], commission)

        if isinstance(result.get("pricing_tiers"), list):
            result["pricing_tiers"] = [
                {**tier, "price": inflate(tier.get("price", 0), commission)} for tier in result["pricing_tiers"]
            ]

        if isinstance(result.get("individual_product_pricing"), list):
            result["individual_product_pricing"] = [
                {**item, "amount": inflate(item.get("amount", 0), commission)}
                for item in result["individual_product_pricing"]
            ]

    return result
