"""Compliance routing — whether an order can be paid online or needs approval.

A checkout becomes a purchase request, rather than a direct sale, when
its total exceeds the online payment limit or when controlled goods move
into the UAE or out of a UAE supplier.
"""

from shared.regions import is_uae

DIRECT_PAYMENT_LIMIT = 10000.0  # AED


def assess_order(items, grand_total, customer_country):
    """Decide between a direct sale and a purchase request.

    Args:
        items: Iterable of dicts with `name`, `is_controlled` and `vendor_country`.
        grand_total: Order total in AED.
        customer_country: The buyer's country.

    Returns:
        {"type": "direct" | "request", "reasons": [str, ...]}
    """
    reasons = []

    if grand_total > DIRECT_PAYMENT_LIMIT:
        reasons.append("Total amount exceeds 10,000 AED limit for direct online payment.")

    customer_in_uae = is_uae(customer_country)
    for item in items:
        if not item.get("is_controlled"):
            continue

        if is_uae(item.get("vendor_country")):
            reasons.append(f"Controlled item '{item.get('name')}' from UAE supplier requires approval.")
        elif customer_in_uae:
            reasons.append(f"Controlled item '{item.get('name')}' requires approval (Import to UAE).")

    return {"type": "request" if reasons else "direct", "reasons": reasons}
