"""Who an invoice is from and to.

The platform's own company details come from the environment; vendor and
customer details come from the BillingParty projection and the order's
shipping address.
"""

import os

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from payments.projections.billing_party import BillingParty


def platform_details():
    return {
        "name": os.environ.get("PLATFORM_COMPANY_NAME", "SouqHub Marketplace LLC"),
        "address": os.environ.get("PLATFORM_COMPANY_ADDRESS", "Dubai, UAE"),
        "email": os.environ.get("PLATFORM_COMPANY_EMAIL"),
        "phone": os.environ.get("PLATFORM_COMPANY_PHONE"),
    }


def invoice_terms(invoice_type):
    key = "VENDOR_INVOICE_TERMS" if invoice_type == "admin" else "CUSTOMER_INVOICE_TERMS"
    return os.environ.get(key)


def billing_party(account_id):
    if not account_id:
        return None
    try:
        return current_domain.repository_for(BillingParty).get(str(account_id))
    except ObjectNotFoundError:
        return None


def format_address(address):
    """Multi-line postal address from a shipping address dict."""
    if not address:
        return None
    street = ", ".join(filter(None, [address.get("street"), address.get("address_line2")]))
    city_line = ", ".join(filter(None, [address.get("city"), address.get("state"), address.get("postal_code")]))
    return "\n".join(filter(None, [street, city_line, address.get("country")])) or None


def vendor_details(vendor_id):
    party = billing_party(vendor_id)
    if party is None:
        return {"name": "Vendor", "address": None, "email": None, "phone": None}
    return {"name": party.name or "Vendor", "address": party.country, "email": party.email, "phone": party.phone}


def customer_details(customer_id, shipping_address, customer_email=None):
    party = billing_party(customer_id)
    shipping_address = shipping_address or {}
    return {
        "name": shipping_address.get("name") or (party.name if party else None) or "Customer",
        "address": format_address(shipping_address) or (party.country if party else None) or "N/A",
        "email": customer_email or (party.email if party else None),
        "phone": shipping_address.get("phone") or (party.phone if party else None),
    }
