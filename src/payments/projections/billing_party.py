"""Billing parties — names and contacts of accounts that appear on invoices."""

from protean.fields import Identifier, String

from payments.domain import payments


@payments.projection
class BillingParty:
    account_id = Identifier(identifier=True, required=True)
    account_type = String(max_length=20)
    name = String(max_length=255)
    email = String(max_length=254)
    phone = String(max_length=30)
    country = String(max_length=100)
