"""Domain events for the Payout aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from finance.domain import finance


@finance.event(part_of="Payout")
class PayoutRequested:
    __version__ = 1

    payout_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    amount = Float(required=True)
    requested_at = DateTime(required=True)


@finance.event(part_of="Payout")
class PayoutApproved:
    __version__ = 1

    payout_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    approved_by = Identifier(required=True)
    approved_at = DateTime(required=True)


@finance.event(part_of="Payout")
class PayoutPaid:
    """The money was transferred and the vendor's wallet debited."""

    __version__ = 1

    payout_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    amount = Float(required=True)
    transaction_reference = String(required=True)
    paid_by = Identifier(required=True)
    paid_at = DateTime(required=True)


@finance.event(part_of="Payout")
class PayoutRejected:
    __version__ = 1

    payout_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    reason = Text()
    rejected_by = Identifier(required=True)
    rejected_at = DateTime(required=True)
