"""Domain events for the Wallet aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from finance.domain import finance


@finance.event(part_of="Wallet")
class WalletCredited:
    """Money was added to a wallet, either available or locked."""

    __version__ = 1

    wallet_id = Identifier(required=True)
    user_id = Identifier(required=True)
    transaction_id = Identifier(required=True)
    transaction_type = String(required=True)
    amount = Float(required=True)
    locked = Boolean(default=False)
    reference_id = String()
    description = Text()
    unlock_at = DateTime()
    credited_at = DateTime(required=True)


@finance.event(part_of="Wallet")
class WalletDebited:
    __version__ = 1

    wallet_id = Identifier(required=True)
    user_id = Identifier(required=True)
    transaction_id = Identifier(required=True)
    transaction_type = String(required=True)
    amount = Float(required=True)
    reference_id = String()
    description = Text()
    debited_at = DateTime(required=True)


@finance.event(part_of="Wallet")
class LockedFundsReleased:
    """A locked credit passed its unlock date and became available."""

    __version__ = 1

    wallet_id = Identifier(required=True)
    user_id = Identifier(required=True)
    transaction_id = Identifier(required=True)
    amount = Float(required=True)
    reference_id = String()
    released_at = DateTime(required=True)
