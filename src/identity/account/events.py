"""Domain events for the Account aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String

from identity.domain import identity


@identity.event(part_of="Account")
class AccountRegistered:
    """A customer, vendor or admin account was created."""

    __version__ = 1

    account_id: Identifier(required=True)
    email: String(required=True)
    name: String(required=True)
    account_type: String(required=True)
    country: String()
    registered_at: DateTime(required=True)


@identity.event(part_of="Account")
class ProfileUpdated:
    __version__ = 1

    account_id: Identifier(required=True)
    name: String(required=True)
    phone: String()
    country: String()
    discount_percent: Float()


@identity.event(part_of="Account")
class PhoneVerified:
    """The account's phone number passed an OTP challenge."""

    __version__ = 1

    account_id: Identifier(required=True)
    phone: String(required=True)
    verified_at: DateTime(required=True)


@identity.event(part_of="Account")
class AddressAdded:
    __version__ = 1

    account_id: Identifier(required=True)
    address_id: Identifier(required=True)
    label: String(required=True)
    city: String(required=True)
    country: String(required=True)
    is_default: Boolean(required=True)


@identity.event(part_of="Account")
class AddressUpdated:
    __version__ = 1

    account_id: Identifier(required=True)
    address_id: Identifier(required=True)
    label: String()
    contact_name: String()
    street: String()
    city: String()
    state: String()
    postal_code: String()
    country: String()
    phone: String()


@identity.event(part_of="Account")
class AddressRemoved:
    __version__ = 1

    account_id: Identifier(required=True)
    address_id: Identifier(required=True)


@identity.event(part_of="Account")
class DefaultAddressChanged:
    __version__ = 1

    account_id: Identifier(required=True)
    address_id: Identifier(required=True)
    previous_default_address_id: Identifier()


@identity.event(part_of="Account")
class AccountSuspended:
    """Suspended accounts cannot sign in, buy or sell."""

    __version__ = 1

    account_id: Identifier(required=True)
    reason: String(required=True)
    suspended_at: DateTime(required=True)


@identity.event(part_of="Account")
class AccountReactivated:
    __version__ = 1

    account_id: Identifier(required=True)
    reactivated_at: DateTime(required=True)


@identity.event(part_of="Account")
class PermissionGranted:
    __version__ = 1

    account_id: Identifier(required=True)
    permission: String(required=True)
    granted_by: Identifier()


@identity.event(part_of="Account")
class PermissionRevoked:
    __version__ = 1

    account_id: Identifier(required=True)
    permission: String(required=True)
    revoked_by: Identifier()
