"""Account aggregate root with the Address entity."""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, String, Text, ValueObject

from identity.domain import identity
from identity.shared.email import EmailAddress, normalize_email
from identity.shared.phone import normalize_phone
from shared.access import PERMISSION_CODES

MAX_ADDRESSES = 10

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class AccountType(Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class AccountStatus(Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class AddressLabel(Enum):
    HOME = "home"
    WORK = "work"
    WAREHOUSE = "warehouse"
    OTHER = "other"


@identity.entity(part_of="Account")
class Address:
    """A delivery or pickup location in an account's address book.

    Exactly one address is the default once the book is non-empty.
    """

    label: String(choices=AddressLabel, default=AddressLabel.HOME.value)
    contact_name: String(max_length=150)
    phone: String(max_length=20)
    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(required=True, max_length=100)
    is_default: Boolean(default=False)

    def as_dict(self):
        return {
            "address_id": str(self.id),
            "label": self.label,
            "contact_name": self.contact_name,
            "phone": self.phone,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
            "is_default": self.is_default,
        }


@identity.aggregate
class Account:
    """Anyone who signs in: customers, vendors, admins and super admins.

    Admin permissions are a JSON list of permission codes; super admins hold
    every permission implicitly and never carry an explicit list.
    """

    email: ValueObject(EmailAddress, required=True)
    name: String(required=True, max_length=150)
    phone: String(max_length=20)
    phone_verified: Boolean(default=False)
    account_type: String(choices=AccountType, default=AccountType.CUSTOMER.value)
    country: String(max_length=100)
    discount_percent: Float(default=0.0, min_value=0.0, max_value=100.0)
    status: String(choices=AccountStatus, default=AccountStatus.ACTIVE.value)
    permissions: Text(default="[]")
    addresses: HasMany(Address)
    registered_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def addresses_cannot_exceed_maximum(self):
        if len(self.addresses) > MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

    @invariant.post
    def exactly_one_default_address_when_addresses_exist(self):
        if not self.addresses:
            return
        defaults = [a for a in self.addresses if a.is_default]
        if len(defaults) != 1:
            raise ValidationError({"addresses": ["Exactly one address must be marked as default"]})

    @classmethod
    def register(cls, email, name, account_type=AccountType.CUSTOMER.value, phone=None, country=None):
        from identity.account.events import AccountRegistered

        now = datetime.now(UTC)
        account = cls(
            email=EmailAddress(address=normalize_email(email)),
            name=name.strip(),
            phone=normalize_phone(phone) if phone else None,
            account_type=account_type,
            country=country,
            registered_at=now,
            updated_at=now,
        )
        account.raise_(
            AccountRegistered(
                account_id=account.id,
                email=account.email.address,
                name=account.name,
                account_type=account.account_type,
                country=country,
                registered_at=now,
            )
        )
        return account

    # -------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------
    @property
    def is_active(self):
        return self.status == AccountStatus.ACTIVE.value

    @property
    def is_admin(self):
        return self.account_type in (AccountType.ADMIN.value, AccountType.SUPER_ADMIN.value)

    def update_profile(self, name=_UNSET, phone=_UNSET, country=_UNSET, discount_percent=_UNSET):
        from identity.account.events import ProfileUpdated

        if name is not _UNSET and name:
            self.name = name.strip()
        if phone is not _UNSET:
            new_phone = normalize_phone(phone) if phone else None
            if new_phone != self.phone:
                # A new number has to be verified again
                self.phone = new_phone
                self.phone_verified = False
        if country is not _UNSET:
            self.country = country
        if discount_percent is not _UNSET and discount_percent is not None:
            if self.account_type != AccountType.CUSTOMER.value:
                raise ValidationError({"discount_percent": ["Only customers can carry a discount"]})
            self.discount_percent = discount_percent

        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProfileUpdated(
                account_id=self.id,
                name=self.name,
                phone=self.phone,
                country=self.country,
                discount_percent=self.discount_percent,
            )
        )

    def mark_phone_verified(self):
        from identity.account.events import PhoneVerified

        self.phone_verified = True
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(PhoneVerified(account_id=self.id, phone=self.phone, verified_at=now))

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def suspend(self, reason):
        from identity.account.events import AccountSuspended

        if self.status != AccountStatus.ACTIVE.value:
            raise ValidationError({"status": ["Only active accounts can be suspended"]})

        self.status = AccountStatus.SUSPENDED.value
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(AccountSuspended(account_id=self.id, reason=reason, suspended_at=now))

    def reactivate(self):
        from identity.account.events import AccountReactivated

        if self.status != AccountStatus.SUSPENDED.value:
            raise ValidationError({"status": ["Only suspended accounts can be reactivated"]})

        self.status = AccountStatus.ACTIVE.value
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(AccountReactivated(account_id=self.id, reactivated_at=now))

    # -------------------------------------------------------------------
    # Permissions
    # -------------------------------------------------------------------
    @property
    def permission_codes(self):
        return json.loads(self.permissions or "[]")

    def holds(self, code):
        if self.account_type == AccountType.SUPER_ADMIN.value:
            return True
        return self.account_type == AccountType.ADMIN.value and code in self.permission_codes

    def _assert_can_carry_permissions(self, code):
        if code not in PERMISSION_CODES:
            raise ValidationError({"permission": [f"Unknown permission: {code}"]})
        if self.account_type == AccountType.SUPER_ADMIN.value:
            raise ValidationError({"permission": ["Super admins hold every permission already"]})
        if self.account_type != AccountType.ADMIN.value:
            raise ValidationError({"permission": ["Permissions can only be granted to admins"]})

    def grant_permission(self, code, granted_by=None):
        from identity.account.events import PermissionGranted

        self._assert_can_carry_permissions(code)
        codes = self.permission_codes
        if code in codes:
            return

        self.permissions = json.dumps(sorted(codes + [code]))
        self.updated_at = datetime.now(UTC)
        self.raise_(PermissionGranted(account_id=self.id, permission=code, granted_by=granted_by))

    def revoke_permission(self, code, revoked_by=None):
        from identity.account.events import PermissionRevoked

        self._assert_can_carry_permissions(code)
        codes = self.permission_codes
        if code not in codes:
            raise ValidationError({"permission": [f"Account does not hold {code}"]})

        self.permissions = json.dumps([c for c in codes if c != code])
        self.updated_at = datetime.now(UTC)
        self.raise_(PermissionRevoked(account_id=self.id, permission=code, revoked_by=revoked_by))

    # -------------------------------------------------------------------
    # Address book
    # -------------------------------------------------------------------
    def _find_address(self, address_id):
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise ValidationError({"addresses": [f"Address {address_id} not found"]})
        return address

    @property
    def default_address(self):
        return next((a for a in self.addresses if a.is_default), None)

    def add_address(
        self,
        street,
        city,
        country,
        label=AddressLabel.HOME.value,
        contact_name=None,
        phone=None,
        state=None,
        postal_code=None,
        is_default=False,
    ):
        from identity.account.events import AddressAdded

        # First address is always default
        if not self.addresses:
            is_default = True

        with atomic_change(self):
            if is_default:
                for addr in self.addresses:
                    if addr.is_default:
                        addr.is_default = False

            address = Address(
                label=label,
                contact_name=contact_name,
                phone=normalize_phone(phone) if phone else None,
                street=street,
                city=city,
                state=state,
                postal_code=postal_code,
                country=country,
                is_default=is_default,
            )
            self.add_addresses(address)

        self.raise_(
            AddressAdded(
                account_id=self.id,
                address_id=address.id,
                label=label,
                city=city,
                country=country,
                is_default=is_default,
            )
        )
        return address

    def update_address(self, address_id, **changes):
        from identity.account.events import AddressUpdated

        address = self._find_address(address_id)
        if changes.get("phone"):
            changes["phone"] = normalize_phone(changes["phone"])
        for field, value in changes.items():
            setattr(address, field, value)

        self.raise_(AddressUpdated(account_id=self.id, address_id=address.id, **changes))

    def remove_address(self, address_id):
        from identity.account.events import AddressRemoved

        address = self._find_address(address_id)
        was_default = address.is_default

        with atomic_change(self):
            self.remove_addresses(address)
            # Hand the default over to the first remaining address
            if was_default and self.addresses:
                self.addresses[0].is_default = True

        self.raise_(AddressRemoved(account_id=self.id, address_id=address_id))

    def set_default_address(self, address_id):
        from identity.account.events import DefaultAddressChanged

        address = self._find_address(address_id)
        previous = self.default_address

        with atomic_change(self):
            for addr in self.addresses:
                if addr.is_default:
                    addr.is_default = False
            address.is_default = True

        self.raise_(
            DefaultAddressChanged(
                account_id=self.id,
                address_id=address.id,
                previous_default_address_id=previous.id if previous else None,
            )
        )
