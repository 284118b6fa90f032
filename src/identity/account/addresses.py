"""Address book management — commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from identity.account.account import Account
from identity.domain import identity

_ADDRESS_FIELDS = ("label", "contact_name", "phone", "street", "city", "state", "postal_code", "country")


@identity.command(part_of="Account")
class AddAddress:
    account_id: Identifier(required=True)
    label: String(max_length=20)
    contact_name: String(max_length=150)
    phone: String(max_length=30)
    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(required=True, max_length=100)
    is_default: Boolean(default=False)


@identity.command(part_of="Account")
class UpdateAddress:
    account_id: Identifier(required=True)
    address_id: Identifier(required=True)
    label: String(max_length=20)
    contact_name: String(max_length=150)
    phone: String(max_length=30)
    street: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=100)


@identity.command(part_of="Account")
class RemoveAddress:
    account_id: Identifier(required=True)
    address_id: Identifier(required=True)


@identity.command(part_of="Account")
class SetDefaultAddress:
    account_id: Identifier(required=True)
    address_id: Identifier(required=True)


@identity.command_handler(part_of=Account)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)

        kwargs = {f: getattr(command, f) for f in _ADDRESS_FIELDS if getattr(command, f) is not None}
        address = account.add_address(is_default=command.is_default, **kwargs)
        repo.add(account)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)

        updates = {f: getattr(command, f) for f in _ADDRESS_FIELDS if getattr(command, f) is not None}
        account.update_address(command.address_id, **updates)
        repo.add(account)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.remove_address(command.address_id)
        repo.add(account)

    @handle(SetDefaultAddress)
    def set_default_address(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.set_default_address(command.address_id)
        repo.add(account)
