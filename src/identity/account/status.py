"""Account suspension — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.account.account import Account
from identity.domain import identity


@identity.command(part_of="Account")
class SuspendAccount:
    account_id: Identifier(required=True)
    reason: String(required=True, max_length=500)


@identity.command(part_of="Account")
class ReactivateAccount:
    account_id: Identifier(required=True)


@identity.command_handler(part_of=Account)
class AccountStatusHandler:
    @handle(SuspendAccount)
    def suspend_account(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.suspend(reason=command.reason)
        repo.add(account)

    @handle(ReactivateAccount)
    def reactivate_account(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.reactivate()
        repo.add(account)
