"""Account lookup — find an account by email."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.account.account import Account
from identity.account.events import AccountRegistered
from identity.domain import identity
from identity.shared.email import normalize_email


@identity.projection
class AccountLookup:
    email: Identifier(identifier=True, required=True)
    account_id: String(required=True)
    account_type: String(required=True)


@identity.projector(projector_for=AccountLookup, aggregates=[Account])
class AccountLookupProjector:
    @on(AccountRegistered)
    def on_account_registered(self, event):
        current_domain.repository_for(AccountLookup).add(
            AccountLookup(
                email=event.email,
                account_id=str(event.account_id),
                account_type=event.account_type,
            )
        )


def find_account_id_by_email(email):
    try:
        return current_domain.repository_for(AccountLookup).get(normalize_email(email)).account_id
    except ObjectNotFoundError:
        return None
