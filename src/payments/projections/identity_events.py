"""Inbound cross-domain event handler — Payments reacts to Identity events."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from payments.domain import payments
from payments.projections.billing_party import BillingParty
from shared.events.identity import AccountRegistered, ProfileUpdated

payments.register_external_event(AccountRegistered, "Identity.AccountRegistered.v1")
payments.register_external_event(ProfileUpdated, "Identity.ProfileUpdated.v1")


def _party(account_id):
    try:
        return current_domain.repository_for(BillingParty).get(str(account_id))
    except ObjectNotFoundError:
        return BillingParty(account_id=str(account_id))


@payments.event_handler(part_of=BillingParty, stream_category="identity::account")
class BillingPartyEventHandler:
    @handle(AccountRegistered)
    def on_account_registered(self, event: AccountRegistered) -> None:
        party = _party(event.account_id)
        party.account_type = event.account_type
        party.name = event.name
        party.email = event.email
        party.country = event.country
        current_domain.repository_for(BillingParty).add(party)

    @handle(ProfileUpdated)
    def on_profile_updated(self, event: ProfileUpdated) -> None:
        party = _party(event.account_id)
        party.name = event.name
        party.phone = event.phone
        party.country = event.country
        current_domain.repository_for(BillingParty).add(party)
