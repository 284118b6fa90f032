"""Inbound cross-domain event handler — Ordering reacts to Identity events.

Keeps a CustomerProfile per account (email, country, customer discount,
suspension) so checkout can price and route orders without asking Identity.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ordering.domain import ordering
from ordering.projections.customer_profile import CustomerProfile
from shared.events.identity import AccountReactivated, AccountRegistered, AccountSuspended, ProfileUpdated

logger = structlog.get_logger(__name__)

# Register external events so Protean can deserialize them
ordering.register_external_event(AccountRegistered, "Identity.AccountRegistered.v1")
ordering.register_external_event(ProfileUpdated, "Identity.ProfileUpdated.v1")
ordering.register_external_event(AccountSuspended, "Identity.AccountSuspended.v1")
ordering.register_external_event(AccountReactivated, "Identity.AccountReactivated.v1")


def _profile(account_id):
    repo = current_domain.repository_for(CustomerProfile)
    try:
        return repo.get(str(account_id))
    except ObjectNotFoundError:
        return CustomerProfile(customer_id=str(account_id))


@ordering.event_handler(part_of=CustomerProfile, stream_category="identity::account")
class IdentityEventsHandler:
    @handle(AccountRegistered)
    def on_account_registered(self, event: AccountRegistered) -> None:
        profile = _profile(event.account_id)
        profile.email = event.email
        profile.name = event.name
        profile.country = event.country
        current_domain.repository_for(CustomerProfile).add(profile)

    @handle(ProfileUpdated)
    def on_profile_updated(self, event: ProfileUpdated) -> None:
        profile = _profile(event.account_id)
        profile.name = event.name
        profile.country = event.country
        if event.discount_percent is not None:
            profile.discount_percent = event.discount_percent
        current_domain.repository_for(CustomerProfile).add(profile)

    @handle(AccountSuspended)
    def on_account_suspended(self, event: AccountSuspended) -> None:
        logger.info("Blocking checkout for suspended account", customer_id=str(event.account_id), reason=event.reason)
        profile = _profile(event.account_id)
        profile.is_suspended = True
        current_domain.repository_for(CustomerProfile).add(profile)

    @handle(AccountReactivated)
    def on_account_reactivated(self, event: AccountReactivated) -> None:
        profile = _profile(event.account_id)
        profile.is_suspended = False
        current_domain.repository_for(CustomerProfile).add(profile)
