"""Account registration and profile updates — commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from identity.account.account import Account, AccountType
from identity.domain import identity
from identity.projections.account_lookup import find_account_id_by_email

logger = structlog.get_logger(__name__)


@identity.command(part_of="Account")
class RegisterAccount:
    """Create an account. Emails are unique regardless of case."""

    email: String(required=True, max_length=254)
    name: String(required=True, max_length=150)
    account_type: String(max_length=20, default=AccountType.CUSTOMER.value)
    phone: String(max_length=30)
    country: String(max_length=100)


@identity.command(part_of="Account")
class UpdateProfile:
    account_id: Identifier(required=True)
    name: String(max_length=150)
    phone: String(max_length=30)
    country: String(max_length=100)
    discount_percent: Float(min_value=0.0, max_value=100.0)


@identity.command_handler(part_of=Account)
class AccountProfileHandler:
    @handle(RegisterAccount)
    def register_account(self, command):
        if command.account_type not in {t.value for t in AccountType}:
            raise ValidationError({"account_type": [f"Unknown account type: {command.account_type}"]})
        if find_account_id_by_email(command.email):
            raise ValidationError({"email": ["An account with this email already exists"]})

        account = Account.register(
            email=command.email,
            name=command.name,
            account_type=command.account_type,
            phone=command.phone,
            country=command.country,
        )
        current_domain.repository_for(Account).add(account)
        logger.info("Account registered", account_id=str(account.id), account_type=account.account_type)
        return str(account.id)

    @handle(UpdateProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)

        changes = {}
        for field in ("name", "phone", "country", "discount_percent"):
            value = getattr(command, field)
            if value is not None:
                changes[field] = value

        account.update_profile(**changes)
        repo.add(account)
