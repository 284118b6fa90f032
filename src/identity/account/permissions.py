"""Admin permission management.

Only super admins may grant or revoke; that check lives at the API edge
where the caller is known.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from identity.account.account import Account, AccountType
from identity.domain import identity
from shared.access import Permission

PERMISSION_DESCRIPTIONS = {
    Permission.VENDOR_APPROVE.value: "Approve or reject vendor onboarding",
    Permission.VENDOR_CONTROLLED_APPROVE.value: "Approve UAE vendors trading in controlled categories",
    Permission.ORDER_VIEW.value: "View all orders",
    Permission.ORDER_MANAGE.value: "Update order status, shipping and payment fields",
    Permission.ORDER_CONTROLLED_APPROVE.value: "Approve purchase requests for controlled items",
    Permission.PRODUCT_MANAGE.value: "Approve, reject and curate products and categories",
    Permission.PRODUCT_CONTROLLED_APPROVE.value: "Approve controlled products from UAE vendors",
    Permission.PAYOUT_MANAGE.value: "Approve and settle vendor payouts",
    Permission.SETTINGS_MANAGE.value: "Change platform settings and reference data",
}


@identity.command(part_of="Account")
class GrantPermission:
    account_id: Identifier(required=True)
    permission: String(required=True, max_length=50)
    granted_by: Identifier()


@identity.command(part_of="Account")
class RevokePermission:
    account_id: Identifier(required=True)
    permission: String(required=True, max_length=50)
    revoked_by: Identifier()


def permission_catalogue():
    return [{"code": p.value, "description": PERMISSION_DESCRIPTIONS[p.value]} for p in Permission]


def accounts_with_permission(code):
    """Admins explicitly holding `code`, plus every super admin."""
    accounts = current_domain.repository_for(Account)._dao.query.limit(1000).all().items
    return [
        a
        for a in accounts
        if a.account_type in (AccountType.ADMIN.value, AccountType.SUPER_ADMIN.value) and a.holds(code)
    ]


@identity.command_handler(part_of=Account)
class PermissionHandler:
    @handle(GrantPermission)
    def grant_permission(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.grant_permission(command.permission, granted_by=command.granted_by)
        repo.add(account)

    @handle(RevokePermission)
    def revoke_permission(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.revoke_permission(command.permission, revoked_by=command.revoked_by)
        repo.add(account)
