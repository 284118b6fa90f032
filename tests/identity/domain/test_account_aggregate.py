"""Tests for the Account aggregate: registration, profile, status and permissions."""

import pytest
from identity.account.account import Account
from identity.account.events import (
    AccountReactivated,
    AccountRegistered,
    AccountSuspended,
    PermissionGranted,
    PermissionRevoked,
)
from protean.exceptions import ValidationError


def _make_account(account_type="customer", **overrides):
    defaults = {"email": "Layla@Example.AE", "name": "Layla Haddad", "account_type": account_type}
    defaults.update(overrides)
    return Account.register(**defaults)


class TestRegistration:
    def test_email_is_lower_cased(self):
        assert _make_account().email.address == "layla@example.ae"

    def test_phone_is_normalised(self):
        account = _make_account(phone="00971 50-123 4567")
        assert account.phone == "+971501234567"
        assert account.phone_verified is False

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            _make_account(email="not-an-email")

    def test_invalid_phone_rejected(self):
        with pytest.raises(ValidationError):
            _make_account(phone="12ab")

    def test_raises_registered_event(self):
        event = _make_account(account_type="vendor")._events[0]
        assert isinstance(event, AccountRegistered)
        assert event.account_type == "vendor"


class TestProfile:
    def test_changing_phone_resets_verification(self):
        account = _make_account(phone="+971501234567")
        account.mark_phone_verified()
        account.update_profile(phone="+971559999999")

        assert account.phone == "+971559999999"
        assert account.phone_verified is False

    def test_same_phone_keeps_verification(self):
        account = _make_account(phone="+971501234567")
        account.mark_phone_verified()
        account.update_profile(phone="+971 50 123 4567")
        assert account.phone_verified is True

    def test_discount_only_for_customers(self):
        with pytest.raises(ValidationError):
            _make_account(account_type="vendor").update_profile(discount_percent=5.0)

    def test_customer_discount(self):
        account = _make_account()
        account.update_profile(discount_percent=7.5)
        assert account.discount_percent == 7.5


class TestStatus:
    def test_suspend_and_reactivate(self):
        account = _make_account()
        account.suspend("Fraud review")
        assert account.status == "suspended"
        assert isinstance(account._events[-1], AccountSuspended)

        account.reactivate()
        assert account.is_active
        assert isinstance(account._events[-1], AccountReactivated)

    def test_cannot_suspend_twice(self):
        account = _make_account()
        account.suspend("Fraud review")
        with pytest.raises(ValidationError):
            account.suspend("Again")

    def test_cannot_reactivate_active(self):
        with pytest.raises(ValidationError):
            _make_account().reactivate()


class TestPermissions:
    def test_grant_to_admin(self):
        admin = _make_account(account_type="admin")
        admin.grant_permission("order.manage", granted_by="root")

        assert admin.permission_codes == ["order.manage"]
        assert admin.holds("order.manage")
        assert not admin.holds("payout.manage")
        assert isinstance(admin._events[-1], PermissionGranted)

    def test_grant_is_idempotent(self):
        admin = _make_account(account_type="admin")
        admin.grant_permission("order.view")
        admin.grant_permission("order.view")
        assert admin.permission_codes == ["order.view"]

    def test_unknown_code_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _make_account(account_type="admin").grant_permission("order.delete")
        assert "Unknown permission" in str(exc.value)

    def test_customers_cannot_hold_permissions(self):
        with pytest.raises(ValidationError):
            _make_account().grant_permission("order.view")

    def test_super_admin_holds_everything(self):
        root = _make_account(account_type="super_admin")
        assert root.holds("payout.manage")
        with pytest.raises(ValidationError):
            root.grant_permission("payout.manage")

    def test_revoke(self):
        admin = _make_account(account_type="admin")
        admin.grant_permission("order.view")
        admin.revoke_permission("order.view")

        assert admin.permission_codes == []
        assert isinstance(admin._events[-1], PermissionRevoked)

    def test_revoke_missing_code_rejected(self):
        with pytest.raises(ValidationError):
            _make_account(account_type="admin").revoke_permission("order.view")
