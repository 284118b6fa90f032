from datetime import UTC, datetime, timedelta

import pytest
from finance.projections.financial_log import financial_logs_for
from finance.projections.marketplace_events import PlatformSettingEventHandler
from finance.wallet.management import (
    CreditWallet,
    DebitWallet,
    EnsureWallet,
    ReleaseLockedFunds,
    transactions_for,
    wallet_for,
)
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from shared.events.marketplace import PlatformSettingChanged


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _credit(user_id="vendor-1", amount=100.0, transaction_type="vendor_earning", **kwargs):
    return _process(CreditWallet(user_id=user_id, amount=amount, transaction_type=transaction_type, **kwargs))


class TestEnsureWallet:
    def test_opens_empty_wallet(self):
        _process(EnsureWallet(user_id="vendor-1"))

        wallet = wallet_for("vendor-1")
        assert wallet.balance == 0.0
        assert wallet.locked_balance == 0.0

    def test_is_idempotent(self):
        first = _process(EnsureWallet(user_id="vendor-1"))
        second = _process(EnsureWallet(user_id="vendor-1"))

        assert first == second


class TestCreditAndDebit:
    def test_credit_opens_wallet(self):
        _credit(amount=120.0, transaction_type="adjustment")

        assert wallet_for("vendor-1").balance == 120.0

    def test_locked_credit_uses_default_return_period(self):
        _credit(locked=True)

        transaction = transactions_for("vendor-1")[0]
        expected = datetime.now(UTC) + timedelta(days=10)
        assert abs(transaction.unlock_at - expected) < timedelta(minutes=1)

    def test_locked_credit_follows_platform_setting(self):
        PlatformSettingEventHandler().on_platform_setting_changed(
            PlatformSettingChanged(key="product_return_period", value="14", changed_at=datetime.now(UTC))
        )

        _credit(locked=True)

        transaction = transactions_for("vendor-1")[0]
        expected = datetime.now(UTC) + timedelta(days=14)
        assert abs(transaction.unlock_at - expected) < timedelta(minutes=1)

    def test_debit(self):
        _credit(amount=100.0, transaction_type="adjustment")

        _process(DebitWallet(user_id="vendor-1", amount=30.0, transaction_type="payout"))

        assert wallet_for("vendor-1").balance == 70.0

    def test_debit_beyond_balance(self):
        _credit(amount=100.0, transaction_type="adjustment")

        with pytest.raises(ValidationError) as exc_info:
            _process(DebitWallet(user_id="vendor-1", amount=130.0, transaction_type="payout"))

        assert "Insufficient funds" in exc_info.value.messages["amount"]
        assert wallet_for("vendor-1").balance == 100.0

    def test_transactions_newest_first_with_type_filter(self):
        _credit(amount=10.0, transaction_type="adjustment")
        _credit(amount=20.0, transaction_type="vendor_earning")
        _credit(amount=30.0, transaction_type="adjustment")

        assert [t.amount for t in transactions_for("vendor-1")] == [30.0, 20.0, 10.0]
        assert [t.amount for t in transactions_for("vendor-1", "adjustment")] == [30.0, 10.0]

    def test_unknown_wallet_has_no_transactions(self):
        assert transactions_for("nobody") == []


class TestReleaseLockedFunds:
    def test_releases_due_funds_across_wallets(self):
        _credit(user_id="vendor-1", amount=90.0, locked=True)
        _credit(user_id="vendor-2", amount=45.5, locked=True)

        result = _process(ReleaseLockedFunds(as_of=datetime.now(UTC) + timedelta(days=11)))

        assert result == {"processed": 2, "total": 135.5}
        assert wallet_for("vendor-1").balance == 90.0
        assert wallet_for("vendor-2").locked_balance == 0.0

    def test_nothing_due(self):
        _credit(amount=90.0, locked=True)

        assert _process(ReleaseLockedFunds()) == {"processed": 0, "total": 0.0}
        assert wallet_for("vendor-1").locked_balance == 90.0


class TestFinancialLog:
    def test_every_movement_is_logged(self):
        _credit(amount=100.0, transaction_type="adjustment", description="Opening balance")
        _process(DebitWallet(user_id="vendor-1", amount=40.0, transaction_type="payout"))

        logs = financial_logs_for("vendor-1")

        assert sorted((log.entry_type, log.category, log.amount) for log in logs) == [
            ("credit", "adjustment", 100.0),
            ("debit", "payout", 40.0),
        ]

    def test_release_is_logged(self):
        _credit(amount=90.0, locked=True, reference_id="ord-1")
        _process(ReleaseLockedFunds(as_of=datetime.now(UTC) + timedelta(days=11)))

        entry_types = {log.entry_type for log in financial_logs_for("vendor-1")}
        assert entry_types == {"credit", "release"}
