"""Domain tests for the PaymentSession aggregate."""

import pytest
from payments.gateway.port import CheckoutSessionResult
from payments.session.events import PaymentSessionOpened, PaymentSessionRetried, PaymentSessionSettled
from payments.session.session import AttemptStatus, PaymentSession, PaymentSessionStatus
from protean.exceptions import ValidationError

LINE_ITEMS = [{"name": "Ballistic Vest", "unit_amount": 10500, "quantity": 2}]


def _open(gateway_session=CheckoutSessionResult(session_id="cs_1", url="https://pay/cs_1")):
    return PaymentSession.open(
        order_group_id="10000001",
        customer_id="cust-1",
        customer_email="aisha@example.com",
        order_ids=["ord-1"],
        line_items=LINE_ITEMS,
        amount=210.0,
        gateway_session=gateway_session,
    )


class TestOpen:
    def test_opens_with_pending_attempt(self):
        session = _open()

        assert session.status == PaymentSessionStatus.OPEN.value
        assert session.session_id == "cs_1"
        assert session.session_url == "https://pay/cs_1"
        assert len(session.attempts) == 1
        assert session.attempts[0].status == AttemptStatus.PENDING.value

    def test_raises_opened_event(self):
        session = _open()

        event = session._events[-1]
        assert isinstance(event, PaymentSessionOpened)
        assert event.gateway_session_id == "cs_1"
        assert event.amount == 210.0

    def test_without_gateway_session_starts_failed(self):
        session = _open(gateway_session=None)

        assert session.status == PaymentSessionStatus.FAILED.value
        assert not session.attempts

    def test_keeps_line_items_for_retries(self):
        session = _open()

        assert session.stored_line_items == LINE_ITEMS
        assert session.amount_in_fils == 21000


class TestSettle:
    def test_paid_outcome_marks_session_paid(self):
        session = _open()

        assert session.settle("cs_1", "paid", 210.0) is True

        assert session.is_paid
        assert session.paid_at is not None
        assert session.attempts[0].status == AttemptStatus.PAID.value

    def test_no_payment_required_counts_as_paid(self):
        session = _open()
        session.settle("cs_1", "no_payment_required")
        assert session.is_paid

    def test_unpaid_outcome_marks_session_failed(self):
        session = _open()

        session.settle("cs_1", "unpaid")

        assert session.status == PaymentSessionStatus.FAILED.value
        assert session.attempts[0].status == AttemptStatus.FAILED.value

    def test_unknown_gateway_session_adds_attempt(self):
        session = _open()

        session.settle("cs_other", "paid", 210.0)

        assert len(session.attempts) == 2
        assert {a.session_id for a in session.attempts} == {"cs_1", "cs_other"}

    def test_raises_settled_event(self):
        session = _open()
        session.settle("cs_1", "paid", 210.0)

        event = session._events[-1]
        assert isinstance(event, PaymentSessionSettled)
        assert event.status == "paid"
        assert event.order_group_id == "10000001"
        assert event.gateway_session_id == "cs_1"

    def test_settling_a_paid_session_changes_nothing(self):
        session = _open()
        session.settle("cs_1", "paid", 210.0)
        events_before = len(session._events)

        assert session.settle("cs_1", "unpaid") is False

        assert session.is_paid
        assert len(session._events) == events_before


class TestRetry:
    def test_retry_starts_new_attempt(self):
        session = _open()
        session.settle("cs_1", "unpaid")

        session.retry(CheckoutSessionResult(session_id="cs_2", url="https://pay/cs_2"))

        assert session.status == PaymentSessionStatus.OPEN.value
        assert session.session_id == "cs_2"
        assert len(session.attempts) == 2
        assert isinstance(session._events[-1], PaymentSessionRetried)

    def test_retry_of_paid_session_is_rejected(self):
        session = _open()
        session.settle("cs_1", "paid")

        with pytest.raises(ValidationError) as exc_info:
            session.retry(CheckoutSessionResult(session_id="cs_2"))

        assert "Order is already paid" in exc_info.value.messages["payment"]


class TestExpire:
    def test_open_session_expires(self):
        session = _open()
        session.expire()
        assert session.status == PaymentSessionStatus.EXPIRED.value

    def test_paid_session_does_not_expire(self):
        session = _open()
        session.settle("cs_1", "paid")
        session.expire()
        assert session.is_paid
