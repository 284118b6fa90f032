"""Fixtures for cross-domain flow tests.

Each test drives a real command in one bounded context, reads the events
that context stored, and hands them to the consuming context's handler,
the way the engine relays them between streams.
"""

import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


def _bed(domain):
    bed = DomainFixture(domain)
    bed.setup()
    return bed


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = _bed(ordering)
    yield bed
    bed.teardown()


@pytest.fixture(scope="session")
def fulfillment_bed():
    from fulfillment.domain import fulfillment

    bed = _bed(fulfillment)
    yield bed
    bed.teardown()


@pytest.fixture(scope="session")
def finance_bed():
    from finance.domain import finance

    bed = _bed(finance)
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def carrier():
    from fulfillment.carrier import reset_carrier, set_carrier
    from fulfillment.carrier.fake_adapter import FakeCarrier

    fake = FakeCarrier()
    set_carrier(fake)
    yield fake
    reset_carrier()


@pytest.fixture()
def stored_events():
    """Payloads of events of one type stored in the active domain's event store."""

    def _read(stream_category, event_type):
        messages = current_domain.event_store.store.read(stream_category)
        return [m.data for m in messages if m.metadata.headers.type == event_type]

    return _read
