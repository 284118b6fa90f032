import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def vendors_bed():
    from vendors.domain import vendors

    bed = DomainFixture(vendors)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(vendors_bed):
    with vendors_bed.domain_context():
        yield
