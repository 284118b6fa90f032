import httpx
import pytest
from protean.integrations.pytest import DomainFixture

FEED_RATES = {"aed": 1, "usd": 0.2723, "eur": 0.2494, "sar": 1.0211, "gbp": 0}


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield


@pytest.fixture()
def feed_requests():
    return []


@pytest.fixture(autouse=True)
def feed(feed_requests):
    """A currency feed whose primary source serves FEED_RATES."""
    from marketplace.currency.feed import CurrencyFeed, reset_feed, set_feed

    def handler(request):
        feed_requests.append(str(request.url))
        return httpx.Response(200, json={"date": "2026-10-19", "aed": FEED_RATES})

    instance = CurrencyFeed(
        base_urls=["https://primary.example.com/v1", "https://fallback.example.com/v1"],
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    set_feed(instance)
    yield instance
    reset_feed()


@pytest.fixture()
def currencies():
    from marketplace.currency.conversion import DefineCurrency
    from protean.utils.globals import current_domain

    for code, name, rate in [
        ("AED", "UAE Dirham", None),
        ("USD", "US Dollar", 0.27),
        ("EUR", "Euro", 0.25),
        ("GBP", "Pound Sterling", 0.21),
    ]:
        current_domain.process(DefineCurrency(code=code, name=name, rate=rate), asynchronous=False)
