import json
from datetime import UTC, datetime

import pytest
from protean.integrations.pytest import DomainFixture
from shared.events.ordering import OrderDelivered


@pytest.fixture(scope="session")
def reviews_bed():
    from reviews.domain import reviews

    bed = DomainFixture(reviews)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(reviews_bed):
    with reviews_bed.domain_context():
        yield


CONTENT = "Solid build, fits my rifle perfectly."


def _order_delivered(order_id="ord-1", customer_id="cust-1", product_ids=("prod-1",)):
    return OrderDelivered(
        order_id=order_id,
        order_number="10000001",
        order_group_id="10000001",
        vendor_id="vendor-1",
        customer_id=customer_id,
        items=json.dumps(
            [{"product_id": pid, "product_name": "Scope Mount", "quantity": 1, "price": 150.0} for pid in product_ids]
        ),
        total_amount=157.5,
        delivered_at=datetime.now(UTC),
    )


@pytest.fixture()
def order_delivered():
    return _order_delivered


@pytest.fixture()
def submit():
    from protean.utils.globals import current_domain
    from reviews.review.submission import SubmitReview

    def _submit(**overrides):
        fields = {"product_id": "prod-1", "customer_id": "cust-1", "rating": 4, "content": CONTENT}
        fields.update(overrides)
        return current_domain.process(SubmitReview(**fields), asynchronous=False)

    return _submit
