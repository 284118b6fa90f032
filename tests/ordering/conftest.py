import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture()
def customer_profile():
    """Seed the CustomerProfile projection checkout reads."""
    from ordering.projections.customer_profile import CustomerProfile
    from protean.utils.globals import current_domain

    def _customer(customer_id="cust-1", country="UAE", discount=0.0, suspended=False):
        current_domain.repository_for(CustomerProfile).add(
            CustomerProfile(
                customer_id=customer_id,
                email=f"{customer_id}@example.com",
                name="Aisha",
                country=country,
                discount_percent=discount,
                is_suspended=suspended,
            )
        )

    return _customer


@pytest.fixture()
def product_snapshot():
    """Seed the ProductSnapshot projection carts and checkout price from."""
    from ordering.projections.product_snapshot import ProductSnapshot
    from protean.utils.globals import current_domain

    def _snapshot(product_id, vendor_id="vendor-1", vendor_country="UAE", price=100.0, base_price=90.0, **overrides):
        values = {
            "product_id": product_id,
            "vendor_id": vendor_id,
            "vendor_country": vendor_country,
            "name": f"Product {product_id}",
            "price": price,
            "base_price": base_price,
            "shipping_charge": 10.0,
            "packing_charge": 5.0,
            "stock": 50,
            "is_controlled": False,
            "is_purchasable": True,
        }
        values.update(overrides)
        current_domain.repository_for(ProductSnapshot).add(ProductSnapshot(**values))

    return _snapshot
