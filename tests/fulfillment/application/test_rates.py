"""Rate quotes and pickup availability — nothing is persisted."""

import json

import pytest
from fulfillment.shipment.rates import pickup_availability, quote_rates
from fulfillment.shipment.shipment import Shipment
from protean import current_domain
from protean.exceptions import ValidationError


class TestQuoteRates:
    def test_per_order(self, placed_order, carrier):
        placed_order()

        result = quote_rates("admin_to_customer", order_id="ord-1", weight_kg=3.0)

        assert result["success"] is True
        assert len(result["data"]) == 2
        assert carrier.last_request.to_address["city"] == "Dubai"
        assert current_domain.repository_for(Shipment)._dao.query.all().items == []

    def test_ad_hoc_route(self, carrier):
        result = quote_rates(
            "admin_to_customer",
            to_address=json.dumps({"street_lines": ["1 Rue de Rivoli"], "city": "Paris", "country_code": "FR"}),
            to_contact=json.dumps({"name": "Jean Martin"}),
        )

        assert result["success"] is True
        assert carrier.last_request.to_address["country_code"] == "FR"

    def test_ad_hoc_route_needs_destination(self):
        with pytest.raises(ValidationError):
            quote_rates("admin_to_customer")

    def test_carrier_failure_is_reported(self, placed_order, carrier):
        placed_order()
        carrier.configure(should_succeed=False, failure_reason="Rating unavailable")

        result = quote_rates("admin_to_customer", order_id="ord-1")

        assert result == {"success": False, "error": "Rating unavailable"}


class TestPickupAvailability:
    def test_dates(self):
        result = pickup_availability("00000", "AE")

        assert result["success"] is True
        assert len(result["data"]["dates"]) == 5
