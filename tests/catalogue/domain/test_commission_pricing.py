"""Tests for commission-inflated customer pricing."""

from catalogue.shared.pricing import apply_commission, inflate


class TestInflate:
    def test_adds_commission_percentage(self):
        assert inflate(100, 10) == 110.0

    def test_rounds_to_two_decimals(self):
        assert inflate(19.99, 7.5) == 21.49

    def test_zero_commission_leaves_amount(self):
        assert inflate(50, 0) == 50.0

    def test_negative_commission_leaves_amount(self):
        assert inflate(50, -5) == 50.0

    def test_none_amount_stays_none(self):
        assert inflate(None, 10) is None


class TestApplyCommission:
    def _product(self, commission=10):
        return {
            "price": 100.0,
            "base_price": 90.0,
            "commission": commission,
            "pricing_tiers": [{"min_quantity": 10, "max_quantity": 20, "price": 80.0}],
            "individual_product_pricing": [{"name": "Gift wrap", "amount": 5.0}],
        }

    def test_inflates_every_price(self):
        result = apply_commission(self._product())

        assert result["price"] == 110.0
        assert result["base_price"] == 99.0
        assert result["pricing_tiers"][0]["price"] == 88.0
        assert result["individual_product_pricing"][0]["amount"] == 5.5

    def test_strips_commission_rate(self):
        assert "commission" not in apply_commission(self._product())

    def test_strips_rate_even_when_zero(self):
        result = apply_commission(self._product(commission=0))
        assert "commission" not in result
        assert result["price"] == 100.0
        assert result["pricing_tiers"][0]["price"] == 80.0

    def test_does_not_mutate_input(self):
        product = self._product()
        apply_commission(product)
        assert product["price"] == 100.0
        assert product["commission"] == 10

    def test_keeps_tier_quantities(self):
        tier = apply_commission(self._product())["pricing_tiers"][0]
        assert tier["min_quantity"] == 10
        assert tier["max_quantity"] == 20
