"""Domain tests for PlatformSetting and CurrencyRate."""

import pytest
from marketplace.currency.currency import CurrencyRate
from marketplace.setting.events import PlatformSettingChanged
from marketplace.setting.setting import PlatformSetting, decode_value
from protean.exceptions import ValidationError


class TestPlatformSetting:
    def test_change_stores_json_and_announces(self):
        setting = PlatformSetting(key="commission_percent")
        setting.change(12.5, description="Platform commission", updated_by="admin-1")

        assert setting.value == "12.5"
        assert setting.decoded == 12.5
        event = setting._events[-1]
        assert isinstance(event, PlatformSettingChanged)
        assert event.key == "commission_percent"
        assert event.value == "12.5"

    @pytest.mark.parametrize(
        "key, value",
        [
            ("vat_percent", 120),
            ("vat_percent", "five"),
            ("commission_percent", -1),
            ("product_return_period", 2.5),
            ("currency_sync_enabled", "yes"),
            ("currency_last_sync", "yesterday"),
        ],
    )
    def test_known_keys_are_type_checked(self, key, value):
        with pytest.raises(ValidationError):
            PlatformSetting(key=key).change(value)

    def test_custom_keys_take_any_value(self):
        setting = PlatformSetting(key="shipment.service_type")
        setting.change("INTERNATIONAL_ECONOMY")
        assert setting.decoded == "INTERNATIONAL_ECONOMY"

    def test_decode_plain_text(self):
        assert decode_value("not json") == "not json"
        assert decode_value(None) is None


class TestCurrencyRate:
    def test_code_is_upper_cased(self):
        assert CurrencyRate.define("usd", "US Dollar", 0.27).code == "USD"

    def test_base_currency_is_always_one(self):
        aed = CurrencyRate.define("AED", "UAE Dirham", 3.67)
        assert aed.is_base
        assert aed.rate == 1.0

        aed.apply_rate(2.0)
        assert aed.rate == 1.0

    def test_rate_must_be_positive(self):
        usd = CurrencyRate.define("USD", "US Dollar", 0.27)
        with pytest.raises(ValidationError):
            usd.apply_rate(0)
