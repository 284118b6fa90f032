"""Application tests for platform settings."""

import json

import pytest
from marketplace.setting.management import (
    SetPlatformSetting,
    all_settings,
    commission_percent,
    currency_homepage_sync_enabled,
    currency_last_sync,
    currency_sync_enabled,
    product_return_period,
    public_settings,
    vat_percent,
)
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain


def _set(key, value, **kwargs):
    return current_domain.process(
        SetPlatformSetting(key=key, value=json.dumps(value), updated_by="admin-1", **kwargs), asynchronous=False
    )


class TestDefaults:
    def test_defaults_when_unset(self):
        assert vat_percent() == 5.0
        assert commission_percent() == 10.0
        assert product_return_period() == 10
        assert currency_sync_enabled() is True
        assert currency_homepage_sync_enabled() is False
        assert currency_last_sync() is None

    def test_listing_includes_every_known_key(self):
        keys = [s["key"] for s in all_settings()]
        assert keys[:3] == ["vat_percent", "commission_percent", "product_return_period"]


class TestSetPlatformSetting:
    def test_typed_getters_follow_stored_values(self):
        _set("vat_percent", 7.5)
        _set("product_return_period", 14)
        _set("currency_sync_enabled", False)

        assert vat_percent() == 7.5
        assert product_return_period() == 14
        assert currency_sync_enabled() is False

    def test_returns_stored_setting(self):
        setting = _set("commission_percent", 12, description="Platform commission")
        assert setting["value"] == 12
        assert setting["description"] == "Platform commission"

    def test_overwrites_existing_value(self):
        _set("commission_percent", 12)
        _set("commission_percent", 15)
        assert commission_percent() == 15.0

    def test_rejects_invalid_json(self):
        with pytest.raises(ValidationError) as exc:
            current_domain.process(SetPlatformSetting(key="vat_percent", value="{oops"), asynchronous=False)
        assert "value" in exc.value.messages

    def test_rejects_wrong_type(self):
        with pytest.raises(ValidationError):
            _set("product_return_period", -3)

    def test_custom_keys_are_listed(self):
        _set("shipment.service_type", "INTERNATIONAL_ECONOMY")
        assert {"shipment.service_type"} <= {s["key"] for s in all_settings()}

    def test_public_settings(self):
        _set("vat_percent", 5)
        assert public_settings() == {"vat_percent": 5.0, "product_return_period": 10}
