"""Domain tests for compliance routing of checkouts."""

from ordering.order.compliance import assess_order
from shared.regions import classify_region


def _item(controlled=False, vendor_country="UK"):
    return {"name": "Night Vision Scope", "is_controlled": controlled, "vendor_country": vendor_country}


def test_ordinary_order_is_direct():
    result = assess_order([_item()], 500.0, "UAE")
    assert result == {"type": "direct", "reasons": []}


def test_high_value_order_is_a_request():
    result = assess_order([_item()], 10000.01, "Oman")
    assert result["type"] == "request"
    assert "10,000 AED" in result["reasons"][0]


def test_exactly_the_limit_stays_direct():
    assert assess_order([_item()], 10000.0, "Oman")["type"] == "direct"


def test_controlled_import_into_uae_is_a_request():
    result = assess_order([_item(controlled=True, vendor_country="UK")], 100.0, "AE")
    assert result["type"] == "request"
    assert "Import to UAE" in result["reasons"][0]


def test_controlled_goods_from_uae_supplier_is_a_request():
    result = assess_order([_item(controlled=True, vendor_country="UAE")], 100.0, "Oman")
    assert result["type"] == "request"
    assert "UAE supplier" in result["reasons"][0]


def test_controlled_goods_between_foreign_parties_are_direct():
    assert assess_order([_item(controlled=True, vendor_country="UK")], 100.0, "Oman")["type"] == "direct"


def test_region_accepts_the_three_uae_spellings():
    assert [classify_region(c) for c in ("UAE", " ae ", "United  Arab Emirates")] == ["UAE", "UAE", "UAE"]


def test_other_uae_spellings_count_as_rest_of_world():
    assert classify_region("ARE") == "ROW"
    assert classify_region("U.A.E") == "ROW"
    assert classify_region(None) == "ROW"
