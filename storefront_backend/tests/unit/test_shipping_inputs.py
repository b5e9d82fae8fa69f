import json

import pytest

from app.core.exceptions import ShippingValidationError
from app.services.shipping.inputs import (
    CartLineItem,
    coerce_int,
    is_empty_cart,
    normalize_cart_items,
    normalize_postal_code,
    require_cart_items,
    require_postal_code,
)


class TestPostalCode:
    """Postal code normalization."""

    def test_strips_punctuation(self):
        assert normalize_postal_code("30130-010") == "30130010"
        assert normalize_postal_code(" 01.310-100 ") == "01310100"

    def test_truncates_extra_digits(self):
        assert normalize_postal_code("12.345-67890") == "12345678"

    @pytest.mark.parametrize("raw", [None, "", "abc", "1234567", "12-345"])
    def test_rejects_short_input(self, raw):
        with pytest.raises(ShippingValidationError) as exc_info:
            normalize_postal_code(raw)
        assert exc_info.value.details["field"] == "postal_code"

    def test_strict_variant_rejects_long_input(self):
        with pytest.raises(ShippingValidationError):
            require_postal_code("12.345-67890")

    def test_strict_variant_accepts_exact_length(self):
        assert require_postal_code("01310-100") == "01310100"


class TestCoerceInt:

    @pytest.mark.parametrize("value,expected", [
        (3, 3),
        ("7", 7),
        (" 12 ", 12),
        (2.0, 2),
        ("4.0", 4),
    ])
    def test_integral_values(self, value, expected):
        assert coerce_int(value) == expected

    @pytest.mark.parametrize("value", [None, True, False, "abc", 2.5, "1e400x", [], {}])
    def test_rejects_non_integral(self, value):
        assert coerce_int(value) is None


class TestCartItems:
    """Cart normalization through the alias table."""

    def test_aliases_and_invalid_entries(self):
        raw = [
            {"id": "1", "quantity": "2"},
            {"productId": 2, "qty": 1},
            {"id": 0, "quantity": 2},
        ]
        assert normalize_cart_items(raw) == [
            CartLineItem(product_id=1, quantity=2),
            CartLineItem(product_id=2, quantity=1),
        ]

    def test_accepts_json_string(self):
        raw = json.dumps([{"produtoId": 5, "quantidade": 3}, {"product_id": 6, "quantity": 1}])
        assert normalize_cart_items(raw) == [
            CartLineItem(product_id=5, quantity=3),
            CartLineItem(product_id=6, quantity=1),
        ]

    def test_first_alias_wins(self):
        items = normalize_cart_items([{"id": 1, "productId": 9, "quantity": 1}])
        assert items == [CartLineItem(product_id=1, quantity=1)]

    def test_drops_negative_and_non_numeric(self):
        raw = [
            {"id": 1, "quantity": -1},
            {"id": "x", "quantity": 1},
            {"id": 2},
            "not-a-dict",
            {"id": 3, "quantity": 1},
        ]
        assert normalize_cart_items(raw) == [CartLineItem(product_id=3, quantity=1)]

    @pytest.mark.parametrize("raw", [None, "", "[", "{}", "[]", [], [{"id": 0, "quantity": 0}], 42])
    def test_returns_none_when_nothing_survives(self, raw):
        assert normalize_cart_items(raw) is None

    def test_is_empty_cart(self):
        assert is_empty_cart(None)
        assert is_empty_cart("[]")
        assert is_empty_cart([])
        assert not is_empty_cart("[{")
        assert not is_empty_cart([{"id": 0}])

    def test_require_cart_items_messages(self):
        with pytest.raises(ShippingValidationError, match="empty"):
            require_cart_items("[]")
        with pytest.raises(ShippingValidationError, match="Malformed"):
            require_cart_items("[{not json")
        with pytest.raises(ShippingValidationError, match="Invalid cart items"):
            require_cart_items([{"id": -1, "quantity": 1}])

    def test_normalization_is_idempotent(self):
        first = normalize_cart_items([{"id": "1", "qty": "2"}])
        assert normalize_cart_items(first) == first
