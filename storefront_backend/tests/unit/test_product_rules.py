import pytest

from app.core.exceptions import ShippingValidationError
from app.services.shipping.product_rules import (
    FreeShippingEligibility,
    ProductShippingRule,
    fetch_rules,
    optional_int,
    qualifies_free,
)


class TestQualifiesFree:

    def test_not_free(self):
        rule = ProductShippingRule(product_id=1, free_shipping=False, free_from_quantity=1)
        assert qualifies_free(rule, 10) == FreeShippingEligibility(ok=False, reason=None)

    def test_always_free_without_threshold(self):
        rule = ProductShippingRule(product_id=1, free_shipping=True)
        assert qualifies_free(rule, 1) == FreeShippingEligibility(ok=True, reason="ALWAYS")

    @pytest.mark.parametrize("threshold", [0, -3])
    def test_non_positive_threshold_is_always_free(self, threshold):
        rule = ProductShippingRule(product_id=1, free_shipping=True, free_from_quantity=threshold)
        assert qualifies_free(rule, 1).reason == "ALWAYS"

    def test_threshold_reached(self):
        rule = ProductShippingRule(product_id=1, free_shipping=True, free_from_quantity=3)
        assert qualifies_free(rule, 3) == FreeShippingEligibility(ok=True, reason="FROM_QTY_3")
        assert qualifies_free(rule, 5).reason == "FROM_QTY_3"

    def test_threshold_not_reached(self):
        rule = ProductShippingRule(product_id=1, free_shipping=True, free_from_quantity=3)
        assert qualifies_free(rule, 2) == FreeShippingEligibility(ok=False, reason=None)


class TestOptionalInt:

    def test_none_passthrough(self):
        assert optional_int(None, "lead_time_days") is None

    def test_parses_numeric_strings(self):
        assert optional_int("5", "lead_time_days") == 5

    def test_rejects_garbage(self):
        with pytest.raises(ShippingValidationError) as exc_info:
            optional_int("soon", "lead_time_days")
        assert exc_info.value.details["field"] == "lead_time_days"


class TestFetchRules:

    @pytest.mark.asyncio
    async def test_returns_rules_by_id(self, make_store):
        store = make_store(products=[
            ProductShippingRule(product_id=1),
            ProductShippingRule(product_id=2, free_shipping=True),
        ])
        rules = await fetch_rules(store, [1, 2, 1])
        assert set(rules) == {1, 2}
        assert rules[2].free_shipping is True

    @pytest.mark.asyncio
    async def test_reports_every_missing_id(self, make_store):
        store = make_store(products=[ProductShippingRule(product_id=2)])
        with pytest.raises(ShippingValidationError) as exc_info:
            await fetch_rules(store, [9, 2, 4])

        err = exc_info.value
        assert err.code == "VALIDATION_ERROR"
        assert err.details["missing_ids"] == [4, 9]
        assert "4" in err.message and "9" in err.message
