from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.core.exceptions import ShippingValidationError
from app.services.shipping.store import SqlShippingRuleStore


def _scalars_result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


def _rows_result(rows):
    result = MagicMock()
    result.all.return_value = rows
    return result


class TestSqlShippingRuleStore:
    """Mapping of ORM rows into engine reference data."""

    @pytest.mark.asyncio
    async def test_product_rules(self, mock_db):
        mock_db.execute.return_value = _scalars_result([
            SimpleNamespace(id=1, shipping_free=True, shipping_free_from_qty=None, shipping_lead_time_days=3),
            SimpleNamespace(id=2, shipping_free=None, shipping_free_from_qty="2", shipping_lead_time_days=None),
        ])
        store = SqlShippingRuleStore(mock_db)

        rules = await store.get_product_rules([2, 1])

        assert rules[1].free_shipping is True
        assert rules[1].lead_time_days == 3
        assert rules[2].free_shipping is False
        assert rules[2].free_from_quantity == 2
        mock_db.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_product_rules_empty_request_skips_query(self, mock_db):
        store = SqlShippingRuleStore(mock_db)
        assert await store.get_product_rules([]) == {}
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bad_numeric_column_is_validation_error(self, mock_db):
        mock_db.execute.return_value = _scalars_result([
            SimpleNamespace(id=1, shipping_free=True, shipping_free_from_qty="lots", shipping_lead_time_days=None),
        ])
        with pytest.raises(ShippingValidationError):
            await SqlShippingRuleStore(mock_db).get_product_rules([1])

    @pytest.mark.asyncio
    async def test_zones_load_city_sets(self, mock_db):
        zones = [
            SimpleNamespace(id=1, name="BH", state="MG", all_cities=False, is_free=False,
                            price=Decimal("12.00"), lead_time_days=2, is_active=True),
            SimpleNamespace(id=2, name="MG", state="MG", all_cities=True, is_free=True,
                            price=Decimal("0"), lead_time_days=None, is_active=True),
        ]
        mock_db.execute.side_effect = [
            _scalars_result(zones),
            _rows_result([(1, "Belo Horizonte"), (1, "Contagem")]),
        ]

        result = await SqlShippingRuleStore(mock_db).get_active_zones("mg")

        assert [z.id for z in result] == [1, 2]
        assert result[0].cities == frozenset({"Belo Horizonte", "Contagem"})
        assert result[1].cities == frozenset()
        assert result[1].is_free is True
        assert mock_db.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_no_zones_skips_city_query(self, mock_db):
        mock_db.execute.return_value = _scalars_result([])
        assert await SqlShippingRuleStore(mock_db).get_active_zones("AC") == []
        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_covering_ranges(self, mock_db):
        mock_db.execute.return_value = _scalars_result([
            SimpleNamespace(id=4, cep_start="01000000", cep_end="05999999",
                            price=Decimal("25.50"), lead_time_days=4, is_active=True),
        ])

        ranges = await SqlShippingRuleStore(mock_db).get_covering_ranges("01310100")

        assert len(ranges) == 1
        assert ranges[0].covers("01310100")
        assert ranges[0].price == Decimal("25.50")
