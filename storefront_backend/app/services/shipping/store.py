"""
Read access to shipping reference data

The engine only depends on ShippingRuleStore; SqlShippingRuleStore is the
SQLAlchemy-backed implementation used by the API. Reads are plain selects
without a transaction; a rule edited mid-request may or may not be seen.
"""
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.product import Product
from app.models.shipping import ShippingCepRange, ShippingZone, ShippingZoneCity
from app.services.shipping.product_rules import ProductShippingRule, optional_int
from app.services.shipping.ranges import CepRange
from app.services.shipping.zones import DeliveryZone

logger = logging.getLogger(__name__)


class ShippingRuleStore(ABC):
    """Read-only source of product rules, zones and postal code ranges."""

    @abstractmethod
    async def get_product_rules(self, product_ids: Iterable[int]) -> Dict[int, ProductShippingRule]:
        """Rules for the ids that exist; unknown ids are simply absent."""
        pass

    @abstractmethod
    async def get_active_zones(self, state: str) -> List[DeliveryZone]:
        """Active zones for a state, city sets populated."""
        pass

    @abstractmethod
    async def get_covering_ranges(self, postal_code: str) -> List[CepRange]:
        """Active ranges whose bounds include the postal code."""
        pass


class SqlShippingRuleStore(ShippingRuleStore):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_product_rules(self, product_ids: Iterable[int]) -> Dict[int, ProductShippingRule]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        result = await self.db.execute(
            select(Product).where(Product.id.in_(ids), Product.deleted_at.is_(None))
        )
        rules = {}
        for product in result.scalars().all():
            rules[product.id] = ProductShippingRule(
                product_id=product.id,
                free_shipping=bool(product.shipping_free),
                free_from_quantity=optional_int(product.shipping_free_from_qty, "shipping_free_from_qty"),
                lead_time_days=optional_int(product.shipping_lead_time_days, "shipping_lead_time_days"),
            )
        return rules

    async def get_active_zones(self, state: str) -> List[DeliveryZone]:
        result = await self.db.execute(
            select(ShippingZone).where(
                ShippingZone.state == state.upper(),
                ShippingZone.is_active.is_(True),
            )
        )
        zones = result.scalars().all()
        if not zones:
            return []

        cities = defaultdict(set)
        restricted_ids = [z.id for z in zones if not z.all_cities]
        if restricted_ids:
            city_rows = await self.db.execute(
                select(ShippingZoneCity.zone_id, ShippingZoneCity.city).where(
                    ShippingZoneCity.zone_id.in_(restricted_ids)
                )
            )
            for zone_id, city in city_rows.all():
                cities[zone_id].add(city)

        return [
            DeliveryZone(
                id=zone.id,
                name=zone.name,
                state=zone.state,
                all_cities=bool(zone.all_cities),
                cities=frozenset(cities.get(zone.id, ())),
                is_free=bool(zone.is_free),
                price=zone.price,
                lead_time_days=optional_int(zone.lead_time_days, "lead_time_days"),
                is_active=bool(zone.is_active),
            )
            for zone in zones
        ]

    async def get_covering_ranges(self, postal_code: str) -> List[CepRange]:
        result = await self.db.execute(
            select(ShippingCepRange).where(
                ShippingCepRange.is_active.is_(True),
                ShippingCepRange.cep_start <= postal_code,
                ShippingCepRange.cep_end >= postal_code,
            )
        )
        return [
            CepRange(
                id=row.id,
                start=row.cep_start,
                end=row.cep_end,
                price=row.price,
                lead_time_days=optional_int(row.lead_time_days, "lead_time_days"),
                is_active=bool(row.is_active),
            )
            for row in result.scalars().all()
        ]
