"""
API dependencies

The geocoding resolver owns a pooled HTTP client and is shared process-wide;
rule stores wrap the request's database session.
"""
from typing import Optional
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.services.shipping.engine import ShippingQuoteEngine
from app.services.shipping.geocoding import LocationResolver, ViaCepLocationResolver
from app.services.shipping.store import ShippingRuleStore, SqlShippingRuleStore

_location_resolver: Optional[ViaCepLocationResolver] = None


def get_location_resolver() -> LocationResolver:
    global _location_resolver
    if _location_resolver is None:
        _location_resolver = ViaCepLocationResolver()
    return _location_resolver


async def close_location_resolver():
    global _location_resolver
    if _location_resolver is not None:
        await _location_resolver.close()
        _location_resolver = None


def get_rule_store(db: AsyncSession = Depends(get_db)) -> ShippingRuleStore:
    return SqlShippingRuleStore(db)


def get_quote_engine(
    store: ShippingRuleStore = Depends(get_rule_store),
    resolver: LocationResolver = Depends(get_location_resolver),
) -> ShippingQuoteEngine:
    return ShippingQuoteEngine(store, resolver)
