"""
Shipping rate resolution: zones, postal code ranges and per-product free shipping.
"""
from app.services.shipping.engine import ShippingQuoteEngine, merge_lead_times
from app.services.shipping.geocoding import Location, LocationResolver, ViaCepLocationResolver
from app.services.shipping.inputs import CartLineItem, normalize_cart_items, normalize_postal_code
from app.services.shipping.quote import AppliedRule, FreeItem, Quote, ZoneInfo
from app.services.shipping.store import ShippingRuleStore, SqlShippingRuleStore

__all__ = [
    "ShippingQuoteEngine",
    "merge_lead_times",
    "Location",
    "LocationResolver",
    "ViaCepLocationResolver",
    "CartLineItem",
    "normalize_cart_items",
    "normalize_postal_code",
    "AppliedRule",
    "FreeItem",
    "Quote",
    "ZoneInfo",
    "ShippingRuleStore",
    "SqlShippingRuleStore",
]
