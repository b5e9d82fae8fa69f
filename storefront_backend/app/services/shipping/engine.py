"""
Shipping Quote Engine

Resolves a destination postal code and a cart into a Quote:

1. normalize postal code and cart
2. load product rules, evaluate per-item free shipping and lead time
3. geocode the postal code to {state, city}
4. zone match; if none, postal code range fallback; if none, NOT_FOUND
5. consolidate: product free shipping overrides the base price, lead
   times merge to the slower of the two

Used both for the public quote preview and to re-derive shipping at
checkout, so identical inputs and reference data must give equal quotes.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from app.core.exceptions import ShippingNotFoundError, ShippingValidationError
from app.services.shipping.geocoding import LocationResolver
from app.services.shipping.inputs import CartLineItem, require_cart_items, require_postal_code
from app.services.shipping.product_rules import ProductShippingRule, fetch_rules, qualifies_free
from app.services.shipping.quote import BaseQuote, FreeItem, Quote, AppliedRule, to_money
from app.services.shipping.ranges import resolve_range
from app.services.shipping.store import ShippingRuleStore
from app.services.shipping.zones import resolve_zone

logger = logging.getLogger(__name__)


def merge_lead_times(*values: Optional[int]) -> Optional[int]:
    """Max of the defined values; None when none is defined."""
    defined = [v for v in values if v is not None]
    return max(defined) if defined else None


@dataclass(frozen=True)
class CartShippingEvaluation:
    free_items: Tuple[FreeItem, ...]
    lead_time_days: Optional[int]

    @property
    def product_free(self) -> bool:
        return bool(self.free_items)


def evaluate_cart(
    items: List[CartLineItem],
    rules: Dict[int, ProductShippingRule],
) -> CartShippingEvaluation:
    """
    Per-item free shipping, in cart order, and the slowest product lead time.

    Lead time counts every item, free or not.
    """
    free_items = []
    lead_time = None
    for item in items:
        rule = rules[item.product_id]
        eligibility = qualifies_free(rule, item.quantity)
        if eligibility.ok:
            free_items.append(FreeItem(
                product_id=item.product_id,
                quantity=item.quantity,
                reason=eligibility.reason,
            ))
        lead_time = merge_lead_times(lead_time, rule.lead_time_days)

    return CartShippingEvaluation(free_items=tuple(free_items), lead_time_days=lead_time)


def consolidate(postal_code: str, base: BaseQuote, evaluation: CartShippingEvaluation) -> Quote:
    lead_time = merge_lead_times(base.lead_time_days, evaluation.lead_time_days)

    if evaluation.product_free:
        return Quote(
            postal_code=postal_code,
            price=to_money(0),
            lead_time_days=lead_time,
            is_free=True,
            applied_rule=AppliedRule.PRODUCT_FREE,
            free_items=evaluation.free_items,
            zone=base.zone,
        )

    return Quote(
        postal_code=postal_code,
        price=to_money(base.price),
        lead_time_days=lead_time,
        is_free=base.is_free,
        applied_rule=base.source,
        free_items=(),
        zone=base.zone,
    )


class ShippingQuoteEngine:
    """
    Stateless quote resolver.

    Holds only its collaborators; safe to share across requests as long as
    the store is.
    """

    def __init__(self, store: ShippingRuleStore, resolver: LocationResolver):
        self.store = store
        self.resolver = resolver

    async def quote(self, postal_code: Any, items: Any) -> Quote:
        cep = require_postal_code(postal_code)
        cart = require_cart_items(items)

        rules = await fetch_rules(self.store, (item.product_id for item in cart))
        evaluation = evaluate_cart(cart, rules)

        location = await self.resolver.resolve_location(cep)
        if location is None:
            raise ShippingValidationError(
                f"Could not resolve location for postal code {cep}",
                field="postal_code",
            )

        base = await self._resolve_base(cep, location.state, location.city)
        quote = consolidate(cep, base, evaluation)

        logger.info(
            f"SHIPPING_QUOTE cep={cep} state={location.state} rule={quote.applied_rule.value} "
            f"price={quote.price} lead_time_days={quote.lead_time_days} "
            f"free_items={len(quote.free_items)}"
        )
        return quote

    async def _resolve_base(self, cep: str, state: str, city: str) -> BaseQuote:
        zones = await self.store.get_active_zones(state)
        base = resolve_zone(zones, state, city)
        if base is not None:
            return base

        ranges = await self.store.get_covering_ranges(cep)
        base = resolve_range(ranges, cep)
        if base is not None:
            return base

        logger.info(f"No shipping coverage for {cep} ({city}/{state})")
        raise ShippingNotFoundError(
            "No delivery coverage for this postal code",
            postal_code=cep,
        )
