"""
Delivery zone resolution

A zone covers a whole state (all_cities=True) or a set of cities within it.
Selection order is explicit in zone_priority:

1. city-specific zones before state-wide ones
2. within each group, the most recently created zone first (highest id)

The first city-specific zone listing the requested city wins; otherwise the
first state-wide zone; otherwise there is no zone and the caller falls back
to postal code ranges.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import FrozenSet, Iterable, Optional, Tuple

from app.services.shipping.quote import AppliedRule, BaseQuote, ZoneInfo, to_money


@dataclass(frozen=True)
class DeliveryZone:
    id: int
    name: str
    state: str
    all_cities: bool = False
    cities: FrozenSet[str] = field(default_factory=frozenset)
    is_free: bool = False
    price: Decimal = Decimal("0")
    lead_time_days: Optional[int] = None
    is_active: bool = True


def normalize_city(city: Optional[str]) -> str:
    return (city or "").strip().lower()


def zone_priority(zone: DeliveryZone) -> Tuple[bool, int]:
    """Sort key: city-specific (False) before state-wide, newer before older."""
    return (zone.all_cities, -zone.id)


def _serves_city(zone: DeliveryZone, city: str) -> bool:
    return any(normalize_city(candidate) == city for candidate in zone.cities)


def select_zone(zones: Iterable[DeliveryZone], state: str, city: Optional[str]) -> Optional[DeliveryZone]:
    state = (state or "").strip().upper()
    wanted_city = normalize_city(city)

    candidates = sorted(
        (z for z in zones if z.is_active and z.state.upper() == state),
        key=zone_priority,
    )

    for zone in candidates:
        if zone.all_cities:
            # Sorted order guarantees no city-specific zone remains
            return zone
        if wanted_city and _serves_city(zone, wanted_city):
            return zone

    return None


def resolve_zone(zones: Iterable[DeliveryZone], state: str, city: Optional[str]) -> Optional[BaseQuote]:
    """Base quote from the winning zone, or None when no zone applies."""
    zone = select_zone(zones, state, city)
    if zone is None:
        return None

    return BaseQuote(
        price=to_money(0 if zone.is_free else zone.price),
        lead_time_days=zone.lead_time_days,
        is_free=zone.is_free,
        source=AppliedRule.ZONE,
        zone=ZoneInfo(id=zone.id, name=zone.name, state=zone.state, city=city),
    )
