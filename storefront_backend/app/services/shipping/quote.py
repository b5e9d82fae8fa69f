"""
Shipping quote value objects

Quotes are rebuilt on every call and compared structurally, so every type
here is a frozen dataclass holding Decimal prices and tuples.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional, Tuple

CENTS = Decimal("0.01")


class AppliedRule(str, Enum):
    PRODUCT_FREE = "PRODUCT_FREE"
    ZONE = "ZONE"
    CEP_RANGE = "CEP_RANGE"


def to_money(value: Any) -> Decimal:
    """Quantize to cents, half-up."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ZoneInfo:
    id: int
    name: str
    state: str
    city: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "state": self.state, "city": self.city}


@dataclass(frozen=True)
class BaseQuote:
    """Price and lead time from a zone or range, before product overrides."""
    price: Decimal
    lead_time_days: Optional[int]
    is_free: bool
    source: AppliedRule
    zone: Optional[ZoneInfo] = None


@dataclass(frozen=True)
class FreeItem:
    product_id: int
    quantity: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"product_id": self.product_id, "quantity": self.quantity, "reason": self.reason}


@dataclass(frozen=True)
class Quote:
    postal_code: str
    price: Decimal
    lead_time_days: Optional[int]
    is_free: bool
    applied_rule: AppliedRule
    free_items: Tuple[FreeItem, ...] = field(default_factory=tuple)
    zone: Optional[ZoneInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "postal_code": self.postal_code,
            "price": float(self.price),
            "lead_time_days": self.lead_time_days,
            "is_free": self.is_free,
            "applied_rule": self.applied_rule.value,
            "free_items": [item.to_dict() for item in self.free_items],
            "zone": self.zone.to_dict() if self.zone else None,
        }
