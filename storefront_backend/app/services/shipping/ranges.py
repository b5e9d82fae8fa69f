"""
Postal code range fallback

Bounds are zero-padded 8-digit strings, so plain string comparison matches
numeric order. When ranges overlap, the most recently created wins.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from app.services.shipping.quote import AppliedRule, BaseQuote, to_money


@dataclass(frozen=True)
class CepRange:
    id: int
    start: str
    end: str
    price: Decimal
    lead_time_days: Optional[int] = None
    is_active: bool = True

    def covers(self, postal_code: str) -> bool:
        return self.start <= postal_code <= self.end


def range_priority(cep_range: CepRange) -> int:
    """Sort key: newest (highest id) first."""
    return -cep_range.id


def select_range(ranges: Iterable[CepRange], postal_code: str) -> Optional[CepRange]:
    matches = sorted(
        (r for r in ranges if r.is_active and r.covers(postal_code)),
        key=range_priority,
    )
    return matches[0] if matches else None


def resolve_range(ranges: Iterable[CepRange], postal_code: str) -> Optional[BaseQuote]:
    cep_range = select_range(ranges, postal_code)
    if cep_range is None:
        return None

    price = to_money(cep_range.price)
    return BaseQuote(
        price=price,
        lead_time_days=cep_range.lead_time_days,
        is_free=price == 0,
        source=AppliedRule.CEP_RANGE,
    )
