"""
Per-product free shipping rules
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from app.core.exceptions import ShippingValidationError
from app.services.shipping.inputs import coerce_int

logger = logging.getLogger(__name__)

ALWAYS_FREE = "ALWAYS"


@dataclass(frozen=True)
class ProductShippingRule:
    product_id: int
    free_shipping: bool = False
    free_from_quantity: Optional[int] = None
    lead_time_days: Optional[int] = None


@dataclass(frozen=True)
class FreeShippingEligibility:
    ok: bool
    reason: Optional[str] = None


NOT_ELIGIBLE = FreeShippingEligibility(ok=False)


def optional_int(value: Any, field: str) -> Optional[int]:
    """
    Parse an optional integer column.

    None stays None; anything else that isn't integral is a data error and
    is reported as validation against the named field.
    """
    if value is None:
        return None
    parsed = coerce_int(value)
    if parsed is None:
        raise ShippingValidationError(
            f"Invalid numeric value for {field}: {value!r}",
            field=field,
        )
    return parsed


def qualifies_free(rule: ProductShippingRule, quantity: int) -> FreeShippingEligibility:
    if not rule.free_shipping:
        return NOT_ELIGIBLE

    threshold = rule.free_from_quantity
    # Non-positive thresholds are treated as "always free"
    if threshold is None or threshold <= 0:
        return FreeShippingEligibility(ok=True, reason=ALWAYS_FREE)

    if quantity >= threshold:
        return FreeShippingEligibility(ok=True, reason=f"FROM_QTY_{threshold}")

    return NOT_ELIGIBLE


async def fetch_rules(store, product_ids: Iterable[int]) -> Dict[int, ProductShippingRule]:
    """
    Batch-load shipping rules for the given products.

    Raises ShippingValidationError naming every id the store doesn't know.
    """
    requested = set(product_ids)
    rules = await store.get_product_rules(requested)

    missing = sorted(requested - set(rules))
    if missing:
        logger.warning(f"Shipping quote requested for unknown products: {missing}")
        raise ShippingValidationError(
            f"Products not found: {', '.join(str(pid) for pid in missing)}",
            field="items",
            details={"missing_ids": missing},
        )

    return rules
