"""
Input normalization for shipping quotes

Postal codes and cart items arrive from query strings, JSON bodies and
checkout payloads in several shapes. Everything is mapped to canonical
values here, once, before any rule is evaluated.
"""
import json
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Tuple

from app.core.exceptions import ShippingValidationError

POSTAL_CODE_LENGTH = 8

_NON_DIGITS = re.compile(r"\D")

# Accepted request keys per canonical cart item field, first match wins
CART_ITEM_ALIASES: Dict[str, Tuple[str, ...]] = {
    "product_id": ("id", "productId", "product_id", "produtoId"),
    "quantity": ("quantity", "qty", "quantidade"),
}


@dataclass(frozen=True)
class CartLineItem:
    """A cart line after normalization; both fields are > 0."""
    product_id: int
    quantity: int


def _digits(raw: Any) -> str:
    if raw is None:
        return ""
    return _NON_DIGITS.sub("", str(raw))


def normalize_postal_code(raw: Any) -> str:
    """
    Strip non-digits and keep the first 8.

    Raises ShippingValidationError unless exactly 8 digits remain.
    """
    postal_code = _digits(raw)[:POSTAL_CODE_LENGTH]
    if len(postal_code) != POSTAL_CODE_LENGTH:
        raise ShippingValidationError(
            "Invalid postal code. Provide 8 digits.",
            field="postal_code",
        )
    return postal_code


def require_postal_code(raw: Any) -> str:
    """
    Strict variant used at the quote boundary.

    Unlike normalize_postal_code, input carrying more than 8 digits is
    rejected instead of truncated.
    """
    if len(_digits(raw)) != POSTAL_CODE_LENGTH:
        raise ShippingValidationError(
            "Invalid postal code. Provide 8 digits.",
            field="postal_code",
        )
    return normalize_postal_code(raw)


def coerce_int(value: Any) -> Optional[int]:
    """Integer value of ints, integral floats and numeric strings, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        if not number.is_finite() or number != number.to_integral_value():
            return None
        return int(number)
    return None


def _pick(entry: Mapping[str, Any], aliases: Tuple[str, ...]) -> Any:
    for key in aliases:
        if entry.get(key) is not None:
            return entry[key]
    return None


def _parse_cart_payload(raw: Any) -> Optional[List[Any]]:
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    if not isinstance(raw, list):
        return None
    return raw


def normalize_cart_items(raw: Any) -> Optional[List[CartLineItem]]:
    """
    Normalize a cart given as a list of mappings or a JSON-encoded list.

    Entries whose id or quantity is missing, non-numeric or not positive are
    dropped. Returns None when nothing survives or the payload can't be
    parsed; callers decide how to report that.
    """
    entries = _parse_cart_payload(raw)
    if entries is None:
        return None

    normalized = []
    for entry in entries:
        if isinstance(entry, CartLineItem):
            entry = {"product_id": entry.product_id, "quantity": entry.quantity}
        if not isinstance(entry, Mapping):
            continue
        product_id = coerce_int(_pick(entry, CART_ITEM_ALIASES["product_id"]))
        quantity = coerce_int(_pick(entry, CART_ITEM_ALIASES["quantity"]))
        if product_id is None or quantity is None:
            continue
        if product_id <= 0 or quantity <= 0:
            continue
        normalized.append(CartLineItem(product_id=product_id, quantity=quantity))

    return normalized or None


def is_empty_cart(raw: Any) -> bool:
    """True when the payload parses to an empty list (or is absent)."""
    if raw is None or raw == "":
        return True
    entries = _parse_cart_payload(raw)
    return entries is not None and len(entries) == 0


def require_cart_items(raw: Any) -> List[CartLineItem]:
    """normalize_cart_items, turning None into a ShippingValidationError."""
    items = normalize_cart_items(raw)
    if items:
        return items
    if is_empty_cart(raw):
        raise ShippingValidationError("Cart is empty; nothing to quote.", field="items")
    if _parse_cart_payload(raw) is None:
        raise ShippingValidationError(
            "Malformed cart items: expected a JSON list of items.",
            field="items",
        )
    raise ShippingValidationError(
        "Invalid cart items: each item needs a positive product id and quantity.",
        field="items",
    )
