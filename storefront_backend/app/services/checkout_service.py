"""
Checkout shipping trust boundary

Client-supplied shipping_price / shipping_lead_time_days /
shipping_rule_applied are never stored as sent. apply_server_shipping
re-runs the quote engine and returns a copy of the request carrying the
server figures; the order service only ever sees that copy.
"""
import logging
from typing import List

from app.core.exceptions import OrderValidationError
from app.schemas.checkout import (
    CheckoutAddress, CheckoutRequest, DeliveryType, LocalityType,
)
from app.services.shipping.engine import ShippingQuoteEngine
from app.services.shipping.inputs import CartLineItem, require_postal_code

logger = logging.getLogger(__name__)

PICKUP_RULE = "PICKUP"
NO_NUMBER = "S/N"
INVOICE_NOTICE = "Invoice will be delivered with the product."

_REQUIRED_FIELDS = ("postal_code", "city", "state")
_URBAN_REQUIRED_FIELDS = ("street", "district", "number")


def validate_delivery_address(address: CheckoutAddress) -> CheckoutAddress:
    """
    Check a delivery address and return a normalized copy.

    Missing fields are reported together. Urban addresses need street,
    district and number; no_number=True stands in for the number as "S/N".
    """
    if address is None:
        raise OrderValidationError(
            "Delivery address is required",
            fields=["address"],
        )

    updates = {}
    if address.no_number:
        updates["number"] = NO_NUMBER

    required = list(_REQUIRED_FIELDS)
    if address.locality_type == LocalityType.URBAN:
        required.extend(_URBAN_REQUIRED_FIELDS)

    missing: List[str] = []
    for field in required:
        value = updates.get(field, getattr(address, field))
        if value is None or not str(value).strip():
            missing.append(field)

    if missing:
        raise OrderValidationError(
            f"Missing address fields: {', '.join(missing)}",
            fields=missing,
        )

    # Same strictness as the quote preview: more than 8 digits is rejected
    updates["postal_code"] = require_postal_code(address.postal_code)
    return address.model_copy(update=updates)


def _log_client_mismatch(payload: CheckoutRequest, server: dict):
    sent = {
        "shipping_price": payload.shipping_price,
        "shipping_lead_time_days": payload.shipping_lead_time_days,
        "shipping_rule_applied": payload.shipping_rule_applied,
    }
    if all(v is None for v in sent.values()):
        return
    if sent != server:
        logger.warning(f"Client shipping fields overridden: sent={sent} server={server}")


async def apply_server_shipping(payload: CheckoutRequest, engine: ShippingQuoteEngine) -> CheckoutRequest:
    """Return the checkout request with shipping fields recomputed server-side."""
    if payload.delivery_type == DeliveryType.PICKUP:
        server = {
            "shipping_price": 0.0,
            "shipping_lead_time_days": None,
            "shipping_rule_applied": PICKUP_RULE,
        }
        _log_client_mismatch(payload, server)
        return payload.model_copy(update=server)

    address = validate_delivery_address(payload.address)
    cart = [CartLineItem(product_id=i.product_id, quantity=i.quantity) for i in payload.items]
    quote = await engine.quote(address.postal_code, cart)

    server = {
        "shipping_price": float(quote.price),
        "shipping_lead_time_days": quote.lead_time_days,
        "shipping_rule_applied": quote.applied_rule.value,
    }
    _log_client_mismatch(payload, server)
    return payload.model_copy(update={**server, "address": address})
