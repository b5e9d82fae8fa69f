"""
Shipping quote preview

GET /api/shipping/quote?cep=01310100&items=[{"id":1,"quantity":2}]

Same engine as checkout, so the previewed price is the one charged.
ShippingValidationError / ShippingNotFoundError propagate to the
application's StorefrontError handler (400 / 404).
"""
import logging
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_quote_engine
from app.schemas.shipping import ShippingQuoteResponse
from app.services.shipping.engine import ShippingQuoteEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shipping", tags=["shipping"])


@router.get("/quote", response_model=ShippingQuoteResponse)
async def get_shipping_quote(
    cep: str = Query("", description="Destination postal code (8 digits, punctuation allowed)"),
    items: str = Query("", description='JSON list, e.g. [{"id": 1, "quantity": 2}]'),
    engine: ShippingQuoteEngine = Depends(get_quote_engine),
):
    quote = await engine.quote(cep, items)
    return ShippingQuoteResponse.from_quote(quote)
