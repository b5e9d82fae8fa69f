"""
Shipping quote schemas
"""
from typing import Optional, List
from pydantic import BaseModel, Field

from app.services.shipping.quote import Quote


class FreeItemResponse(BaseModel):
    product_id: int
    quantity: int
    reason: str = Field(..., description="ALWAYS or FROM_QTY_<n>")


class ZoneInfoResponse(BaseModel):
    id: int
    name: str
    state: str
    city: Optional[str] = None


class ShippingQuoteResponse(BaseModel):
    """Quote preview returned by GET /api/shipping/quote."""
    success: bool = True
    postal_code: str
    price: float
    lead_time_days: Optional[int] = None
    is_free: bool
    applied_rule: str = Field(..., description="PRODUCT_FREE, ZONE or CEP_RANGE")
    free_items: List[FreeItemResponse] = []
    zone: Optional[ZoneInfoResponse] = None

    @classmethod
    def from_quote(cls, quote: Quote) -> "ShippingQuoteResponse":
        return cls(**quote.to_dict())
