from app.schemas.shipping import ShippingQuoteResponse, FreeItemResponse, ZoneInfoResponse
from app.schemas.checkout import (
    CheckoutRequest, CheckoutResponse, CheckoutItem, CheckoutAddress, DeliveryType, LocalityType,
)
