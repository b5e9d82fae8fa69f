"""
Checkout schemas

shipping_price, shipping_lead_time_days and shipping_rule_applied are
accepted on the request only so they can be overwritten server-side.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.services.shipping.inputs import CART_ITEM_ALIASES


class DeliveryType(str, Enum):
    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"


class LocalityType(str, Enum):
    URBAN = "URBAN"
    RURAL = "RURAL"


class CheckoutItem(BaseModel):
    product_id: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices(*CART_ITEM_ALIASES["product_id"]),
    )
    quantity: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices(*CART_ITEM_ALIASES["quantity"]),
    )


class CheckoutAddress(BaseModel):
    postal_code: Optional[str] = Field(None, max_length=20)
    street: Optional[str] = Field(None, max_length=200)
    number: Optional[str] = Field(None, max_length=20)
    complement: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=2)
    locality_type: LocalityType = LocalityType.URBAN
    no_number: bool = False
    reference: Optional[str] = Field(None, max_length=200)

    @field_validator("state")
    @classmethod
    def uppercase_state(cls, v):
        return v.strip().upper() if v else v


class CheckoutRequest(BaseModel):
    items: List[CheckoutItem] = Field(..., min_length=1)
    delivery_type: DeliveryType = DeliveryType.DELIVERY
    address: Optional[CheckoutAddress] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)

    # Client-supplied shipping figures; always replaced by the server quote
    shipping_price: Optional[float] = None
    shipping_lead_time_days: Optional[int] = None
    shipping_rule_applied: Optional[str] = None


class CheckoutItemResponse(BaseModel):
    product_id: Optional[int]
    product_name: str
    product_sku: Optional[str] = None
    price: float
    quantity: int


class CheckoutResponse(BaseModel):
    success: bool = True
    order_id: int
    order_number: str
    status: str
    delivery_type: DeliveryType
    subtotal: float
    shipping_price: float
    shipping_lead_time_days: Optional[int] = None
    shipping_rule_applied: Optional[str] = None
    total: float
    items: List[CheckoutItemResponse]
    created_at: Optional[datetime] = None
    invoice_notice: str
