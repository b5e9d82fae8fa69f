from app.models.product import Product
from app.models.order import Order, OrderItem
from app.models.shipping import ShippingZone, ShippingZoneCity, ShippingCepRange

__all__ = [
    "Product",
    "Order",
    "OrderItem",
    "ShippingZone",
    "ShippingZoneCity",
    "ShippingCepRange",
]
