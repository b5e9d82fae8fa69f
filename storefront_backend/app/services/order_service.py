"""
OrderService - order creation for checkout

Prices come from the catalog, never from the request. Shipping fields are
taken from the already recomputed CheckoutRequest and stored in the same
transaction as the order; if that fails nothing is reported as created.
"""
import uuid
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from collections import defaultdict
from typing import Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import OrderPersistenceError, OrderValidationError
from app.models import Order, OrderItem, Product
from app.schemas.checkout import CheckoutRequest, DeliveryType

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_decimal(amount) -> Decimal:
    """Monetary value as a cent-quantized Decimal."""
    if amount is None:
        return Decimal("0.00")
    return Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)


class OrderService:
    """Centralized order creation service."""

    @staticmethod
    def generate_order_number() -> str:
        """Generate unique order number in format STF-YYYYMMDD-XXXXXXXX."""
        return f"STF-{datetime.now(timezone.utc).strftime('%Y%m%d')}-{uuid.uuid4().hex[:8].upper()}"

    @staticmethod
    async def load_products(db: AsyncSession, product_ids: List[int]) -> Dict[int, Product]:
        """Lock the cart's products FOR UPDATE until the order commits."""
        result = await db.execute(
            select(Product)
            .where(Product.id.in_(product_ids), Product.deleted_at.is_(None))
            .with_for_update()
        )
        products = {product.id: product for product in result.scalars().all()}

        missing = sorted(set(product_ids) - set(products))
        if missing:
            raise OrderValidationError(
                f"Products not found: {', '.join(str(pid) for pid in missing)}",
                details={"missing_ids": missing},
            )
        return products

    @staticmethod
    def check_stock(products: Dict[int, Product], payload: CheckoutRequest) -> Dict[int, int]:
        """
        Total requested quantity per product, raising OrderValidationError
        listing every product whose stock can't cover it.
        """
        requested: Dict[int, int] = defaultdict(int)
        for item in payload.items:
            requested[item.product_id] += item.quantity

        short = [
            {"product_id": pid, "requested": qty, "available": products[pid].stock or 0}
            for pid, qty in sorted(requested.items())
            if (products[pid].stock or 0) < qty
        ]
        if short:
            raise OrderValidationError(
                f"Insufficient stock for products: {', '.join(str(s['product_id']) for s in short)}",
                details={"insufficient_stock": short},
            )
        return dict(requested)

    @staticmethod
    async def create_order(db: AsyncSession, payload: CheckoutRequest) -> Tuple[Order, List[OrderItem]]:
        """
        Persist an order from a checkout request whose shipping fields were
        already set server-side.

        Raises:
            OrderValidationError: a cart product doesn't exist or is out of stock
            OrderPersistenceError: the order couldn't be written
        """
        products = await OrderService.load_products(db, [item.product_id for item in payload.items])
        requested = OrderService.check_stock(products, payload)

        subtotal = Decimal("0.00")
        for item in payload.items:
            subtotal += to_decimal(products[item.product_id].price) * item.quantity
        subtotal = to_decimal(subtotal)
        shipping_price = to_decimal(payload.shipping_price)

        is_delivery = payload.delivery_type == DeliveryType.DELIVERY
        order_number = OrderService.generate_order_number()

        try:
            order = Order(
                order_number=order_number,
                status="pending",
                subtotal=subtotal,
                total=subtotal + shipping_price,
                delivery_type=payload.delivery_type.value,
                shipping_address=payload.address.model_dump(mode="json") if is_delivery and payload.address else None,
                shipping_price=shipping_price,
                shipping_rule_applied=payload.shipping_rule_applied,
                shipping_lead_time_days=payload.shipping_lead_time_days,
                shipping_postal_code=payload.address.postal_code if is_delivery and payload.address else None,
                payment_method=payload.payment_method,
                notes=payload.notes,
            )
            db.add(order)
            await db.flush()

            order_items = []
            for item in payload.items:
                product = products[item.product_id]
                order_item = OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    product_name=product.name,
                    product_sku=product.sku,
                    price=to_decimal(product.price),
                    quantity=item.quantity,
                )
                db.add(order_item)
                order_items.append(order_item)

            for product_id, quantity in requested.items():
                product = products[product_id]
                product.stock = (product.stock or 0) - quantity

            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to persist order {order_number}: {type(e).__name__}: {e}")
            raise OrderPersistenceError(
                "Could not save order with shipping details",
                details={"order_number": order_number},
            ) from e

        logger.info(
            f"Order {order_number} created (delivery={payload.delivery_type.value}, "
            f"subtotal={subtotal}, shipping={shipping_price}, rule={payload.shipping_rule_applied})"
        )
        return order, order_items
