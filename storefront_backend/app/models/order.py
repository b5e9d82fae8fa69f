"""
Order models

shipping_* columns hold the server-side quote recomputed at checkout; they
are never copied from the request body.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, JSON, Numeric, Index
from sqlalchemy.orm import relationship

from app.core.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)

    # Order details
    order_number = Column(String, unique=True, index=True, nullable=False)
    status = Column(String, default="pending", index=True)

    # Pricing - Numeric(12,2) for monetary values
    subtotal = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    # Delivery
    delivery_type = Column(String(16), nullable=False, default="DELIVERY")
    shipping_address = Column(JSON)
    shipping_price = Column(Numeric(10, 2), nullable=False, default=0)
    shipping_rule_applied = Column(String(32), nullable=True)
    shipping_lead_time_days = Column(Integer, nullable=True)
    shipping_postal_code = Column(String(8), nullable=True)

    # Payment
    payment_method = Column(String)

    notes = Column(Text)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    items = relationship("OrderItem", back_populates="order")

    __table_args__ = (
        Index('ix_orders_shipping_postal_code', 'shipping_postal_code'),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    # Snapshot of product at time of order
    product_name = Column(String(500), nullable=False)
    product_sku = Column(String(50))
    price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")
