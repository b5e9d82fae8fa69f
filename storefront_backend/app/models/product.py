"""
Product model

Catalog data is owned by the admin surface; the shipping engine only reads
the shipping_* columns.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Numeric, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False, index=True)
    description = Column(Text)

    # Pricing - Numeric(12,2) for monetary values
    price = Column(Numeric(12, 2), nullable=False)

    # Inventory, checked and decremented by checkout
    stock = Column(Integer, default=0)

    # Shipping rules
    # shipping_free_from_qty: NULL means free for any quantity
    shipping_free = Column(Boolean, default=False, nullable=False)
    shipping_free_from_qty = Column(Integer, nullable=True)
    shipping_lead_time_days = Column(Integer, nullable=True)  # Own fulfillment time

    # Soft delete (preserves order FK references)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=func.now()
    )

    order_items = relationship("OrderItem", back_populates="product")

    __table_args__ = (
        Index("ix_products_active", id, postgresql_where=(deleted_at.is_(None))),
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
        CheckConstraint('price > 0', name='check_price_positive'),
        CheckConstraint(
            'shipping_lead_time_days IS NULL OR shipping_lead_time_days >= 0',
            name='check_product_lead_time_non_negative',
        ),
    )
