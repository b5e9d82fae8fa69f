"""
Shipping rule models

Delivery zones (state, optionally narrowed to cities) and postal code ranges.
Written by the admin surface, read-only for the quote engine.
"""
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey,
    Index, UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class ShippingZone(Base):
    """
    Shipping rule scoped to a state.

    all_cities=True covers the whole state; otherwise only the cities listed
    in shipping_zone_cities.
    """
    __tablename__ = "shipping_zones"
    __table_args__ = (
        Index("ix_shipping_zones_state_active", "state", "is_active"),
        CheckConstraint("price >= 0", name="check_zone_price_non_negative"),
        CheckConstraint(
            "lead_time_days IS NULL OR lead_time_days >= 0",
            name="check_zone_lead_time_non_negative",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(160), nullable=False)
    state = Column(String(2), nullable=False)
    all_cities = Column(Boolean, default=False, nullable=False)
    is_free = Column(Boolean, default=False, nullable=False)
    price = Column(Numeric(10, 2), default=0, nullable=False)
    lead_time_days = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

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

    cities = relationship(
        "ShippingZoneCity",
        back_populates="zone",
        cascade="all, delete-orphan",
    )


class ShippingZoneCity(Base):
    __tablename__ = "shipping_zone_cities"
    __table_args__ = (
        UniqueConstraint("zone_id", "city", name="uq_shipping_zone_city"),
    )

    id = Column(Integer, primary_key=True, index=True)
    zone_id = Column(Integer, ForeignKey("shipping_zones.id", ondelete="CASCADE"), nullable=False, index=True)
    city = Column(String(160), nullable=False)

    zone = relationship("ShippingZone", back_populates="cities")


class ShippingCepRange(Base):
    """
    Fallback rule over a closed interval of 8-digit postal codes.

    Bounds are zero-padded strings, so lexicographic order equals numeric order.
    """
    __tablename__ = "shipping_cep_ranges"
    __table_args__ = (
        Index("ix_shipping_cep_ranges_bounds", "cep_start", "cep_end"),
        Index("ix_shipping_cep_ranges_active", "is_active"),
        CheckConstraint("cep_start <= cep_end", name="check_cep_range_ordered"),
        CheckConstraint("price >= 0", name="check_cep_range_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    cep_start = Column(String(8), nullable=False)
    cep_end = Column(String(8), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    lead_time_days = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

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
