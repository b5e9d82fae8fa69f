"""
Database engine and request-scoped sessions

Two kinds of work share the pool:
- shipping quotes: a handful of short read-only selects per request
  (product rules, zones, zone cities, postal code ranges)
- checkout: one write transaction that locks the cart's products, inserts
  the order with its shipping columns and decrements stock

Both run inside the session yielded by get_db, which commits once the
request succeeds and rolls back otherwise.
"""
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def build_pool_config() -> Dict[str, Any]:
    """Pool sizing per ENVIRONMENT, pre-ping on in all of them."""
    if settings.ENVIRONMENT == "production":
        return {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "pool_pre_ping": True,
        }
    # Local and test runs: a couple of connections is plenty
    return {
        "pool_size": 2,
        "max_overflow": 5,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **build_pool_config(),
)

# Committed orders stay readable for the checkout response
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """Request-scoped session: commit on success, rollback on any error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
