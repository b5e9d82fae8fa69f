"""
Storefront Backend
FastAPI application entry point

- Shipping quote preview and checkout with server-side shipping
- Structured StorefrontError responses (400 / 404 / 500)
- Error sanitization middleware for unhandled exceptions
- Health endpoint with DB ping
- HTTP client lifecycle management (geocoding client closed on shutdown)
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from sqlalchemy import text

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.core.error_handler import (
    ErrorSanitizationMiddleware,
    request_validation_error_handler,
    storefront_error_handler,
)
from app.core.exceptions import StorefrontError
from app.api.deps import close_location_resolver
from app.api.routes import checkout, shipping

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.APP_NAME} starting (environment={settings.ENVIRONMENT})")

    yield

    # Close HTTP clients to prevent connection leaks
    await close_location_resolver()
    logger.info("Geocoding HTTP client closed")


app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="Storefront API: shipping quotes and checkout",
    version="1.0.0",
)

app.add_exception_handler(StorefrontError, storefront_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)

# Error sanitization (catches unhandled exceptions)
app.add_middleware(ErrorSanitizationMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(shipping.router, prefix="/api", tags=["Shipping"])
app.include_router(checkout.router, prefix="/api", tags=["Checkout"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check with DB ping. Returns 503 if the database is unreachable."""
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        health_status["database"] = f"error: {type(e).__name__}: {str(e)[:100]}"
        health_status["status"] = "unhealthy"
        return JSONResponse(status_code=503, content=health_status)

    return health_status
