"""
Error handling and sanitization

- Request schema errors → 400 VALIDATION_ERROR with per-field messages
- StorefrontError subclasses → JSON body with code/message/details and the
  status the exception declares (VALIDATION → 400, NOT_FOUND → 404)
- Anything else → logged with traceback, generic 500 without internals
"""
import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.exceptions import StorefrontError, VALIDATION_ERROR

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


async def storefront_error_handler(
    request: Request,
    exc: StorefrontError,
    extra: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Render expected, user-facing errors raised by services.

    extra: additional top-level body fields a route always returns.
    """
    extra = extra or {}
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.to_dict()}")
        message = exc.message if settings.DEBUG else GENERIC_ERROR_MESSAGE
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": message, "details": {}, **extra},
        )

    logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message, "details": exc.details, **extra},
    )


async def request_validation_error_handler(
    request: Request,
    exc: RequestValidationError,
    extra: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Schema errors on request bodies and query strings share the 400 VALIDATION_ERROR shape."""
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    logger.info(f"{VALIDATION_ERROR} on {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={
            "code": VALIDATION_ERROR,
            "message": "Invalid request payload",
            "details": {"errors": errors},
            **(extra or {}),
        },
    )


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to catch unhandled exceptions and sanitize error responses.

    - In production: Returns generic error, logs full details
    - In development: Returns full error for debugging
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except HTTPException:
            # Let FastAPI handle HTTPExceptions normally
            raise
        except Exception as e:
            error_id = f"{request.client.host if request.client else 'unknown'}-{id(e)}"
            logger.error(
                f"Unhandled exception [{error_id}]: {type(e).__name__}: {str(e)}\n"
                f"Path: {request.url.path}\n"
                f"Method: {request.method}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )

            if settings.DEBUG:
                return JSONResponse(
                    status_code=500,
                    content={
                        "error": "internal_error",
                        "message": str(e),
                        "type": type(e).__name__,
                        "error_id": error_id,
                    }
                )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "internal_error",
                    "message": GENERIC_ERROR_MESSAGE,
                    "error_id": error_id,
                }
            )
