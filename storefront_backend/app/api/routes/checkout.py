"""
Checkout API Routes

POST /api/checkout creates an order. The recalculate_shipping dependency
runs before the handler and replaces any client-sent shipping figures with
the quote engine's output, so the handler and the order service never see
unverified values.

Every checkout response carries invoice_notice, error bodies included
(CheckoutRoute).
"""
import logging
import time
from typing import Callable

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_quote_engine
from app.core.database import get_db
from app.core.error_handler import request_validation_error_handler, storefront_error_handler
from app.core.exceptions import StorefrontError
from app.schemas.checkout import CheckoutItemResponse, CheckoutRequest, CheckoutResponse
from app.services.checkout_service import INVOICE_NOTICE, apply_server_shipping
from app.services.order_service import OrderService
from app.services.shipping.engine import ShippingQuoteEngine

logger = logging.getLogger(__name__)


class CheckoutRoute(APIRoute):
    """Renders checkout validation and service errors with invoice_notice attached."""

    def get_route_handler(self) -> Callable:
        handler = super().get_route_handler()
        notice = {"invoice_notice": INVOICE_NOTICE}

        async def checkout_route_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except RequestValidationError as exc:
                return await request_validation_error_handler(request, exc, extra=notice)
            except StorefrontError as exc:
                return await storefront_error_handler(request, exc, extra=notice)

        return checkout_route_handler


router = APIRouter(prefix="/checkout", tags=["checkout"], route_class=CheckoutRoute)


async def recalculate_shipping(
    payload: CheckoutRequest,
    engine: ShippingQuoteEngine = Depends(get_quote_engine),
) -> CheckoutRequest:
    return await apply_server_shipping(payload, engine)


@router.post("", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
async def create_checkout(
    checkout: CheckoutRequest = Depends(recalculate_shipping),
    db: AsyncSession = Depends(get_db),
):
    started = time.monotonic()

    order, order_items = await OrderService.create_order(db, checkout)

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        f"CHECKOUT_METRIC order_id={order.id} order_number={order.order_number} "
        f"delivery={checkout.delivery_type.value} rule={checkout.shipping_rule_applied} "
        f"shipping={checkout.shipping_price} duration_ms={duration_ms}"
    )

    return CheckoutResponse(
        order_id=order.id,
        order_number=order.order_number,
        status=order.status,
        delivery_type=checkout.delivery_type,
        subtotal=float(order.subtotal),
        shipping_price=checkout.shipping_price,
        shipping_lead_time_days=checkout.shipping_lead_time_days,
        shipping_rule_applied=checkout.shipping_rule_applied,
        total=float(order.total),
        items=[
            CheckoutItemResponse(
                product_id=item.product_id,
                product_name=item.product_name,
                product_sku=item.product_sku,
                price=float(item.price),
                quantity=item.quantity,
            )
            for item in order_items
        ],
        created_at=order.created_at,
        invoice_notice=INVOICE_NOTICE,
    )
