"""
Payment channel and polling endpoints.

/notify speaks plain text because that is what the payment channel expects
back; it is called by an untrusted party and only ever marks orders paid.
"""
from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from services.order_service.router import get_order_service
from services.order_service.service import OrderService
from shared.errors import InvalidInput

from .schemas import PaymentStatus
from .service import PaymentService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])

ACK = "OK"


async def read_notification_fields(request: Request) -> Dict[str, Any]:
    """Body fields (JSON or form) overlaid with query parameters."""
    fields: Dict[str, Any] = {}
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            fields.update(body)
    elif content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        fields.update(form)
    fields.update(request.query_params)
    return fields


@router.post("/notify", response_class=PlainTextResponse)
async def payment_notify(request: Request, orders: OrderService = Depends(get_order_service)):
    fields = await read_notification_fields(request)
    try:
        await PaymentService(orders).handle_notification(fields)
    except InvalidInput as e:
        return PlainTextResponse(e.message, status_code=400)
    except SQLAlchemyError as e:
        logger.error("notify_store_error", error=str(e))
        return PlainTextResponse("server error", status_code=500)
    return PlainTextResponse(ACK)


@router.get("/status", response_model=PaymentStatus, response_model_exclude_none=True)
async def payment_status(trade_no: Optional[str] = None, orders: OrderService = Depends(get_order_service)):
    if not trade_no or not trade_no.strip():
        raise InvalidInput("trade_no is required", field="trade_no")
    return await orders.query(trade_no.strip())
