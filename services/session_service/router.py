"""
Browser-facing: reached by navigation after payment, so every failure past
input validation is a redirect to the failure page, never an error body.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse

from services.order_service.router import get_order_service
from services.order_service.service import OrderService
from shared.config.settings import Settings
from shared.errors import InvalidInput
from shared.security import get_app_settings

from .service import SessionService

router = APIRouter(prefix="/sessions", tags=["Sessions"])


def get_session_service(
    orders: OrderService = Depends(get_order_service),
    settings: Settings = Depends(get_app_settings),
) -> SessionService:
    return SessionService(orders, settings)


@router.get("/exchange")
async def exchange_session(
    trade_no: Optional[str] = None,
    post: Optional[str] = Query(default=None),
    sessions: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_app_settings),
):
    trade_no = (trade_no or "").strip()
    post = (post or "").strip()
    if not trade_no or not post:
        raise InvalidInput("missing trade_no or post", field="trade_no" if not trade_no else "post")

    result = await sessions.exchange(trade_no, post)
    response = RedirectResponse(result.redirect_url, status_code=status.HTTP_302_FOUND)
    if result.succeeded:
        response.set_cookie(
            key=settings.paid_cookie_name,
            value=result.token,
            max_age=settings.cookie_max_age,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )
    return response
