from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import Settings
from shared.security import ORDER_CREATE_LIMIT, get_issuer, get_app_settings, limiter
from shared.security.jwt_handler import CredentialIssuer

from .schemas import OrderCreate, OrderCreated
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_order_service(
    db: AsyncSession = Depends(get_db),
    issuer: CredentialIssuer = Depends(get_issuer),
    settings: Settings = Depends(get_app_settings),
) -> OrderService:
    return OrderService(db, issuer, default_amount=settings.default_amount)


@router.post("", response_model=OrderCreated)
@limiter.limit(ORDER_CREATE_LIMIT)
async def create_order(
    request: Request,  # REQUIRED: slowapi needs this to key the limit
    payload: OrderCreate,
    orders: OrderService = Depends(get_order_service),
):
    trade_no = await orders.create(payload.post_id, payload.amount)
    return OrderCreated(trade_no=trade_no)
