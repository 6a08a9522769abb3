"""
Operator-only read projection over recent orders. Tokens are never listed.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends

from services.order_service.router import get_order_service
from services.order_service.schemas import OrderSummary
from services.order_service.service import OrderService
from shared.config.settings import Settings
from shared.security import get_app_settings, verify_admin_api_key

# THIS PROTECTS THE ENTIRE ROUTER
router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(verify_admin_api_key)])


@router.get("/orders", response_model=List[OrderSummary])
async def list_orders(
    limit: Optional[int] = None,
    orders: OrderService = Depends(get_order_service),
    settings: Settings = Depends(get_app_settings),
):
    cap = settings.admin_list_limit
    limit = cap if limit is None else max(1, min(limit, cap))
    return await orders.list_recent(limit)
