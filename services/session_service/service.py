from urllib.parse import quote

import structlog

from services.order_service.service import OrderService
from shared.config.settings import Settings
from shared.observability import paywall_session_exchanges_total

from .schemas import ExchangeResult

logger = structlog.get_logger(__name__)


class SessionService:
    """Turns a paid order into a browser session cookie plus a redirect."""

    def __init__(self, orders: OrderService, settings: Settings):
        self.orders = orders
        self.settings = settings

    def article_url(self, post_id: str) -> str:
        return f"{self.settings.site_url.rstrip('/')}/post/{quote(post_id, safe='')}"

    async def exchange(self, trade_no: str, post_id: str) -> ExchangeResult:
        # Matching on the pair stops a guessed trade_no from unlocking another item
        order = await self.orders.find_paid(trade_no, post_id)
        if order is None:
            paywall_session_exchanges_total.labels(result="failed").inc()
            logger.info("session_exchange_failed", trade_no=trade_no, post_id=post_id)
            return ExchangeResult(redirect_url=self.settings.failure_url)

        paywall_session_exchanges_total.labels(result="success").inc()
        logger.info("session_exchanged", trade_no=trade_no, post_id=post_id)
        return ExchangeResult(redirect_url=self.article_url(order.post_id), token=order.token)
