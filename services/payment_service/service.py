from typing import Any, Mapping

import structlog

from services.order_service.service import MarkPaidOutcome, OrderService
from shared.errors import InvalidInput
from shared.observability import paywall_payment_notifications_total

from .schemas import ResolvedNotification

logger = structlog.get_logger(__name__)


class PaymentService:
    """Entry point for the untrusted payment channel."""

    def __init__(self, orders: OrderService):
        self.orders = orders

    async def handle_notification(self, fields: Mapping[str, Any]) -> MarkPaidOutcome:
        try:
            notification = ResolvedNotification.from_fields(fields)
        except InvalidInput:
            paywall_payment_notifications_total.labels(outcome="rejected").inc()
            logger.warning("notification_missing_fields", fields=sorted(fields.keys()))
            raise

        outcome = await self.orders.mark_paid(notification)
        paywall_payment_notifications_total.labels(outcome=outcome.value).inc()
        return outcome
