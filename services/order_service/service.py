"""
Order lifecycle: PENDING --(mark_paid)--> PAID.

PAID is terminal. mark_paid is idempotent because the payment channel
redelivers notifications, and it accepts a notification for an order it has
never seen (the notification can race ahead of order creation): such an
order is created directly in PAID state.
"""
import secrets
import string
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence, Union

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from services.payment_service.schemas import PaymentStatus, ResolvedNotification
from shared.errors import InvalidInput
from shared.observability import paywall_orders_created_total
from shared.security.jwt_handler import CredentialIssuer

from .models import STATUS_PAID, STATUS_PENDING, Order
from .repository import OrderRepository

logger = structlog.get_logger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


class MarkPaidOutcome(str, Enum):
    CREATED_PAID = "created_paid"
    TRANSITIONED = "transitioned"
    ALREADY_PAID = "already_paid"


def new_trade_no() -> str:
    """Epoch millis plus a short random suffix, e.g. 1718000000000_k3x9qa."""
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{int(time.time() * 1000)}_{suffix}"


class OrderService:

    def __init__(self, db: AsyncSession, issuer: CredentialIssuer, default_amount: float = 199):
        self.db = db
        self.issuer = issuer
        self.default_amount = default_amount

    async def create(self, post_id: Optional[Union[str, int]], amount: Optional[float] = None) -> str:
        post_id = str(post_id).strip() if post_id is not None else ""
        if not post_id:
            raise InvalidInput("post_id is required", field="post_id")

        order = Order(
            trade_no=new_trade_no(),
            post_id=post_id,
            amount=self.default_amount if amount is None else amount,
            status=STATUS_PENDING,
        )
        await OrderRepository.insert(self.db, order)
        paywall_orders_created_total.inc()
        logger.info("order_created", trade_no=order.trade_no, post_id=post_id)
        return order.trade_no

    async def mark_paid(self, notification: ResolvedNotification) -> MarkPaidOutcome:
        order = await OrderRepository.get_by_trade_no(self.db, notification.trade_no)
        if order is None:
            try:
                return await self._insert_paid(notification)
            except IntegrityError:
                # Order creation or a duplicate notification won the race for this trade_no
                await self.db.rollback()
                order = await OrderRepository.get_by_trade_no(self.db, notification.trade_no)
                if order is None:
                    raise
        return await self._transition(order, notification)

    async def _insert_paid(self, notification: ResolvedNotification) -> MarkPaidOutcome:
        now = datetime.now(timezone.utc)
        order = Order(
            trade_no=notification.trade_no,
            post_id=notification.post_id,
            amount=notification.amount,
            status=STATUS_PAID,
            token=self.issuer.issue(notification.post_id, notification.trade_no, issued_at=now),
            paid_at=now,
        )
        await OrderRepository.insert(self.db, order)
        logger.info("order_created_paid", trade_no=order.trade_no, post_id=order.post_id)
        return MarkPaidOutcome.CREATED_PAID

    async def _transition(self, order: Order, notification: ResolvedNotification) -> MarkPaidOutcome:
        if order.status == STATUS_PAID:
            logger.info("order_already_paid", trade_no=order.trade_no)
            return MarkPaidOutcome.ALREADY_PAID

        if notification.post_id != order.post_id:
            logger.warning(
                "notification_post_mismatch",
                trade_no=order.trade_no,
                order_post_id=order.post_id,
                notified_post_id=notification.post_id,
            )
        if notification.amount is not None and notification.amount != order.amount:
            logger.warning(
                "notification_amount_mismatch",
                trade_no=order.trade_no,
                order_amount=order.amount,
                notified_amount=notification.amount,
            )

        # The credential always binds the item the order was created for
        now = datetime.now(timezone.utc)
        token = self.issuer.issue(order.post_id, order.trade_no, issued_at=now)
        if not await OrderRepository.mark_paid(self.db, order.trade_no, token, now):
            logger.info("order_paid_concurrently", trade_no=order.trade_no)
            return MarkPaidOutcome.ALREADY_PAID

        logger.info("order_paid", trade_no=order.trade_no, post_id=order.post_id)
        return MarkPaidOutcome.TRANSITIONED

    async def query(self, trade_no: str) -> PaymentStatus:
        order = await OrderRepository.get_by_trade_no(self.db, trade_no)
        if order is None or order.status != STATUS_PAID:
            return PaymentStatus(paid=False)
        return PaymentStatus(paid=True, token=order.token, post_id=order.post_id)

    async def find_paid(self, trade_no: str, post_id: str) -> Optional[Order]:
        """Paid order matching BOTH identifiers, else None."""
        order = await OrderRepository.get_by_trade_and_post(self.db, trade_no, post_id)
        if order is None or order.status != STATUS_PAID:
            return None
        return order

    async def list_recent(self, limit: int) -> Sequence[Order]:
        return await OrderRepository.list_recent(self.db, limit)
