from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import STATUS_PAID, STATUS_PENDING, Order


class OrderRepository:

    @staticmethod
    async def insert(db: AsyncSession, order: Order) -> Order:
        """Insert one order. Raises IntegrityError if trade_no already exists."""
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order

    @staticmethod
    async def get_by_trade_no(db: AsyncSession, trade_no: str) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.trade_no == trade_no))
        return result.scalars().first()

    @staticmethod
    async def get_by_trade_and_post(db: AsyncSession, trade_no: str, post_id: str) -> Optional[Order]:
        result = await db.execute(
            select(Order)
            .where(Order.trade_no == trade_no)
            .where(Order.post_id == post_id)
        )
        return result.scalars().first()

    @staticmethod
    async def mark_paid(db: AsyncSession, trade_no: str, token: str, paid_at: datetime) -> bool:
        """
        Compare-and-set PENDING -> PAID for one trade_no.
        Returns False when no PENDING row matched (absent, or another writer won).
        """
        stmt = (
            update(Order)
            .where(Order.trade_no == trade_no)
            .where(Order.status == STATUS_PENDING)
            .values(status=STATUS_PAID, token=token, paid_at=paid_at)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount == 1

    @staticmethod
    async def list_recent(db: AsyncSession, limit: int) -> Sequence[Order]:
        result = await db.execute(select(Order).order_by(Order.id.desc()).limit(limit))
        return result.scalars().all()
