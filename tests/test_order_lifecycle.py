"""OrderService against a real (SQLite) order store."""
import asyncio
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from services.order_service.models import STATUS_PAID, STATUS_PENDING, Order
from services.order_service.repository import OrderRepository
from services.order_service.service import MarkPaidOutcome, OrderService, new_trade_no
from services.payment_service.schemas import ResolvedNotification
from shared.errors import InvalidInput


@pytest.fixture
def orders(db_session, issuer):
    return OrderService(db_session, issuer)


async def reload(app, trade_no):
    async with app.state.db.sessionmaker() as session:
        return await OrderRepository.get_by_trade_no(session, trade_no)


def test_trade_no_shape():
    millis, suffix = new_trade_no().split("_")
    assert millis.isdigit()
    assert len(suffix) == 6


class TestCreate:
    async def test_creates_pending_order(self, app, orders):
        trade_no = await orders.create("p1")
        order = await reload(app, trade_no)

        assert order.status == STATUS_PENDING
        assert order.post_id == "p1"
        assert order.amount == 199
        assert order.token is None
        assert order.paid_at is None

    async def test_explicit_amount(self, app, orders):
        trade_no = await orders.create("p1", 5)
        assert (await reload(app, trade_no)).amount == 5

    @pytest.mark.parametrize("post_id", [None, "", "   "])
    async def test_post_id_required(self, orders, post_id):
        with pytest.raises(InvalidInput) as exc:
            await orders.create(post_id)
        assert exc.value.field == "post_id"

    async def test_trade_numbers_are_unique(self, orders):
        assert len({await orders.create("p1") for _ in range(20)}) == 20


class TestMarkPaid:
    async def test_pending_to_paid(self, app, orders, issuer):
        trade_no = await orders.create("p1")
        outcome = await orders.mark_paid(ResolvedNotification(trade_no=trade_no, post_id="p1"))

        order = await reload(app, trade_no)
        assert outcome is MarkPaidOutcome.TRANSITIONED
        assert order.status == STATUS_PAID
        assert order.paid_at is not None
        assert issuer.verify(order.token).post_id == "p1"

    async def test_idempotent(self, app, orders):
        trade_no = await orders.create("p1")
        notification = ResolvedNotification(trade_no=trade_no, post_id="p1")

        await orders.mark_paid(notification)
        first = await reload(app, trade_no)
        outcome = await orders.mark_paid(notification)
        second = await reload(app, trade_no)

        assert outcome is MarkPaidOutcome.ALREADY_PAID
        assert second.status == STATUS_PAID
        assert second.paid_at == first.paid_at
        assert second.token == first.token

    async def test_unseen_trade_no_creates_paid_order(self, app, orders, db_session):
        outcome = await orders.mark_paid(ResolvedNotification(trade_no="EXT-1", post_id="p2", amount=3))

        order = await reload(app, "EXT-1")
        assert outcome is MarkPaidOutcome.CREATED_PAID
        assert order.status == STATUS_PAID
        assert order.post_id == "p2"
        assert order.amount == 3
        assert order.token and order.paid_at

        status = await orders.query("EXT-1")
        assert status.paid is True
        assert status.post_id == "p2"

        # a redelivery does not create a second row
        await orders.mark_paid(ResolvedNotification(trade_no="EXT-1", post_id="p2"))
        count = await db_session.scalar(select(func.count()).select_from(Order).where(Order.trade_no == "EXT-1"))
        assert count == 1

    async def test_notified_post_id_cannot_retarget_order(self, app, orders, issuer):
        trade_no = await orders.create("p1", 199)
        await orders.mark_paid(ResolvedNotification(trade_no=trade_no, post_id="p2", amount=1))

        order = await reload(app, trade_no)
        assert order.post_id == "p1"
        assert order.amount == 199
        assert issuer.verify(order.token).post_id == "p1"


class TestQuery:
    async def test_unknown_is_unpaid(self, orders):
        status = await orders.query("does-not-exist")
        assert status.paid is False
        assert status.token is None

    async def test_pending_is_unpaid(self, orders):
        trade_no = await orders.create("p1")
        assert (await orders.query(trade_no)).paid is False

    async def test_paid_reports_token(self, orders):
        trade_no = await orders.create("p1")
        await orders.mark_paid(ResolvedNotification(trade_no=trade_no, post_id="p1"))

        status = await orders.query(trade_no)
        assert status.paid is True
        assert status.post_id == "p1"
        assert status.token


class TestFindPaid:
    async def test_requires_matching_pair(self, orders):
        trade_no = await orders.create("p1")
        await orders.mark_paid(ResolvedNotification(trade_no=trade_no, post_id="p1"))

        assert (await orders.find_paid(trade_no, "p1")) is not None
        assert (await orders.find_paid(trade_no, "p2")) is None

    async def test_pending_is_not_found(self, orders):
        trade_no = await orders.create("p1")
        assert (await orders.find_paid(trade_no, "p1")) is None


class TestConcurrentWrites:
    async def test_concurrent_notifications_for_unseen_trade_no(self, app, issuer):
        async def deliver():
            async with app.state.db.sessionmaker() as session:
                return await OrderService(session, issuer).mark_paid(
                    ResolvedNotification(trade_no="R1", post_id="p1")
                )

        outcomes = await asyncio.gather(*(deliver() for _ in range(5)))

        assert outcomes.count(MarkPaidOutcome.CREATED_PAID) == 1
        assert outcomes.count(MarkPaidOutcome.ALREADY_PAID) == 4
        async with app.state.db.sessionmaker() as session:
            count = await session.scalar(select(func.count()).select_from(Order).where(Order.trade_no == "R1"))
        assert count == 1

    async def test_insert_losing_to_existing_row_re_evaluates(self, app, orders, db_session):
        trade_no = await orders.create("p1")
        real_get = OrderRepository.get_by_trade_no
        lookups = []

        async def stale_first_lookup(db, key):
            lookups.append(key)
            # First lookup misses, as if the order was created right after it
            if len(lookups) == 1:
                return None
            return await real_get(db, key)

        with patch.object(OrderRepository, "get_by_trade_no", side_effect=stale_first_lookup):
            outcome = await orders.mark_paid(ResolvedNotification(trade_no=trade_no, post_id="p1"))

        assert outcome is MarkPaidOutcome.TRANSITIONED
        assert lookups == [trade_no, trade_no]
        order = await reload(app, trade_no)
        assert order.status == STATUS_PAID
        assert order.post_id == "p1"

    async def test_compare_and_set_lost_to_other_writer(self, app, issuer, orders):
        trade_no = await orders.create("p1")

        async with app.state.db.sessionmaker() as slow:
            slow_orders = OrderService(slow, issuer)
            # This session sees the order while it is still PENDING
            assert (await OrderRepository.get_by_trade_no(slow, trade_no)).status == STATUS_PENDING

            async with app.state.db.sessionmaker() as fast:
                first = await OrderService(fast, issuer).mark_paid(
                    ResolvedNotification(trade_no=trade_no, post_id="p1")
                )
            winner = await reload(app, trade_no)

            second = await slow_orders.mark_paid(ResolvedNotification(trade_no=trade_no, post_id="p1"))

        assert first is MarkPaidOutcome.TRANSITIONED
        assert second is MarkPaidOutcome.ALREADY_PAID
        final = await reload(app, trade_no)
        assert final.token == winner.token
        assert final.paid_at == winner.paid_at


class TestRepositoryMarkPaid:
    async def test_returns_false_for_paid_row(self, app, orders, db_session, issuer):
        trade_no = await orders.create("p1")
        now = datetime.now(timezone.utc)

        assert await OrderRepository.mark_paid(db_session, trade_no, issuer.issue("p1", trade_no), now) is True
        paid = await reload(app, trade_no)
        assert await OrderRepository.mark_paid(db_session, trade_no, "other-token", now) is False

        after = await reload(app, trade_no)
        assert after.token == paid.token

    async def test_returns_false_for_unknown_row(self, db_session):
        now = datetime.now(timezone.utc)
        assert await OrderRepository.mark_paid(db_session, "missing", "t", now) is False
