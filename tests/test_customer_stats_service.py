"""
Customer aggregate refresh (total_orders / total_spent).
"""

from decimal import Decimal

from laundry.models.order import OrderStatus
from laundry.services.customer_stats_service import CustomerStatsService
from laundry.services.order_service import OrderService

from conftest import make_order_create


class TestRefresh:

    async def test_new_customer_has_zero_stats(self, db, seed):
        stats = await CustomerStatsService(db).get_stats(seed.customer_id)

        assert stats.total_orders == 0
        assert stats.total_spent == Decimal("0")

    async def test_unknown_customer_returns_none(self, db, seed):
        assert await CustomerStatsService(db).get_stats(99999) is None

    async def test_reflects_created_orders(self, db, seed, settings):
        service = OrderService(db, settings)
        await service.create_order(make_order_create(seed))
        await service.create_order(make_order_create(seed, advance_paid=Decimal("0")))

        stats = await CustomerStatsService(db).get_stats(seed.customer_id)
        assert stats.total_orders == 2
        assert stats.total_spent == Decimal("472.50")

    async def test_refresh_is_idempotent(self, db, seed, settings):
        await OrderService(db, settings).create_order(make_order_create(seed))

        stats_service = CustomerStatsService(db)
        await stats_service.refresh(seed.customer_id)
        first = await stats_service.get_stats(seed.customer_id)
        await stats_service.refresh(seed.customer_id)
        await stats_service.refresh(seed.customer_id)
        second = await stats_service.get_stats(seed.customer_id)
        await db.commit()

        assert first == second
        assert second.total_orders == 1
        assert second.total_spent == Decimal("236.25")

    async def test_cancelled_orders_excluded(self, db, seed, settings):
        service = OrderService(db, settings)
        kept = await service.create_order(make_order_create(seed))
        cancelled = await service.create_order(make_order_create(seed))

        await service.update_order_status(cancelled.id, OrderStatus.CANCELLED)

        stats = await CustomerStatsService(db).get_stats(seed.customer_id)
        assert stats.total_orders == 1
        assert stats.total_spent == kept.total_amount

    async def test_reopened_order_counted_again(self, db, seed, settings):
        service = OrderService(db, settings)
        order = await service.create_order(make_order_create(seed))
        await service.update_order_status(order.id, OrderStatus.CANCELLED)
        await service.update_order_status(order.id, OrderStatus.PENDING)

        stats = await CustomerStatsService(db).get_stats(seed.customer_id)
        assert stats.total_orders == 1
        assert stats.total_spent == Decimal("236.25")

    async def test_other_customers_untouched(self, db, seed, settings):
        await OrderService(db, settings).create_order(make_order_create(seed))

        stats = await CustomerStatsService(db).get_stats(seed.other_customer_id)
        assert stats.total_orders == 0
        assert stats.total_spent == Decimal("0")
