"""
Monthly order number allocation.
"""

import re
from datetime import datetime, timezone

from laundry.services.order_number_service import OrderNumberService

from conftest import current_period, insert_raw_order


MARCH = datetime(2026, 3, 14, 10, 30, tzinfo=timezone.utc)
APRIL = datetime(2026, 4, 1, 0, 5, tzinfo=timezone.utc)


class TestFormat:

    async def test_first_number_of_month(self, db):
        service = OrderNumberService(db)
        number = await service.get_next_number(MARCH)
        await db.commit()

        assert number == "ORD2026030001"

    async def test_current_month_format(self, db):
        number = await OrderNumberService(db).get_next_number()
        await db.commit()

        assert re.fullmatch(r"ORD\d{6}\d{4}", number)
        assert number.startswith(f"ORD{current_period()}")

    async def test_custom_prefix_and_padding(self, db):
        service = OrderNumberService(db, prefix="LND", padding=6)
        assert await service.get_next_number(MARCH) == "LND202603000001"


class TestSequence:

    async def test_increments_within_month(self, db):
        service = OrderNumberService(db)
        first = await service.get_next_number(MARCH)
        second = await service.get_next_number(MARCH)
        await db.commit()

        assert (first, second) == ("ORD2026030001", "ORD2026030002")
        assert await service.get_current_number(MARCH) == 2

    async def test_resets_each_month(self, db):
        service = OrderNumberService(db)
        await service.get_next_number(MARCH)
        await service.get_next_number(MARCH)
        april = await service.get_next_number(APRIL)
        await db.commit()

        assert april == "ORD2026040001"

    async def test_preview_does_not_increment(self, db):
        service = OrderNumberService(db)
        assert await service.preview_next_number(MARCH) == "ORD2026030001"

        await service.get_next_number(MARCH)
        assert await service.preview_next_number(MARCH) == "ORD2026030002"
        assert await service.preview_next_number(MARCH) == "ORD2026030002"
        assert await service.get_current_number(MARCH) == 1

    async def test_current_number_zero_without_counter(self, db):
        assert await OrderNumberService(db).get_current_number(MARCH) == 0

    async def test_rollback_releases_number(self, session_factory):
        async with session_factory() as session:
            await OrderNumberService(session).get_next_number(MARCH)
            await session.rollback()

        async with session_factory() as session:
            assert await OrderNumberService(session).get_next_number(MARCH) == "ORD2026030001"


class TestExistingOrders:

    async def test_counter_seeded_from_existing_orders(self, session_factory, seed):
        for n in range(1, 4):
            await insert_raw_order(session_factory, seed.customer_id, f"ORD202603{n:04d}")

        async with session_factory() as session:
            service = OrderNumberService(session)
            assert await service.preview_next_number(MARCH) == "ORD2026030004"
            assert await service.get_next_number(MARCH) == "ORD2026030004"
            await session.commit()

    async def test_other_months_not_counted(self, session_factory, seed):
        await insert_raw_order(session_factory, seed.customer_id, "ORD2026020001")

        async with session_factory() as session:
            assert await OrderNumberService(session).get_next_number(MARCH) == "ORD2026030001"

    async def test_skips_number_taken_outside_counter(self, session_factory, seed):
        async with session_factory() as session:
            await OrderNumberService(session).get_next_number(MARCH)
            await session.commit()

        await insert_raw_order(session_factory, seed.customer_id, "ORD2026030002")

        async with session_factory() as session:
            service = OrderNumberService(session)
            assert await service.get_next_number(MARCH) == "ORD2026030003"
            await session.commit()
            assert await service.get_current_number(MARCH) == 3
