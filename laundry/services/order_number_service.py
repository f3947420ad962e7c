"""
Order Number Service for Atomic Order Number Generation

FORMAT:
    {PREFIX}{YYYY}{MM}{SEQUENCE}  →  ORD2026100001

The sequence restarts every calendar month. Numbers come from a locked
per-month counter row (see laundry.models.order_sequence) that is
incremented in the same transaction as the order insert, so concurrent
creators in one month can never read the same value. orders.order_number
is also unique; OrderService retries the whole create on a collision.

USAGE:
    from laundry.services.order_number_service import OrderNumberService

    async def create(db: AsyncSession):
        service = OrderNumberService(db)
        order_number = await service.get_next_number()
        # Returns: ORD2026100001
"""

from datetime import datetime
from typing import Optional
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from laundry.models.order import Order
from laundry.models.order_sequence import OrderSequence


logger = logging.getLogger(__name__)


class OrderNumberService:
    """
    Service for generating unique monthly order numbers.

    Uses database-level locking (SELECT FOR UPDATE) to ensure
    no duplicate numbers are generated even under concurrent load.
    """

    def __init__(
        self,
        db: AsyncSession,
        prefix: str = "ORD",
        padding: int = 4,
    ):
        self.db = db
        self.prefix = prefix
        self.padding = padding

    async def get_next_number(self, now: Optional[datetime] = None) -> str:
        """
        Get next order number with atomic increment.

        Locks the month's counter row until the caller's transaction
        ends. Creates the row on the first order of a month.

        Args:
            now: Timestamp deciding the month. Defaults to current UTC time.

        Returns:
            Formatted order number, e.g. ORD2026100001
        """
        period = OrderSequence.get_period(now)
        sequence = await self._get_or_create_sequence(period)

        order_number = sequence.get_next_number()

        # Skip numbers already held by orders written outside the counter
        while await self._number_exists(order_number):
            logger.warning(f"Order number {order_number} already in use, skipping")
            order_number = sequence.get_next_number()

        # Persist the increment; the lock is released at commit/rollback
        await self.db.flush()

        logger.debug(f"Allocated order number {order_number}")
        return order_number

    async def preview_next_number(self, now: Optional[datetime] = None) -> str:
        """
        Preview what the next number would be without incrementing.
        """
        period = OrderSequence.get_period(now)

        result = await self.db.execute(
            select(OrderSequence)
            .where(
                OrderSequence.prefix == self.prefix,
                OrderSequence.period == period,
            )
        )
        sequence = result.scalar_one_or_none()

        if sequence:
            return sequence.preview_next_number()

        # No counter yet - next number follows the orders already on file
        existing = await self._count_existing_orders(period)
        return f"{self.prefix}{period}{str(existing + 1).zfill(self.padding)}"

    async def get_current_number(self, now: Optional[datetime] = None) -> int:
        """
        Get the current (last used) sequence number, 0 if none this month.
        """
        period = OrderSequence.get_period(now)
        result = await self.db.execute(
            select(OrderSequence.current_number)
            .where(
                OrderSequence.prefix == self.prefix,
                OrderSequence.period == period,
            )
        )
        current = result.scalar_one_or_none()
        return current or 0

    async def _count_existing_orders(self, period: str) -> int:
        """Count orders already numbered in this period."""
        stmt = select(func.count(Order.id)).where(
            Order.order_number.like(f"{self.prefix}{period}%")
        )
        return (await self.db.execute(stmt)).scalar() or 0

    async def _number_exists(self, order_number: str) -> bool:
        stmt = select(Order.id).where(Order.order_number == order_number).limit(1)
        return (await self.db.execute(stmt)).first() is not None

    async def _get_or_create_sequence(self, period: str) -> OrderSequence:
        """
        Get existing counter row with row lock, or create a new one.

        A new row is seeded with the number of orders already carrying
        this month's prefix, so orders created before the counter existed
        are never renumbered. If two transactions create the same month's
        row, uq_order_sequences_period rejects one of them.
        """
        result = await self.db.execute(
            select(OrderSequence)
            .where(
                OrderSequence.prefix == self.prefix,
                OrderSequence.period == period,
            )
            .with_for_update()
        )
        sequence = result.scalar_one_or_none()

        if sequence:
            return sequence

        sequence = OrderSequence(
            prefix=self.prefix,
            period=period,
            current_number=await self._count_existing_orders(period),
            padding_length=self.padding,
        )
        self.db.add(sequence)
        await self.db.flush()

        # Re-fetch with lock to ensure atomicity
        result = await self.db.execute(
            select(OrderSequence)
            .where(OrderSequence.id == sequence.id)
            .with_for_update()
        )
        return result.scalar_one()
