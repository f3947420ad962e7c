"""Customer aggregate synchronizer.

customers.total_orders / customers.total_spent are a cache of the
orders table. They are recomputed from scratch (read-recompute-write),
never incremented, so status moves into or out of "cancelled" need no
separate bookkeeping and repeated refreshes are idempotent.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import logging

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from laundry.models.customer import Customer
from laundry.models.order import Order, OrderStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerStats:
    customer_id: int
    total_orders: int
    total_spent: Decimal


class CustomerStatsService:
    """Recompute and read customer order aggregates."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def refresh(self, customer_id: int) -> None:
        """
        Recompute total_orders and total_spent for a customer.

        Runs as a single UPDATE with correlated subqueries inside the
        caller's transaction; the caller commits or rolls back.
        """
        order_count = (
            select(func.count(Order.id))
            .where(*_counted_order_filters(customer_id))
            .scalar_subquery()
        )
        order_total = (
            select(func.coalesce(func.sum(Order.total_amount), 0))
            .where(*_counted_order_filters(customer_id))
            .scalar_subquery()
        )

        stmt = (
            update(Customer)
            .where(Customer.id == customer_id)
            .values(total_orders=order_count, total_spent=order_total)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(stmt)
        logger.debug(f"Refreshed order stats for customer {customer_id}")

    async def get_stats(self, customer_id: int) -> Optional[CustomerStats]:
        """Read the stored aggregates, None if the customer does not exist."""
        stmt = select(Customer.total_orders, Customer.total_spent).where(Customer.id == customer_id)
        row = (await self.db.execute(stmt)).first()
        if row is None:
            return None
        return CustomerStats(
            customer_id=customer_id,
            total_orders=row.total_orders or 0,
            total_spent=Decimal(str(row.total_spent or 0)),
        )


def _counted_order_filters(customer_id: int) -> tuple:
    """WHERE clauses selecting the orders that count towards the aggregates."""
    return (
        Order.customer_id == customer_id,
        Order.status != OrderStatus.CANCELLED.value,
    )
