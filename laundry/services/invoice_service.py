"""Invoice lookups needed by the order engine.

Invoice generation and rendering live in the billing module; the order
engine only needs to know whether an order has been invoiced.
"""
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from laundry.models.invoice import Invoice


class InvoiceService:
    """Read-only invoice checks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_for_order(self, order_id: int) -> int:
        """Number of invoices referencing the order (cancelled ones included)."""
        stmt = select(func.count(Invoice.id)).where(Invoice.order_id == order_id)
        return (await self.db.execute(stmt)).scalar() or 0

