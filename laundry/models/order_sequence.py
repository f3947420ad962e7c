"""
Order Sequence Model for Atomic Order Number Generation

NUMBERING:
━━━━━━━━━━
• One counter row per calendar month (period = YYYYMM)
• Sequence restarts at 0001 every month
• Format: {PREFIX}{YYYY}{MM}{SEQUENCE}, e.g. ORD2026100042

CONCURRENCY:
━━━━━━━━━━━━
• The row is read with SELECT ... FOR UPDATE and incremented inside the
  same transaction that inserts the order, so two writers in the same
  month queue on the row lock instead of reading the same count.
• uq_order_sequences_period stops two transactions from both creating
  the first row of a month; the loser gets an IntegrityError and retries.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Integer, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from laundry.database import Base


class OrderSequence(Base):
    """
    Monthly order number counter.

    Example:
        prefix = "ORD"
        period = "202610"
        current_number = 41
        → Next order number: ORD2026100042
    """
    __tablename__ = "order_sequences"
    __table_args__ = (
        UniqueConstraint("prefix", "period", name="uq_order_sequences_period"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    prefix: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="ORD"
    )
    period: Mapped[str] = mapped_column(
        String(6),
        nullable=False,
        comment="YYYYMM"
    )
    current_number: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Last used sequence number"
    )
    padding_length: Mapped[int] = mapped_column(
        Integer,
        default=4,
        nullable=False,
        comment="Zero padding for sequence (4 = 0001)"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def format_number(self, number: int) -> str:
        return f"{self.prefix}{self.period}{str(number).zfill(self.padding_length)}"

    def get_next_number(self) -> str:
        """
        Generate next order number.

        NOTE: This method increments current_number but does NOT
        commit to database. The caller must handle the transaction.
        """
        self.current_number += 1
        return self.format_number(self.current_number)

    def preview_next_number(self) -> str:
        """Preview next number without incrementing."""
        return self.format_number(self.current_number + 1)

    @staticmethod
    def get_period(now: Optional[datetime] = None) -> str:
        """
        Get the YYYYMM period string for a timestamp.

        - 19 Oct 2026 → "202610"
        """
        now = now or datetime.now(timezone.utc)
        return f"{now.year:04d}{now.month:02d}"

    def __repr__(self) -> str:
        return f"<OrderSequence({self.prefix}{self.period}: {self.current_number})>"
