from uuid import UUID, uuid4
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from laundry.database import Base
from laundry.db_types import UUIDType, MoneyType


class Invoice(Base):
    """
    Invoice issued against an order.

    Generated and rendered by the billing side; the order engine only
    checks for existence before deleting an order.
    """
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[UUID] = mapped_column(UUIDType, unique=True, default=uuid4)
    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    invoice_number: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False
    )

    subtotal: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0.00"))
    discount_amount: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0.00"))
    total_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    pdf_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_cancelled: Mapped[bool] = mapped_column(Boolean, default=False)

    invoice_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Invoice(number='{self.invoice_number}')>"
