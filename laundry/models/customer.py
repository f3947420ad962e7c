from uuid import UUID, uuid4
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional, List

from sqlalchemy import String, Boolean, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from laundry.database import Base
from laundry.db_types import UUIDType, MoneyType

if TYPE_CHECKING:
    from laundry.models.order import Order


class CustomerType(str, Enum):
    """Customer rate type - selects which catalog rate applies."""
    REGULAR = "regular"
    PREMIUM = "premium"
    CORPORATE = "corporate"
    WHOLESALE = "wholesale"
    VIP = "vip"


class Customer(Base):
    """
    Customer record.

    total_orders / total_spent are a derived cache maintained by
    CustomerStatsService; the orders table is authoritative.
    """
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[UUID] = mapped_column(
        UUIDType,
        unique=True,
        nullable=False,
        default=uuid4
    )

    # Basic Info
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    mobile: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Address
    address_line1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address_line2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    pincode: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    customer_type: Mapped[str] = mapped_column(
        String(20),
        default=CustomerType.REGULAR.value,
        nullable=False,
        comment="regular, premium, corporate, wholesale, vip"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Aggregates (excluding cancelled orders)
    total_orders: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_spent: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0.00"),
        nullable=False
    )

    # Timestamps
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

    # Relationships
    orders: Mapped[List["Order"]] = relationship(
        "Order",
        back_populates="customer"
    )

    def __repr__(self) -> str:
        return f"<Customer(name='{self.name}', mobile='{self.mobile}')>"
