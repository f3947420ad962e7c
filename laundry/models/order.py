from uuid import UUID, uuid4
from datetime import datetime, date, time, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional, List
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, ForeignKey, Integer, Text, Time, Index, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from laundry.database import Base
from laundry.db_types import UUIDType, MoneyType, PercentType

if TYPE_CHECKING:
    from laundry.models.customer import Customer


class OrderStatus(str, Enum):
    """Order status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderPriority(str, Enum):
    """Order priority enumeration."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class PaymentStatus(str, Enum):
    """Payment status derived from total_amount and advance_paid."""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class Order(Base):
    """
    Laundry order.

    Financial fields are derived from the items by the pricing calculator
    and are only written by OrderService:
        discount_amount  = subtotal * discount_percentage / 100
        tax_amount       = (subtotal - discount_amount) * tax_percentage / 100
        total_amount     = subtotal - discount_amount + tax_amount
        remaining_amount = total_amount - advance_paid  (signed)
    """
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("order_number", name="uq_orders_order_number"),
        Index('ix_order_status_created', 'status', 'created_at'),
        Index('ix_order_customer_status', 'customer_id', 'status'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[UUID] = mapped_column(
        UUIDType,
        unique=True,
        nullable=False,
        default=uuid4
    )

    # Order Identification: ORD + YYYY + MM + 4-digit monthly sequence
    order_number: Mapped[str] = mapped_column(String(30), nullable=False)

    # Customer
    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False
    )

    # Schedule
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    due_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    pickup_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    delivery_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        nullable=False,
        index=True,
        comment="pending, in_progress, completed, delivered, cancelled"
    )
    priority: Mapped[str] = mapped_column(
        String(20),
        default="normal",
        nullable=False,
        comment="low, normal, high, urgent"
    )

    # Pricing
    total_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="Sum of item amounts before discount and tax"
    )
    discount_percentage: Mapped[Decimal] = mapped_column(
        PercentType,
        default=Decimal("0.00"),
        nullable=False
    )
    discount_amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0.00"),
        nullable=False
    )
    tax_percentage: Mapped[Decimal] = mapped_column(
        PercentType,
        default=Decimal("0.00"),
        nullable=False
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0.00"),
        nullable=False
    )
    total_amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="Final amount to be paid"
    )

    # Payment
    advance_paid: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0.00"),
        nullable=False
    )
    remaining_amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="total_amount - advance_paid, negative when overpaid"
    )
    payment_status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        nullable=False,
        comment="pending, partial, paid"
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Tracking (user id from the auth token, no FK: users live in the auth service)
    created_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    customer: Mapped["Customer"] = relationship("Customer", back_populates="orders")
    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id"
    )

    def __repr__(self) -> str:
        return f"<Order(number='{self.order_number}', status='{self.status}')>"


class OrderItem(Base):
    """
    Order line item.

    service_name is a snapshot taken at write time so later catalog
    renames never alter historical orders. service_id carries no FK for
    the same reason.
    """
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    service_id: Mapped[int] = mapped_column(Integer, nullable=False)
    service_name: Mapped[str] = mapped_column(String(200), nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    rate: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="quantity * rate, stored at write time"
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    order: Mapped["Order"] = relationship("Order", back_populates="items")

    def __repr__(self) -> str:
        return f"<OrderItem(service='{self.service_name}', qty={self.quantity})>"
