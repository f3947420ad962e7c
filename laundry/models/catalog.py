from uuid import UUID, uuid4
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import String, Boolean, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from laundry.database import Base
from laundry.db_types import UUIDType, MoneyType


class Category(Base):
    """Service category (Wash & Fold, Dry Clean, Ironing, ...)."""
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[UUID] = mapped_column(UUIDType, unique=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    services: Mapped[List["Service"]] = relationship("Service", back_populates="category")


class Service(Base):
    """
    Catalog service with per-customer-type rates.

    The order engine only reads name and is_active; the name is
    snapshotted onto order items at write time.
    """
    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[UUID] = mapped_column(UUIDType, unique=True, default=uuid4)

    code: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True
    )

    # Rates by customer type (rate1 = regular ... rate5 = vip)
    rate1: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0.00"))
    rate2: Mapped[Optional[Decimal]] = mapped_column(MoneyType, nullable=True)
    rate3: Mapped[Optional[Decimal]] = mapped_column(MoneyType, nullable=True)
    rate4: Mapped[Optional[Decimal]] = mapped_column(MoneyType, nullable=True)
    rate5: Mapped[Optional[Decimal]] = mapped_column(MoneyType, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    category: Mapped[Optional["Category"]] = relationship("Category", back_populates="services")

    def __repr__(self) -> str:
        return f"<Service(name='{self.name}', active={self.is_active})>"
