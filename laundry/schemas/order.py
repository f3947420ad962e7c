from pydantic import BaseModel, Field, computed_field, model_validator
from typing import Optional, List
from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from laundry.models.order import OrderStatus, OrderPriority, PaymentStatus
from laundry.schemas.base import BaseCreateSchema, BaseUpdateSchema, BaseResponseSchema
from laundry.schemas.customer import CustomerBrief


# ==================== ORDER ITEM SCHEMAS ====================

class OrderItemCreate(BaseCreateSchema):
    """Order item creation schema."""
    service_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1)
    rate: Decimal = Field(..., ge=Decimal("0.01"), decimal_places=2)
    notes: Optional[str] = None


class OrderItemResponse(BaseResponseSchema):
    """Order item response schema."""
    id: int
    service_id: int
    service_name: str
    quantity: int
    rate: Decimal
    amount: Decimal
    notes: Optional[str] = None
    created_at: datetime


# ==================== ORDER SCHEMAS ====================

class OrderCreate(BaseCreateSchema):
    """Order creation schema."""
    customer_id: int = Field(..., ge=1)
    items: List[OrderItemCreate] = Field(..., min_length=1)
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    pickup_date: Optional[date] = None
    delivery_date: Optional[date] = None
    priority: OrderPriority = OrderPriority.NORMAL
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)
    tax_percentage: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)
    advance_paid: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    notes: Optional[str] = None


# Fields that may be sent but never cleared to null
NON_NULLABLE_UPDATE_FIELDS = (
    "status", "priority", "discount_percentage", "tax_percentage", "advance_paid", "items"
)


class OrderUpdate(BaseUpdateSchema):
    """
    Order update schema.

    Only fields present in the request body are applied. Sending `items`
    replaces the whole item set and recalculates every amount.
    """
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    pickup_date: Optional[date] = None
    delivery_date: Optional[date] = None
    status: Optional[OrderStatus] = None
    priority: Optional[OrderPriority] = None
    discount_percentage: Optional[Decimal] = Field(None, ge=0, le=100, decimal_places=2)
    tax_percentage: Optional[Decimal] = Field(None, ge=0, le=100, decimal_places=2)
    advance_paid: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    notes: Optional[str] = None
    items: Optional[List[OrderItemCreate]] = Field(None, min_length=1)

    @model_validator(mode="after")
    def reject_null_for_required_columns(self):
        for field_name in NON_NULLABLE_UPDATE_FIELDS:
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null")
        return self


class OrderStatusUpdate(BaseModel):
    """Order status update schema."""
    status: OrderStatus


class OrderResponse(BaseResponseSchema):
    """Order response schema (list rows)."""
    id: int
    uuid: UUID
    order_number: str
    customer_id: int
    customer: Optional[CustomerBrief] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    pickup_date: Optional[date] = None
    delivery_date: Optional[date] = None
    status: str
    priority: str
    total_quantity: int
    subtotal: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    tax_percentage: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    advance_paid: Decimal
    remaining_amount: Decimal
    payment_status: str
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def balance_due(self) -> Decimal:
        """Remaining amount for display, clamped at zero."""
        return max(Decimal("0.00"), self.remaining_amount)


class OrderDetailResponse(OrderResponse):
    """Detailed order response with items."""
    items: List[OrderItemResponse] = []


class OrderListResponse(BaseModel):
    """Paginated order list."""
    items: List[OrderResponse]
    total: int
    page: int
    size: int
    pages: int


class OrderDeleteResponse(BaseModel):
    """Order delete confirmation."""
    message: str
    order_id: int


class OrderCalculateRequest(BaseCreateSchema):
    """Preview the amounts of an order without saving it."""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)
    tax_percentage: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)
    advance_paid: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)


class OrderTotalsResponse(BaseModel):
    """Derived amounts, as returned by the pricing calculator."""
    total_quantity: int
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    remaining_amount: Decimal
    payment_status: PaymentStatus
