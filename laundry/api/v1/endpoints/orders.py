from typing import Optional
from math import ceil
from datetime import date

from fastapi import APIRouter, HTTPException, status, Query

from laundry.api.deps import DB, CurrentUserId, AppSettings
from laundry.models.order import Order, OrderStatus, OrderPriority, PaymentStatus
from laundry.schemas.order import (
    OrderCreate,
    OrderUpdate,
    OrderStatusUpdate,
    OrderResponse,
    OrderDetailResponse,
    OrderListResponse,
    OrderDeleteResponse,
    OrderCalculateRequest,
    OrderTotalsResponse,
)
from laundry.services.order_service import OrderService
from laundry.services.pricing_service import calculate_order_totals, determine_payment_status


router = APIRouter(tags=["Orders"])


def _build_order_response(order: Order) -> OrderResponse:
    """Build OrderResponse (no items) from Order model."""
    return OrderResponse.model_validate(order)


def _build_order_detail_response(order: Order) -> OrderDetailResponse:
    """Build OrderDetailResponse with items from Order model."""
    return OrderDetailResponse.model_validate(order)


def _order_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Order not found"
    )


@router.get(
    "",
    response_model=OrderListResponse,
)
async def list_orders(
    db: DB,
    settings: AppSettings,
    _: CurrentUserId,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Order number, customer name or mobile"),
    status: Optional[OrderStatus] = Query(None),
    priority: Optional[OrderPriority] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None),
    customer_id: Optional[int] = Query(None, ge=1),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    due_date: Optional[date] = Query(None),
):
    """Get paginated list of orders, newest first."""
    service = OrderService(db, settings)
    skip = (page - 1) * size

    orders, total = await service.get_orders(
        search=search,
        status=status,
        priority=priority,
        payment_status=payment_status,
        customer_id=customer_id,
        from_date=from_date,
        to_date=to_date,
        due_date=due_date,
        skip=skip,
        limit=size,
    )

    return OrderListResponse(
        items=[_build_order_response(o) for o in orders],
        total=total,
        page=page,
        size=size,
        pages=ceil(total / size) if total > 0 else 1,
    )


@router.get(
    "/search",
    response_model=list[OrderResponse],
)
async def search_orders(
    db: DB,
    settings: AppSettings,
    _: CurrentUserId,
    q: str = Query("", description="Search term"),
    limit: int = Query(20, ge=1, le=100),
):
    """Quick search by order number, customer name or mobile."""
    if not q.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query is required"
        )

    service = OrderService(db, settings)
    orders = await service.search_orders(q.strip(), limit=limit)
    return [_build_order_response(o) for o in orders]


@router.post(
    "/calculate",
    response_model=OrderTotalsResponse,
)
async def calculate_order(
    data: OrderCalculateRequest,
    _: CurrentUserId,
):
    """Preview order amounts without saving anything."""
    totals = calculate_order_totals(
        data.items,
        discount_percentage=data.discount_percentage,
        tax_percentage=data.tax_percentage,
        advance_paid=data.advance_paid,
    )
    return OrderTotalsResponse(
        total_quantity=totals.total_quantity,
        subtotal=totals.subtotal,
        discount_amount=totals.discount_amount,
        tax_amount=totals.tax_amount,
        total_amount=totals.total_amount,
        remaining_amount=totals.remaining_amount,
        payment_status=determine_payment_status(totals.total_amount, data.advance_paid),
    )


@router.get(
    "/{order_id}",
    response_model=OrderDetailResponse,
)
async def get_order(
    order_id: int,
    db: DB,
    settings: AppSettings,
    _: CurrentUserId,
):
    """Get order details by ID."""
    service = OrderService(db, settings)
    order = await service.get_order_by_id(order_id)

    if not order:
        raise _order_not_found()

    return _build_order_detail_response(order)


@router.post(
    "",
    response_model=OrderDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    data: OrderCreate,
    db: DB,
    settings: AppSettings,
    current_user_id: CurrentUserId,
):
    """
    Create a new order.

    Order number, amounts and payment status are computed server side.
    """
    service = OrderService(db, settings)
    order = await service.create_order(data, created_by=current_user_id)
    return _build_order_detail_response(order)


@router.put(
    "/{order_id}",
    response_model=OrderDetailResponse,
)
async def update_order(
    order_id: int,
    data: OrderUpdate,
    db: DB,
    settings: AppSettings,
    _: CurrentUserId,
):
    """
    Update an order.

    Sending `items` replaces every item and recalculates the amounts.
    """
    service = OrderService(db, settings)
    order = await service.update_order(order_id, data)

    if not order:
        raise _order_not_found()

    return _build_order_detail_response(order)


@router.patch(
    "/{order_id}/status",
    response_model=OrderDetailResponse,
)
async def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    db: DB,
    settings: AppSettings,
    _: CurrentUserId,
):
    """Update order status."""
    service = OrderService(db, settings)
    order = await service.update_order_status(order_id, data.status)

    if not order:
        raise _order_not_found()

    return _build_order_detail_response(order)


@router.delete(
    "/{order_id}",
    response_model=OrderDeleteResponse,
)
async def delete_order(
    order_id: int,
    db: DB,
    settings: AppSettings,
    _: CurrentUserId,
):
    """
    Delete an order and its items.

    Invoiced orders cannot be deleted (409); cancel them instead.
    """
    service = OrderService(db, settings)
    deleted = await service.delete_order(order_id)

    if not deleted:
        raise _order_not_found()

    return OrderDeleteResponse(message="Order deleted successfully", order_id=order_id)
