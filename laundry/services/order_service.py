from typing import Iterable, List, Optional, Tuple
from datetime import date, datetime, time, timezone
from decimal import Decimal, ROUND_HALF_UP
import logging

from sqlalchemy import select, delete, func, and_, or_
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from laundry.config import Settings, get_settings
from laundry.core.enum_utils import get_enum_value
from laundry.core.exceptions import (
    OrderHasInvoicesError,
    OrderNumberConflictError,
    OrderPersistenceError,
    OrderValidationError,
)
from laundry.models.customer import Customer
from laundry.models.order import Order, OrderItem, OrderStatus, OrderPriority, PaymentStatus
from laundry.schemas.order import OrderCreate, OrderUpdate, OrderItemCreate
from laundry.services.catalog_service import CatalogLookup
from laundry.services.customer_stats_service import CustomerStatsService
from laundry.services.invoice_service import InvoiceService
from laundry.services.order_number_service import OrderNumberService
from laundry.services.pricing_service import (
    OrderTotals, calculate_order_totals, determine_payment_status, to_decimal
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Scalar columns a client may change through update_order
UPDATABLE_FIELDS = (
    "due_date", "due_time", "pickup_date", "delivery_date",
    "status", "priority", "discount_percentage", "tax_percentage",
    "advance_paid", "notes",
)

# Unique constraints whose violation means "order number taken, try again"
ORDER_NUMBER_CONSTRAINTS = (
    "uq_orders_order_number",
    "orders.order_number",
    "uq_order_sequences_period",
    "order_sequences.prefix",
)


def money(value) -> Decimal:
    """Round a Decimal amount to cents for storage."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _is_order_number_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig) if exc.orig is not None else str(exc)
    return any(name in message for name in ORDER_NUMBER_CONSTRAINTS)


class OrderService:
    """
    Order transaction manager.

    Every write (order row, item rows, customer aggregates, order number
    counter) happens in one transaction on the session passed in; any
    failure rolls all of it back. "Not found" is reported as None/False,
    never raised.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Optional[Settings] = None,
        catalog: Optional[CatalogLookup] = None,
        stats: Optional[CustomerStatsService] = None,
        invoices: Optional[InvoiceService] = None,
        numbers: Optional[OrderNumberService] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.catalog = catalog or CatalogLookup(db, self.settings.UNKNOWN_SERVICE_NAME)
        self.stats = stats or CustomerStatsService(db)
        self.invoices = invoices or InvoiceService(db)
        self.numbers = numbers or OrderNumberService(
            db,
            prefix=self.settings.ORDER_NUMBER_PREFIX,
            padding=self.settings.ORDER_NUMBER_PADDING,
        )

    # ==================== READ METHODS ====================

    def _order_query(self):
        return (
            select(Order)
            .options(
                selectinload(Order.customer),
                selectinload(Order.items),
            )
            # Always reflect what is committed, not stale identity-map state
            .execution_options(populate_existing=True)
        )

    async def get_order_by_id(self, order_id: int) -> Optional[Order]:
        """Get order with items and customer, None if it does not exist."""
        stmt = self._order_query().where(Order.id == order_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_order_by_number(self, order_number: str) -> Optional[Order]:
        """Get order by order number."""
        stmt = self._order_query().where(Order.order_number == order_number)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_orders(
        self,
        search: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        priority: Optional[OrderPriority] = None,
        payment_status: Optional[PaymentStatus] = None,
        customer_id: Optional[int] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        due_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[Order], int]:
        """Get paginated orders with filters, newest first."""
        filters = []

        if search:
            search_filter = f"%{search}%"
            filters.append(
                or_(
                    Order.order_number.ilike(search_filter),
                    Customer.name.ilike(search_filter),
                    Customer.mobile.ilike(search_filter),
                )
            )

        if status:
            filters.append(Order.status == get_enum_value(status))

        if priority:
            filters.append(Order.priority == get_enum_value(priority))

        if payment_status:
            filters.append(Order.payment_status == get_enum_value(payment_status))

        if customer_id:
            filters.append(Order.customer_id == customer_id)

        if from_date:
            filters.append(Order.created_at >= datetime.combine(from_date, time.min, tzinfo=timezone.utc))

        if to_date:
            filters.append(Order.created_at <= datetime.combine(to_date, time.max, tzinfo=timezone.utc))

        if due_date:
            filters.append(Order.due_date == due_date)

        stmt = self._order_query().outerjoin(Customer, Order.customer_id == Customer.id)
        count_stmt = select(func.count(Order.id)).outerjoin(Customer, Order.customer_id == Customer.id)
        if filters:
            stmt = stmt.where(and_(*filters))
            count_stmt = count_stmt.where(and_(*filters))

        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        orders = result.scalars().unique().all()

        return list(orders), total

    async def search_orders(self, query: str, limit: int = 20) -> List[Order]:
        """Quick search by order number, customer name or mobile."""
        orders, _ = await self.get_orders(search=query, limit=limit)
        return orders

    # ==================== WRITE METHODS ====================

    async def create_order(
        self,
        data: OrderCreate,
        created_by: Optional[str] = None
    ) -> Order:
        """
        Create an order with its items in one transaction.

        Steps: allocate order number, price the items, insert the order,
        insert items with snapshotted service names, refresh customer
        aggregates, commit. An order number collision rolls everything
        back and the whole create is retried.
        """
        customer = await self._get_customer(data.customer_id)
        if not customer:
            await self.db.rollback()
            raise OrderValidationError("Customer not found")

        max_attempts = 1 + self.settings.ORDER_NUMBER_MAX_RETRIES

        for attempt in range(1, max_attempts + 1):
            try:
                order = await self._create_order_once(data, created_by)
                order_id, order_number = order.id, order.order_number
                await self.db.commit()

            except IntegrityError as e:
                await self.db.rollback()
                if not _is_order_number_conflict(e):
                    logger.error(f"Database integrity error creating order: {e}")
                    raise OrderPersistenceError(
                        "Order creation failed: Invalid data reference", detail=str(e)
                    ) from e
                if attempt == max_attempts:
                    logger.error(f"Order number still colliding after {attempt} attempts")
                    raise OrderNumberConflictError(attempt) from e
                logger.warning(f"Order number collision (attempt {attempt}/{max_attempts}), retrying")
                continue

            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Database error creating order: {e}")
                raise OrderPersistenceError(
                    "Order creation failed: Database error", detail=str(e)
                ) from e

            except Exception as e:
                await self.db.rollback()
                logger.error(f"Unexpected error creating order: {e}")
                raise

            logger.info(
                f"Created order {order_number} for customer {data.customer_id} "
                f"({len(data.items)} items)"
            )
            return await self.get_order_by_id(order_id)

        # range() always returns or raises above
        raise OrderNumberConflictError(max_attempts)

    async def update_order(
        self,
        order_id: int,
        data: OrderUpdate
    ) -> Optional[Order]:
        """
        Update an order.

        - Scalar fields present in the request are applied as given.
        - `items` replaces the entire item set and recalculates every
          amount with the incoming (or stored) percentages and advance.
        - `advance_paid` alone recomputes remaining_amount and
          payment_status against the stored total_amount.
        - A request with no recognised fields returns the order unchanged.
        """
        fields_set = data.model_fields_set
        changes = {
            name: getattr(data, name)
            for name in UPDATABLE_FIELDS
            if name in fields_set
        }
        replace_items = "items" in fields_set and data.items is not None

        try:
            order = await self.get_order_by_id(order_id)
            if not order:
                return None
            if not changes and not replace_items:
                return order

            for key, value in changes.items():
                setattr(order, key, get_enum_value(value) if key in ("status", "priority") else value)

            if replace_items:
                advance_paid = changes.get("advance_paid", order.advance_paid)
                totals = calculate_order_totals(
                    data.items,
                    discount_percentage=changes.get("discount_percentage", order.discount_percentage),
                    tax_percentage=changes.get("tax_percentage", order.tax_percentage),
                    advance_paid=advance_paid,
                )
                self._apply_totals(order, totals, advance_paid)

                # Replace the item batch: old rows go first, then the new set
                order.items.clear()
                await self.db.flush()
                await self._insert_items(order, data.items)

            elif "advance_paid" in changes:
                order.advance_paid = money(changes["advance_paid"])
                order.remaining_amount = order.total_amount - order.advance_paid
                order.payment_status = determine_payment_status(
                    order.total_amount, order.advance_paid
                ).value

            await self.db.flush()
            await self.stats.refresh(order.customer_id)
            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error updating order {order_id}: {e}")
            raise OrderPersistenceError(
                "Order update failed: Database error", detail=str(e)
            ) from e
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Unexpected error updating order {order_id}: {e}")
            raise

        logger.info(
            f"Updated order {order.order_number}: {sorted(changes)}"
            + (" + items replaced" if replace_items else "")
        )
        return await self.get_order_by_id(order_id)

    async def update_order_status(
        self,
        order_id: int,
        new_status: OrderStatus
    ) -> Optional[Order]:
        """
        Update order status.

        Any status may follow any other (including re-opening a delivered
        or cancelled order). Customer aggregates are refreshed because
        cancelled orders do not count towards them.
        """
        try:
            order = await self.get_order_by_id(order_id)
            if not order:
                return None

            old_status = order.status
            order.status = get_enum_value(new_status)
            await self.db.flush()
            await self.stats.refresh(order.customer_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error updating status of order {order_id}: {e}")
            raise OrderPersistenceError(
                "Order status update failed: Database error", detail=str(e)
            ) from e

        logger.info(f"Order {order.order_number} status {old_status} -> {order.status}")
        return await self.get_order_by_id(order_id)

    async def delete_order(self, order_id: int) -> bool:
        """
        Delete an order and its items.

        Returns False if the order does not exist. Raises
        OrderHasInvoicesError, before anything is deleted, when an
        invoice references the order.
        """
        try:
            order = await self.get_order_by_id(order_id)
            if not order:
                return False

            invoice_count = await self.invoices.count_for_order(order_id)
            if invoice_count:
                logger.info(f"Refused to delete order {order.order_number}: {invoice_count} invoice(s)")
                await self.db.rollback()
                raise OrderHasInvoicesError(order_id, invoice_count)

            customer_id = order.customer_id
            order_number = order.order_number
            self.db.expunge(order)

            # Items first, independent of any ON DELETE CASCADE in the schema
            await self.db.execute(
                delete(OrderItem)
                .where(OrderItem.order_id == order_id)
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(
                delete(Order)
                .where(Order.id == order_id)
                .execution_options(synchronize_session=False)
            )
            deleted = result.rowcount > 0

            if deleted:
                await self.stats.refresh(customer_id)

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error deleting order {order_id}: {e}")
            raise OrderPersistenceError(
                "Order deletion failed: Database error", detail=str(e)
            ) from e

        if deleted:
            logger.info(f"Deleted order {order_number}")
        return deleted

    # ==================== HELPER METHODS ====================

    async def _get_customer(self, customer_id: int) -> Optional[Customer]:
        stmt = select(Customer).where(Customer.id == customer_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _create_order_once(
        self,
        data: OrderCreate,
        created_by: Optional[str]
    ) -> Order:
        """One attempt at inserting the order; the caller commits or rolls back."""
        order_number = await self.numbers.get_next_number()

        totals = calculate_order_totals(
            data.items,
            discount_percentage=data.discount_percentage,
            tax_percentage=data.tax_percentage,
            advance_paid=data.advance_paid,
        )

        order = Order(
            order_number=order_number,
            customer_id=data.customer_id,
            due_date=data.due_date,
            due_time=data.due_time,
            pickup_date=data.pickup_date,
            delivery_date=data.delivery_date,
            status=OrderStatus.PENDING.value,
            priority=get_enum_value(data.priority) or OrderPriority.NORMAL.value,
            discount_percentage=to_decimal(data.discount_percentage),
            tax_percentage=to_decimal(data.tax_percentage),
            notes=data.notes,
            created_by=created_by,
            items=[],
        )
        self._apply_totals(order, totals, data.advance_paid)
        self.db.add(order)
        await self.db.flush()

        await self._insert_items(order, data.items)
        await self.stats.refresh(order.customer_id)
        return order

    def _apply_totals(self, order: Order, totals: OrderTotals, advance_paid) -> None:
        """
        Copy calculator output onto the order row.

        Components are rounded to cents first; total and remaining are then
        derived from the rounded values so the stored row adds up exactly.
        """
        order.total_quantity = totals.total_quantity
        order.subtotal = money(totals.subtotal)
        order.discount_amount = money(totals.discount_amount)
        order.tax_amount = money(totals.tax_amount)
        order.total_amount = order.subtotal - order.discount_amount + order.tax_amount
        order.advance_paid = money(advance_paid)
        order.remaining_amount = order.total_amount - order.advance_paid
        order.payment_status = determine_payment_status(
            order.total_amount, order.advance_paid
        ).value

    async def _insert_items(self, order: Order, items: Iterable[OrderItemCreate]) -> None:
        """Insert item rows in request order with snapshotted service names."""
        items = list(items)
        names = await self.catalog.get_service_names(item.service_id for item in items)

        for item in items:
            order.items.append(
                OrderItem(
                    service_id=item.service_id,
                    service_name=names[item.service_id],
                    quantity=item.quantity,
                    rate=money(item.rate),
                    amount=money(item.quantity * to_decimal(item.rate)),
                    notes=item.notes,
                )
            )

        await self.db.flush()
