from laundry.models.customer import Customer, CustomerType
from laundry.models.catalog import Category, Service
from laundry.models.order import Order, OrderItem, OrderStatus, OrderPriority, PaymentStatus
from laundry.models.invoice import Invoice
from laundry.models.order_sequence import OrderSequence

__all__ = [
    "Customer",
    "CustomerType",
    "Category",
    "Service",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderPriority",
    "PaymentStatus",
    "Invoice",
    "OrderSequence",
]
