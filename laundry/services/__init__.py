# Services module
from laundry.services.catalog_service import CatalogLookup
from laundry.services.customer_stats_service import CustomerStatsService
from laundry.services.invoice_service import InvoiceService
from laundry.services.order_number_service import OrderNumberService
from laundry.services.order_service import OrderService
from laundry.services.pricing_service import (
    OrderTotals,
    calculate_order_totals,
    determine_payment_status,
)

__all__ = [
    "CatalogLookup",
    "CustomerStatsService",
    "InvoiceService",
    "OrderNumberService",
    "OrderService",
    # Pricing
    "OrderTotals",
    "calculate_order_totals",
    "determine_payment_status",
]
