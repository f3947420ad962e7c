"""Pricing calculator and payment status classifier for laundry orders.

Pure functions, no database access:

    subtotal         = Σ quantity × rate
    discount_amount  = subtotal × discount_percentage / 100
    tax_amount       = (subtotal − discount_amount) × tax_percentage / 100
    total_amount     = subtotal − discount_amount + tax_amount
    remaining_amount = total_amount − advance_paid

Example:
- 2 × ₹100.00 + 1 × ₹50.00 → subtotal ₹250.00
- Discount 10% → ₹25.00, after discount ₹225.00
- Tax 5% → ₹11.25, total ₹236.25
- Advance ₹100.00 → remaining ₹136.25, payment status "partial"

Nothing is rounded here; the Numeric(12, 2) columns round at persistence.
remaining_amount keeps its sign when the customer overpaid; callers clamp
it to zero for display only.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Union

from laundry.models.order import PaymentStatus


Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class OrderTotals:
    """Derived financial fields of an order."""
    total_quantity: int
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    remaining_amount: Decimal

    @property
    def after_discount(self) -> Decimal:
        return self.subtotal - self.discount_amount


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert a number to Decimal, treating None as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 0.1 keep their printed value
    return Decimal(str(value))


def _item_field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item[name]
    return getattr(item, name)


def calculate_order_totals(
    items: Iterable[Any],
    discount_percentage: Optional[Number] = None,
    tax_percentage: Optional[Number] = None,
    advance_paid: Optional[Number] = None,
) -> OrderTotals:
    """
    Compute quantity and money totals for a list of line items.

    Args:
        items: Objects or mappings exposing `quantity` and `rate`.
            Input is assumed validated (quantity ≥ 1, rate ≥ 0.01).
        discount_percentage: Order level discount, default 0
        tax_percentage: Order level tax applied after discount, default 0
        advance_paid: Amount already paid, default 0

    Returns:
        OrderTotals with unrounded Decimal amounts
    """
    total_quantity = 0
    subtotal = ZERO

    for item in items:
        quantity = int(_item_field(item, "quantity"))
        rate = to_decimal(_item_field(item, "rate"))
        total_quantity += quantity
        subtotal += quantity * rate

    discount_amount = subtotal * to_decimal(discount_percentage) / HUNDRED
    after_discount = subtotal - discount_amount
    tax_amount = after_discount * to_decimal(tax_percentage) / HUNDRED
    total_amount = after_discount + tax_amount
    remaining_amount = total_amount - to_decimal(advance_paid)

    return OrderTotals(
        total_quantity=total_quantity,
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        total_amount=total_amount,
        remaining_amount=remaining_amount,
    )


def determine_payment_status(total_amount: Number, advance_paid: Optional[Number]) -> PaymentStatus:
    """
    Classify how much of the order total has been prepaid.

    - advance ≤ 0      → pending
    - advance ≥ total  → paid
    - otherwise        → partial
    """
    total = to_decimal(total_amount)
    advance = to_decimal(advance_paid)

    if advance <= ZERO:
        return PaymentStatus.PENDING
    if advance >= total:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL
