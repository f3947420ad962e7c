"""
Pricing calculator and payment status classifier.
"""

from decimal import Decimal

import pytest

from laundry.models.order import PaymentStatus
from laundry.services.pricing_service import (
    calculate_order_totals,
    determine_payment_status,
    to_decimal,
)


SHOP_ITEMS = [
    {"quantity": 2, "rate": Decimal("100.00")},
    {"quantity": 1, "rate": Decimal("50.00")},
]


class TestCalculateOrderTotals:

    def test_discount_then_tax(self):
        totals = calculate_order_totals(SHOP_ITEMS, Decimal("10"), Decimal("5"), Decimal("100"))

        assert totals.total_quantity == 3
        assert totals.subtotal == Decimal("250.00")
        assert totals.discount_amount == Decimal("25.00")
        assert totals.after_discount == Decimal("225.00")
        assert totals.tax_amount == Decimal("11.25")
        assert totals.total_amount == Decimal("236.25")
        assert totals.remaining_amount == Decimal("136.25")

    def test_overpayment_keeps_negative_remaining(self):
        totals = calculate_order_totals(SHOP_ITEMS, Decimal("10"), Decimal("5"), Decimal("300"))

        assert totals.remaining_amount == Decimal("-63.75")
        assert determine_payment_status(totals.total_amount, Decimal("300")) == PaymentStatus.PAID

    def test_defaults_are_zero(self):
        totals = calculate_order_totals(SHOP_ITEMS)

        assert totals.discount_amount == 0
        assert totals.tax_amount == 0
        assert totals.total_amount == totals.subtotal == Decimal("250.00")
        assert totals.remaining_amount == totals.total_amount

    def test_accepts_objects_with_attributes(self):
        class Line:
            def __init__(self, quantity, rate):
                self.quantity = quantity
                self.rate = rate

        totals = calculate_order_totals([Line(3, "19.99")])
        assert totals.subtotal == Decimal("59.97")

    def test_no_rounding_inside_calculator(self):
        totals = calculate_order_totals([{"quantity": 1, "rate": Decimal("33.33")}], tax_percentage=Decimal("18"))
        assert totals.tax_amount == Decimal("5.9994")
        assert totals.total_amount == Decimal("39.3294")

    @pytest.mark.parametrize("discount,tax,advance", [
        ("0", "0", "0"),
        ("12.5", "18", "40"),
        ("100", "5", "0"),
        ("7", "0", "999.99"),
    ])
    def test_amounts_follow_formulas(self, discount, tax, advance):
        items = [
            {"quantity": 4, "rate": Decimal("12.75")},
            {"quantity": 1, "rate": Decimal("0.01")},
            {"quantity": 7, "rate": Decimal("145.20")},
        ]
        totals = calculate_order_totals(items, Decimal(discount), Decimal(tax), Decimal(advance))

        assert totals.total_quantity == sum(i["quantity"] for i in items)
        assert totals.subtotal == sum(i["quantity"] * i["rate"] for i in items)
        assert totals.discount_amount == totals.subtotal * Decimal(discount) / 100
        assert totals.tax_amount == (totals.subtotal - totals.discount_amount) * Decimal(tax) / 100
        assert totals.total_amount == totals.subtotal - totals.discount_amount + totals.tax_amount
        assert totals.remaining_amount == totals.total_amount - Decimal(advance)

    def test_full_discount_gives_zero_total(self):
        totals = calculate_order_totals(SHOP_ITEMS, Decimal("100"), Decimal("18"))
        assert totals.total_amount == 0
        assert totals.tax_amount == 0


class TestDeterminePaymentStatus:

    @pytest.mark.parametrize("total,advance,expected", [
        ("236.25", "0", PaymentStatus.PENDING),
        ("236.25", None, PaymentStatus.PENDING),
        ("236.25", "-5", PaymentStatus.PENDING),
        ("236.25", "0.01", PaymentStatus.PARTIAL),
        ("236.25", "236.24", PaymentStatus.PARTIAL),
        ("236.25", "236.25", PaymentStatus.PAID),
        ("236.25", "500", PaymentStatus.PAID),
        ("0", "0", PaymentStatus.PENDING),
        ("0", "10", PaymentStatus.PAID),
    ])
    def test_partition(self, total, advance, expected):
        advance_value = Decimal(advance) if advance is not None else None
        assert determine_payment_status(Decimal(total), advance_value) == expected

    def test_returns_lowercase_values(self):
        assert determine_payment_status(Decimal("10"), Decimal("5")).value == "partial"


class TestToDecimal:

    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")

    def test_float_keeps_printed_value(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_passthrough(self):
        value = Decimal("12.34")
        assert to_decimal(value) is value
