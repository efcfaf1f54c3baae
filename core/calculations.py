"""
Line and invoice totals.

Totals are computed over every grid row, valid or not, so the running total
tracks what is on screen. They are a preview: the Invoice API recomputes
line totals, subtotal and invoice amount authoritatively.
"""

from collections.abc import Iterable
from decimal import Decimal
from functools import reduce

from pydantic import BaseModel

from core.models.line_item import LineItem, LineItemFormData
from core.numeric import ZERO, add, multiply, parse_numeric_input, round2


class InvoiceTotals(BaseModel):
    """Live totals for the editor's totals panel."""

    line_count: int
    subtotal: Decimal
    invoice_amount: Decimal


def line_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    """quantity * unit_price rounded to cents. Negative inputs are not clamped."""
    return round2(multiply(quantity, unit_price))


def row_total(item: LineItemFormData | LineItem) -> Decimal:
    """Line total for a grid row or a persisted line item (stored line_total is ignored)."""
    if isinstance(item, LineItemFormData):
        return line_total(parse_numeric_input(item.quantity), parse_numeric_input(item.unit_price))
    return line_total(item.quantity, item.unit_price)


def subtotal(items: Iterable[LineItemFormData | LineItem]) -> Decimal:
    total = reduce(add, (row_total(item) for item in items), ZERO)
    return round2(total)


def invoice_amount(subtotal_amount: Decimal) -> Decimal:
    """Invoice amount from subtotal. Identity today; tax and discounts would apply here."""
    return subtotal_amount


def count_filled_lines(items: Iterable[LineItemFormData]) -> int:
    """Rows with a description and a positive quantity."""
    return sum(
        1 for item in items
        if item.description.strip() and parse_numeric_input(item.quantity) > 0
    )


def calculate_totals(items: list[LineItemFormData]) -> InvoiceTotals:
    sub = subtotal(items)
    return InvoiceTotals(
        line_count=count_filled_lines(items),
        subtotal=sub,
        invoice_amount=invoice_amount(sub),
    )
