"""
Invoice Total Calculator

Pure money arithmetic for invoice lines and headers. All values are
``Decimal`` rounded half-up to two places.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from invoice_manager.core.exceptions import ValidationError

TWO_PLACES = Decimal("0.01")
AMOUNT_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class InvoiceTotals:
    sub_total: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def quantize(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def line_amount(quantity, unit_price) -> Decimal:
    """Amount of a single line: quantity x unit price, rounded to 2 dp."""
    return quantize(Decimal(str(quantity)) * Decimal(str(unit_price)))


def resolve_line_amount(quantity, unit_price, amount: Optional[Decimal] = None) -> Decimal:
    """
    Return the stored amount for a line.

    A missing amount is derived from quantity and unit price. A supplied
    amount must agree with the derived one within one cent.
    """
    expected = line_amount(quantity, unit_price)
    if amount is None:
        return expected

    supplied = quantize(amount)
    if abs(supplied - expected) > AMOUNT_TOLERANCE:
        raise ValidationError(
            f"Item amount {supplied} does not match quantity x unit price ({expected})"
        )
    return supplied


def calculate_totals(amounts: Iterable, tax_rate) -> InvoiceTotals:
    """
    Compute invoice header totals from line amounts.

    >>> calculate_totals([Decimal("200"), Decimal("50")], Decimal("10"))
    InvoiceTotals(sub_total=Decimal('250.00'), tax_amount=Decimal('25.00'), total_amount=Decimal('275.00'))
    """
    sub_total = quantize(sum((Decimal(str(a)) for a in amounts), Decimal("0")))
    rate = quantize(tax_rate if tax_rate is not None else 0)
    tax_amount = quantize(sub_total * rate / Decimal("100"))
    return InvoiceTotals(
        sub_total=sub_total,
        tax_amount=tax_amount,
        total_amount=sub_total + tax_amount,
    )
