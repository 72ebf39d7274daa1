#!/usr/bin/env python3
"""
Amount and Percentage Handling Utilities

The ledger platform exchanges amounts and percentages as decimal strings
("1000", "33.5", "1,234.56"). Everything here works on `Decimal` so that
shares and remainders are exact; binary floats never enter a calculation.

Key Principles:
- Parse once at the edge, compute with Decimal
- Quantize to the book's fraction digits only when an entry is built
- Fold remainders explicitly so splits reconcile to the source total
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

HUNDRED = Decimal(100)


class InvalidAmountError(ValueError):
    """Raised when an amount or percentage string cannot be parsed."""

    pass


def parse_amount(value: Union[str, int, Decimal]) -> Decimal:
    """
    Parse a ledger amount into a Decimal.

    Args:
        value: Amount such as "1000", "-12.50", "1,234.56", 12 or Decimal("3.3")

    Returns:
        Decimal amount

    Raises:
        InvalidAmountError: If the value is empty or not a finite number

    Examples:
        parse_amount("1,234.56") -> Decimal("1234.56")
        parse_amount(" 60 ") -> Decimal("60")
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    else:
        clean = str(value).replace(",", "").strip()
        if not clean:
            raise InvalidAmountError("Empty amount")
        try:
            amount = Decimal(clean)
        except InvalidOperation as e:
            raise InvalidAmountError(f"Invalid amount: {value!r}") from e

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount is not finite: {value!r}")
    return amount


def parse_percentage(value: Union[str, int, Decimal]) -> Decimal:
    """Parse a `percentage` property value ("60", "12.5", "33%")."""
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    return parse_amount(value)


def share_of(total: Decimal, percentage: Decimal) -> Decimal:
    """Return `total * percentage / 100` without rounding."""
    return total * percentage / HUNDRED


def quantize(amount: Decimal, fraction_digits: int) -> Decimal:
    """
    Round an amount to a book's precision.

    Args:
        amount: Unrounded amount
        fraction_digits: Number of decimal places the book stores

    Returns:
        Amount rounded half-up to `fraction_digits` places
    """
    exponent = Decimal(1).scaleb(-fraction_digits)
    return amount.quantize(exponent, rounding=ROUND_HALF_UP)


def fold_remainder(amounts: list[Decimal], total: Decimal) -> list[Decimal]:
    """
    Fold the difference between `total` and `sum(amounts)` into the first item.

    Used after rounding proportional shares so that the split reconciles
    exactly to the source total.

    Args:
        amounts: Rounded shares in distribution order
        total: Target total the shares must add up to

    Returns:
        New list whose sum equals `total`
    """
    if not amounts:
        return amounts

    amounts_copy = amounts.copy()
    amounts_copy[0] += total - sum(amounts_copy, Decimal(0))
    return amounts_copy


def allocate_proportionally(total: Decimal, percentages: list[Decimal], fraction_digits: int) -> list[Decimal]:
    """
    Split `total` by percentages into amounts at a book's precision.

    The total is first rounded to the book's precision. Each share is then
    rounded down, and the units left over are handed out one at a time to
    the shares with the largest dropped fractions (earlier shares win ties).
    Every amount therefore keeps the sign of `total` and stays within one
    unit of its exact share, and the amounts add up to the rounded total.

    Args:
        total: Amount to split
        percentages: Shares in distribution order, summing to 100
        fraction_digits: Number of decimal places the book stores

    Returns:
        Amounts in the same order as `percentages`

    Examples:
        allocate_proportionally(Decimal("10"), [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")], 2)
            -> [Decimal("3.33"), Decimal("3.33"), Decimal("3.34")]
    """
    if not percentages:
        return []

    rounded_total = quantize(total, fraction_digits)
    unit = Decimal(1).scaleb(-fraction_digits)
    sign = -1 if rounded_total < 0 else 1
    magnitude = abs(rounded_total)

    exact = [share_of(magnitude, p) for p in percentages]
    floors = [e.quantize(unit, rounding=ROUND_DOWN) for e in exact]

    leftover_units = int((magnitude - sum(floors, Decimal(0))) / unit)
    by_fraction = sorted(range(len(exact)), key=lambda i: exact[i] - floors[i], reverse=True)
    for n in range(max(leftover_units, 0)):
        floors[by_fraction[n % len(floors)]] += unit

    return [sign * amount for amount in floors]


def format_decimal(amount: Decimal) -> str:
    """
    Render a Decimal as a plain string without exponent notation.

    Examples:
        format_decimal(Decimal("6E+2")) -> "600"
        format_decimal(Decimal("400.00")) -> "400.00"
    """
    if amount == amount.to_integral_value() and amount.as_tuple().exponent > 0:
        amount = amount.quantize(Decimal(1))
    return format(amount, "f")
