#!/usr/bin/env python3
"""
Money Primitive Type

Immutable amount wrapper over `Decimal`. Ledger books carry their own
precision (fraction digits), so amounts are kept exact as parsed and only
rounded when a split is allocated.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from .amounts import format_decimal, parse_amount


@dataclass(frozen=True)
class Money:
    """
    Immutable money value.

    Examples:
        >>> str(Money.from_string("1,000.50"))
        '1000.50'

        >>> Money.from_string("0").is_positive()
        False
    """

    amount: Decimal

    @classmethod
    def from_string(cls, value: str) -> "Money":
        """
        Parse from a ledger amount string like "1,234.56".

        Raises:
            InvalidAmountError: If the string is not a number
        """
        return cls(amount=parse_amount(value))

    @classmethod
    def from_decimal(cls, value: Union[Decimal, int]) -> "Money":
        """Create Money from a Decimal or integer."""
        return cls(amount=Decimal(value))

    @classmethod
    def zero(cls) -> "Money":
        """Zero amount."""
        return cls(amount=Decimal(0))

    def to_decimal(self) -> Decimal:
        """Get the raw Decimal value."""
        return self.amount

    def is_positive(self) -> bool:
        """Check whether the amount is strictly greater than zero."""
        return self.amount > 0

    def __eq__(self, other: object) -> bool:
        """Check equality."""
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount == other.amount

    def __hash__(self) -> int:
        return hash(self.amount)

    def __str__(self) -> str:
        """Format as plain decimal string, the way the ledger API expects it."""
        return format_decimal(self.amount)

    def __repr__(self) -> str:
        """Repr format."""
        return f"Money(amount={self.amount!r})"
