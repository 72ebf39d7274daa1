#!/usr/bin/env python3
"""
FinancialDate Primitive Type

Immutable date wrapper with the ISO formatting the ledger platform uses for
transaction dates and `on:` search filters.
"""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class FinancialDate:
    """Immutable financial date wrapper with consistent formatting."""

    date: date

    @classmethod
    def today(cls) -> "FinancialDate":
        """Get today's date."""
        return cls(date=date.today())

    def to_iso_string(self) -> str:
        """Format as YYYY-MM-DD."""
        return self.date.isoformat()

    def __str__(self) -> str:
        """String representation."""
        return self.to_iso_string()
