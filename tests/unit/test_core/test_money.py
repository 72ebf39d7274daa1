#!/usr/bin/env python3
"""Tests for Money and FinancialDate primitive types."""

from datetime import date
from decimal import Decimal

import pytest

from buckets.core.amounts import InvalidAmountError
from buckets.core.dates import FinancialDate
from buckets.core.money import Money


class TestMoneyConstruction:
    """Test Money class construction."""

    @pytest.mark.currency
    def test_from_string(self):
        """Test parsing from ledger amount strings."""
        assert Money.from_string("1,234.56").to_decimal() == Decimal("1234.56")
        assert Money.from_string("-20").to_decimal() == Decimal("-20")

    @pytest.mark.currency
    def test_from_string_invalid(self):
        """Test that unparseable amounts raise."""
        with pytest.raises(InvalidAmountError):
            Money.from_string("n/a")

    @pytest.mark.currency
    def test_zero(self):
        """Test the zero amount."""
        assert Money.zero() == Money.from_decimal(0)
        assert not Money.zero().is_positive()
        assert Money.from_string("0.01").is_positive()


class TestMoneyFormatting:
    """Test Money equality and rendering."""

    @pytest.mark.currency
    def test_equality_ignores_trailing_zeros(self):
        """Test that 1.0 and 1 are the same amount."""
        assert Money.from_string("1.0") == Money.from_string("1")
        assert hash(Money.from_string("1.0")) == hash(Money.from_string("1"))

    @pytest.mark.currency
    def test_str_is_plain_decimal(self):
        """Test that str() renders the ledger API form."""
        assert str(Money.from_string("600.00")) == "600.00"
        assert str(Money.from_decimal(Decimal("6E+2"))) == "600"


class TestFinancialDate:
    """Test FinancialDate formatting."""

    @pytest.mark.unit
    def test_iso_formatting(self):
        """Test the YYYY-MM-DD form used for entry dates."""
        d = FinancialDate(date=date(2025, 1, 5))
        assert d.to_iso_string() == "2025-01-05"
        assert str(d) == "2025-01-05"

    @pytest.mark.unit
    def test_today(self):
        """Test that today() wraps the current date."""
        assert FinancialDate.today().date == date.today()
