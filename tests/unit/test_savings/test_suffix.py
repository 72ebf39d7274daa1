#!/usr/bin/env python3
"""Tests for routing suffix extraction."""

import pytest

from buckets.ledger.models import Account, Group
from buckets.savings.suffix import account_matches_suffix, extract_suffix, extract_suffix_from_account


class TestExtractSuffix:
    """Test the suffix rule on names."""

    @pytest.mark.unit
    def test_uppercase_last_word(self):
        """Test names ending in an uppercase word."""
        assert extract_suffix("RDB LONG") == "LONG"
        assert extract_suffix("Cash Reserve SHORT") == "SHORT"

    @pytest.mark.unit
    def test_no_suffix(self):
        """Test names without a qualifying last word."""
        assert extract_suffix("Provisioning") is None
        assert extract_suffix("LONG") is None  # single word
        assert extract_suffix("Bank Account") is None
        assert extract_suffix("Car LONG2") is None
        assert extract_suffix("Car Long") is None
        assert extract_suffix("") is None

    @pytest.mark.unit
    def test_whitespace_is_collapsed(self):
        """Test that extra whitespace does not change the result."""
        assert extract_suffix("  Car   LONG  ") == "LONG"


class TestAccountSuffix:
    """Test suffix lookup on accounts and their groups."""

    @pytest.mark.unit
    def test_account_name_first(self):
        """Test that the account name wins over its groups."""
        account = Account(id="a", name="RDB LONG", type="ASSET", groups=[Group(id="g", name="Funds SHORT")])
        assert extract_suffix_from_account(account) == "LONG"

    @pytest.mark.unit
    def test_falls_back_to_groups_in_order(self):
        """Test that the first suffixed group is used."""
        account = Account(
            id="a",
            name="Broker",
            type="ASSET",
            groups=[Group(id="g1", name="Investments"), Group(id="g2", name="Funds SHORT")],
        )
        assert extract_suffix_from_account(account) == "SHORT"

    @pytest.mark.unit
    def test_no_suffix_anywhere(self):
        """Test an account with no suffix on name or groups."""
        assert extract_suffix_from_account(Account(id="a", name="Broker", type="ASSET")) is None

    @pytest.mark.unit
    def test_account_matches_suffix(self):
        """Test matching by name or by group."""
        by_name = Account(id="a", name="Car LONG", type="ASSET")
        by_group = Account(id="b", name="Holiday", type="ASSET", groups=[Group(id="g", name="Goals LONG")])
        other = Account(id="c", name="Rainy SHORT", type="ASSET")

        assert account_matches_suffix(by_name, "LONG")
        assert account_matches_suffix(by_group, "LONG")
        assert not account_matches_suffix(other, "LONG")
