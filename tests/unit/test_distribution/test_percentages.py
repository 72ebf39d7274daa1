#!/usr/bin/env python3
"""Tests for bucket percentage validation."""

from decimal import Decimal

import pytest

from buckets.core.amounts import InvalidAmountError
from buckets.distribution.percentages import (
    describe_invalid,
    is_bucket_account,
    list_bucket_accounts,
    validate_percentages,
)
from buckets.ledger.client import LedgerBook
from buckets.ledger.models import Account
from tests.fixtures.ledger import BUCKET_BOOK_ID, create_books


def bucket_book_with(ledger, buckets) -> LedgerBook:
    create_books(ledger, buckets)
    return LedgerBook.open(ledger, BUCKET_BOOK_ID)


class TestValidatePercentages:
    """Test the sum-to-100 check."""

    @pytest.mark.distribution
    @pytest.mark.parametrize(
        "buckets",
        [
            [("Car", "60"), ("Holiday", "40")],
            [("Car", "33.3"), ("Holiday", "33.3"), ("Rainy Day", "33.4")],
            [("Everything", "100")],
        ],
    )
    def test_valid_sums(self, ledger, buckets):
        """Test sets summing to exactly 100."""
        validation = validate_percentages(bucket_book_with(ledger, buckets))

        assert validation.is_valid
        assert validation.total_percentage == Decimal("100")
        assert validation.account_count == len(buckets)

    @pytest.mark.distribution
    @pytest.mark.parametrize(
        "buckets,total",
        [
            ([("Car", "50"), ("Holiday", "30")], Decimal("80")),
            ([("Car", "60"), ("Holiday", "50")], Decimal("110")),
            ([("Car", "0"), ("Holiday", "0")], Decimal("0")),
        ],
    )
    def test_invalid_sums(self, ledger, buckets, total):
        """Test sets that do not sum to 100."""
        validation = validate_percentages(bucket_book_with(ledger, buckets))

        assert not validation.is_valid
        assert validation.total_percentage == total
        assert validation.account_count == 2
        assert describe_invalid(validation) == f"bucket percentages sum to {total}%, not 100%"

    @pytest.mark.distribution
    def test_no_tolerance(self, ledger):
        """Test that 99.99 is not close enough."""
        validation = validate_percentages(bucket_book_with(ledger, [("Car", "59.99"), ("Holiday", "40")]))
        assert not validation.is_valid

    @pytest.mark.distribution
    def test_unparseable_percentage(self, ledger):
        """Test that a non-numeric percentage invalidates the book."""
        validation = validate_percentages(bucket_book_with(ledger, [("Car", "lots"), ("Holiday", "100")]))

        assert not validation.is_valid
        assert validation.invalid_accounts == ["Car"]
        assert validation.account_count == 1
        assert "Car" in describe_invalid(validation)

    @pytest.mark.distribution
    def test_only_asset_accounts_with_percentage_count(self, ledger):
        """Test that clearing accounts and non-asset accounts are ignored."""
        book = bucket_book_with(ledger, [("Car", "100")])
        ledger.add_account(BUCKET_BOOK_ID, "Fees", type="OUTGOING", properties={"percentage": "50"})
        ledger.add_account(BUCKET_BOOK_ID, "Unassigned")

        validation = validate_percentages(book)

        assert validation.is_valid
        assert validation.account_count == 1


class TestBucketAccounts:
    """Test bucket account selection."""

    @pytest.mark.distribution
    def test_is_bucket_account(self):
        """Test the ASSET-with-percentage rule."""
        assert is_bucket_account(Account(id="a", name="Car", type="ASSET", properties={"percentage": "10"}))
        assert not is_bucket_account(Account(id="b", name="Car", type="ASSET"))
        assert not is_bucket_account(
            Account(id="c", name="Car", type="LIABILITY", properties={"percentage": "10"})
        )

    @pytest.mark.distribution
    def test_list_keeps_order_and_parses(self):
        """Test listing order and percentage parsing."""
        accounts = [
            Account(id="a", name="Car", type="ASSET", properties={"percentage": "60%"}),
            Account(id="b", name="Savings", type="INCOMING"),
            Account(id="c", name="Holiday", type="ASSET", properties={"percentage": "40"}),
        ]

        buckets = list_bucket_accounts(accounts)

        assert [b.account.name for b in buckets] == ["Car", "Holiday"]
        assert [b.percentage for b in buckets] == [Decimal("60"), Decimal("40")]

    @pytest.mark.distribution
    def test_list_rejects_garbage(self):
        """Test that an unparseable percentage names the account."""
        accounts = [Account(id="a", name="Car", type="ASSET", properties={"percentage": "x"})]
        with pytest.raises(InvalidAmountError, match="Car"):
            list_bucket_accounts(accounts)
