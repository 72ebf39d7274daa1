#!/usr/bin/env python3
"""Tests for savings detection."""

import pytest

from buckets.core.money import Money
from buckets.ledger.models import Account, Book, Group, Transaction
from buckets.savings.context import Direction, SavingsContext
from buckets.savings.detector import build_initialization_context, detect_savings


def make_books(bucket_properties=None) -> tuple[Book, Book]:
    bucket_book = Book(id="bk", name="Buckets", properties=bucket_properties or {})
    gl_book = Book(id="gl", name="GL", properties={"bucket_book_id": "bk"}, collection_books=[bucket_book])
    return gl_book, bucket_book


def make_tx(credit: Account, debit: Account, amount="1000", properties=None) -> Transaction:
    return Transaction(
        id="tx1",
        date="2025-01-15",
        amount=Money.from_string(amount),
        description="Monthly savings",
        credit_account=credit,
        debit_account=debit,
        properties=properties or {},
    )


CHECKING = Account(id="chk", name="Checking", type="ASSET", normalized_name="checking")


def savings_account(name="RDB", groups=None, savings="true") -> Account:
    properties = {"savings": savings} if savings is not None else {}
    return Account(
        id="sav",
        name=name,
        type="ASSET",
        properties=properties,
        groups=groups or [],
        normalized_name="_".join(name.lower().split()),
    )


class TestDetectSavings:
    """Test detection on GL transactions."""

    @pytest.mark.unit
    def test_deposit_on_debited_savings_account(self):
        """Test that money flowing into a savings account is a deposit."""
        gl_book, _ = make_books({"bucket_hashtag": "#bucket", "bucket_income_acc": "Income"})
        result = detect_savings(gl_book, make_tx(CHECKING, savings_account()))

        assert result.is_savings
        context = result.context
        assert context.direction == Direction.DEPOSIT
        assert context.savings_account_name == "RDB"
        assert context.bucket_book_id == "bk"
        assert context.bucket_hashtag == "#bucket"
        assert context.bucket_income_acc == "Income"
        assert context.bucket_withdrawal_acc == "Withdrawal"
        assert context.amount == Money.from_string("1000")
        assert context.suffix is None
        assert context.from_account == "Checking"
        assert context.to_account == "RDB"

    @pytest.mark.unit
    def test_withdrawal_on_credited_savings_account(self):
        """Test that money leaving a savings account is a withdrawal."""
        gl_book, _ = make_books()
        result = detect_savings(gl_book, make_tx(savings_account(), CHECKING))

        assert result.is_savings
        assert result.context.direction == Direction.WITHDRAWAL
        assert result.context.bucket_income_acc == "Savings"

    @pytest.mark.unit
    def test_suffix_from_account_name(self):
        """Test suffix derivation from the savings account name."""
        gl_book, _ = make_books()
        result = detect_savings(gl_book, make_tx(CHECKING, savings_account("RDB LONG")))
        assert result.context.suffix == "LONG"

    @pytest.mark.unit
    def test_detection_through_group(self):
        """Test that a savings group marks its accounts as savings."""
        gl_book, _ = make_books()
        group = Group(id="g", name="Investments LONG", properties={"savings": "true"})
        account = savings_account("Broker", groups=[group], savings=None)

        result = detect_savings(gl_book, make_tx(CHECKING, account))

        assert result.is_savings
        assert result.context.savings_group_name == "Investments LONG"
        assert result.context.suffix == "LONG"

    @pytest.mark.unit
    def test_account_opt_out_beats_group(self):
        """Test that savings:"false" on the account overrides its group."""
        gl_book, _ = make_books()
        group = Group(id="g", name="Investments", properties={"savings": "true"})
        account = savings_account("Broker", groups=[group], savings="false")

        result = detect_savings(gl_book, make_tx(CHECKING, account))

        assert not result.is_savings

    @pytest.mark.unit
    def test_override_suppresses_suffix(self):
        """Test that a bucket override wins over any suffix."""
        gl_book, _ = make_books()
        tx = make_tx(CHECKING, savings_account("RDB LONG"), properties={"bucket": "Car, Holiday"})

        result = detect_savings(gl_book, tx)

        assert result.context.bucket_override == "Car, Holiday"
        assert result.context.suffix is None

    @pytest.mark.unit
    def test_no_bucket_book_configured(self):
        """Test that a GL book without bucket_book_id is not savings."""
        gl_book = Book(id="gl", name="GL")
        result = detect_savings(gl_book, make_tx(CHECKING, savings_account()))

        assert not result.is_savings
        assert "bucket_book_id" in result.reason

    @pytest.mark.unit
    def test_bucket_book_outside_collection(self):
        """Test that the bucket book must be a sibling in the collection."""
        gl_book = Book(id="gl", name="GL", properties={"bucket_book_id": "elsewhere"})
        result = detect_savings(gl_book, make_tx(CHECKING, savings_account()))

        assert not result.is_savings
        assert "elsewhere" in result.reason

    @pytest.mark.unit
    def test_ordinary_transaction(self):
        """Test a transaction between two non-savings accounts."""
        gl_book, _ = make_books()
        groceries = Account(id="g", name="Groceries", type="OUTGOING")

        result = detect_savings(gl_book, make_tx(CHECKING, groceries))

        assert not result.is_savings


class TestInitializationContext:
    """Test synthetic contexts for account initialization."""

    @pytest.mark.unit
    def test_initialization_context(self):
        """Test that the account id stands in for the transaction id."""
        _, bucket_book = make_books({"bucket_hashtag": "#bucket"})
        account = savings_account("RDB LONG")

        context = build_initialization_context(
            bucket_book, account, Money.from_string("5000"), "Initial balance", "2025-02-01"
        )

        assert context.is_initialization
        assert context.transaction_id == "sav"
        assert context.source_id == "sav"
        assert context.direction == Direction.DEPOSIT
        assert context.suffix == "LONG"
        assert context.bucket_hashtag == "#bucket"
        assert context.description == "Initial balance"
        assert context.gl_hashtag == "#gl_rdb_long"


class TestSavingsContext:
    """Test context invariants."""

    @pytest.mark.unit
    def test_suffix_and_override_are_exclusive(self):
        """Test that a context refuses both routing modes."""
        with pytest.raises(ValueError):
            SavingsContext(
                bucket_book_id="bk",
                transaction_id="tx",
                date="2025-01-15",
                description="",
                amount=Money.from_string("1"),
                direction=Direction.DEPOSIT,
                savings_account_name="RDB LONG",
                savings_account_id="sav",
                savings_account_normalized_name="rdb_long",
                suffix="LONG",
                bucket_override="Car",
            )
