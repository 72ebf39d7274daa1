#!/usr/bin/env python3
"""Tests for locating derived bucket entries."""

import pytest

from buckets.core.money import Money
from buckets.ledger.client import LedgerBook
from buckets.ledger.models import Transaction
from buckets.reconciliation.matcher import build_gl_id_query, find_by_gl_account_id, find_by_gl_id
from tests.fixtures.ledger import BUCKET_BOOK_ID, FakeLedgerClient, create_books


def entry(tx_id, remote_id, date="2025-01-15", description="Deposit #bucket #gl_rdb", gl_account_id="sav"):
    return Transaction(
        id=tx_id,
        date=date,
        amount=Money.from_string("10"),
        description=description,
        properties={"gl_account_id": gl_account_id},
        remote_ids=[remote_id],
        posted=True,
    )


@pytest.fixture
def paged_book():
    """Bucket book paging three entries at a time: {TX1_a, TX1_b, TX2_x} then {TX1_c}."""
    ledger = FakeLedgerClient(page_size=3)
    create_books(ledger, [("Car", "100")])
    for tx in (
        entry("e1", "TX1_a_1"),
        entry("e2", "TX1_b_1"),
        entry("e3", "TX2_x_1"),
        entry("e4", "TX1_c_1"),
    ):
        ledger.add_transaction(BUCKET_BOOK_ID, tx)
    return ledger, LedgerBook.open(ledger, BUCKET_BOOK_ID)


class TestFindByGlId:
    """Test matching entries of one GL transaction."""

    @pytest.mark.reconciliation
    def test_build_query(self):
        """Test the scoped search query."""
        assert build_gl_id_query("#bucket", "2025-01-15") == "#bucket on:2025-01-15"
        assert build_gl_id_query("", "2025-01-15") == "on:2025-01-15"

    @pytest.mark.reconciliation
    def test_matches_across_pages(self, paged_book):
        """Test that page boundaries do not affect the result."""
        ledger, book = paged_book

        matches = find_by_gl_id(book, "#bucket", "2025-01-15", "TX1")

        assert [tx.id for tx in matches] == ["e1", "e2", "e4"]
        assert [call[3] for call in ledger.calls_to("list_transactions")] == [None, "3"]

    @pytest.mark.reconciliation
    def test_expected_count_stops_early(self, paged_book):
        """Test that the second page is never fetched once enough entries matched."""
        ledger, book = paged_book

        matches = find_by_gl_id(book, "#bucket", "2025-01-15", "TX1", expected_count=2)

        assert [tx.id for tx in matches] == ["e1", "e2"]
        assert len(ledger.calls_to("list_transactions")) == 1

    @pytest.mark.reconciliation
    def test_prefix_requires_separator(self, paged_book):
        """Test that TX1 does not match TX10."""
        ledger, book = paged_book
        ledger.add_transaction(BUCKET_BOOK_ID, entry("e5", "TX10_a_1"))

        matches = find_by_gl_id(book, "#bucket", "2025-01-15", "TX1")

        assert "e5" not in [tx.id for tx in matches]

    @pytest.mark.reconciliation
    def test_other_days_are_out_of_scope(self, paged_book):
        """Test that the date bounds the search."""
        ledger, book = paged_book
        ledger.add_transaction(BUCKET_BOOK_ID, entry("e6", "TX1_d_1", date="2025-01-16"))

        matches = find_by_gl_id(book, "#bucket", "2025-01-15", "TX1")

        assert "e6" not in [tx.id for tx in matches]

    @pytest.mark.reconciliation
    def test_no_matches(self, paged_book):
        """Test an unknown GL transaction."""
        _, book = paged_book
        assert find_by_gl_id(book, "#bucket", "2025-01-15", "TX9") == []


class TestFindByGlAccountId:
    """Test matching every entry of a GL account."""

    @pytest.mark.reconciliation
    def test_all_pages_any_date(self):
        """Test that every linked entry is returned regardless of date."""
        ledger = FakeLedgerClient(page_size=2)
        create_books(ledger, [("Car", "100")])
        ledger.add_transaction(BUCKET_BOOK_ID, entry("e1", "TX1_a_1", date="2024-03-01"))
        ledger.add_transaction(BUCKET_BOOK_ID, entry("e2", "TX2_a_1"))
        ledger.add_transaction(BUCKET_BOOK_ID, entry("e3", "init_sav_a_1", date="2025-06-30"))
        ledger.add_transaction(BUCKET_BOOK_ID, entry("e4", "TX3_a_1", gl_account_id="other"))
        book = LedgerBook.open(ledger, BUCKET_BOOK_ID)

        matches = find_by_gl_account_id(book, "sav")

        assert [tx.id for tx in matches] == ["e1", "e2", "e3"]
        assert ledger.calls_to("list_transactions")[0][2] == 'gl_account_id:"sav"'
