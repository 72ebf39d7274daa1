#!/usr/bin/env python3
"""
Bucket Entry Matcher

Finds bucket-book entries previously derived from a GL transaction or a GL
savings account.

Two lookup modes:
1. By GL transaction id - scoped `{hashtag} on:{date}` search, filtered by
   remote id prefix `{glTransactionId}_`, with optional early termination
2. By GL account id - `gl_account_id:"{id}"` search over the whole book
"""

import logging

from ..ledger.client import LedgerBook
from ..ledger.models import Transaction
from ..savings.context import GL_ACCOUNT_ID_PROPERTY

logger = logging.getLogger(__name__)


def build_gl_id_query(hashtag: str, date: str) -> str:
    """Search query narrowing the book to one day, and to the bucket hashtag when set."""
    return " ".join(part for part in (hashtag, f"on:{date}") if part)


def find_by_gl_id(
    book: LedgerBook,
    hashtag: str,
    date: str,
    gl_transaction_id: str,
    expected_count: int | None = None,
) -> list[Transaction]:
    """
    Find bucket entries created for a GL transaction.

    Pages through the search until no cursor is returned. When
    `expected_count` is given the search stops as soon as that many entries
    matched, without requesting further pages. An entry counts once even if
    several of its remote ids carry the prefix.

    Args:
        book: The bucket book
        hashtag: Bucket hashtag (may be empty)
        date: GL transaction date, YYYY-MM-DD
        gl_transaction_id: GL transaction id
        expected_count: Stop after this many matches

    Returns:
        Matching entries in search order
    """
    query = build_gl_id_query(hashtag, date)
    prefix = f"{gl_transaction_id}_"
    matches: list[Transaction] = []

    page = book.list_transactions(query)
    while True:
        if not page.items:
            break

        for tx in page.items:
            if tx.has_remote_id_prefix(prefix):
                matches.append(tx)
                if expected_count and len(matches) >= expected_count:
                    logger.debug("Found all %d expected entries for %s", expected_count, gl_transaction_id)
                    return matches

        if not page.cursor:
            break
        page = book.list_transactions(query, page.cursor)

    logger.debug("Found %d entries for GL transaction %s", len(matches), gl_transaction_id)
    return matches


def find_by_gl_account_id(book: LedgerBook, gl_account_id: str) -> list[Transaction]:
    """
    Find every bucket entry linked to a GL savings account.

    No date bound: an account may have produced entries across its whole lifetime.
    """
    query = f'{GL_ACCOUNT_ID_PROPERTY}:"{gl_account_id}"'
    logger.info("Querying bucket transactions: %s", query)

    matches: list[Transaction] = []
    page = book.list_transactions(query)
    while page.items:
        matches.extend(page.items)
        logger.debug("Found %d transactions (total: %d)", len(page.items), len(matches))
        if not page.cursor:
            break
        page = book.list_transactions(query, page.cursor)

    return matches
