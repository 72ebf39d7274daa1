#!/usr/bin/env python3
"""
Bucket Entry Cleanup and Verification

Trashes derived bucket entries before a redistribution and waits (bounded)
until the ledger reports them as trashed, so new entries never race with
stale ones for the same source.
"""

import logging
import time
from collections.abc import Callable

from ..ledger.client import LedgerBook
from ..ledger.models import Transaction
from .matcher import find_by_gl_account_id, find_by_gl_id

logger = logging.getLogger(__name__)

VERIFY_MAX_RETRIES = 5
VERIFY_RETRY_DELAY_MS = 500


def trash_entries(book: LedgerBook, entries: list[Transaction]) -> int:
    """
    Trash entries in one batch call, un-checking reconciled ones as part of it.

    Returns:
        Number of entries submitted (0 without any remote call for an empty list)
    """
    if not entries:
        return 0

    book.trash_transactions(entries, trash_checked=True)
    return len(entries)


def verify_trashed(
    book: LedgerBook,
    entries: list[Transaction],
    max_retries: int = VERIFY_MAX_RETRIES,
    retry_delay_ms: int = VERIFY_RETRY_DELAY_MS,
    sleep: Callable[[float], None] = time.sleep,
) -> list[str]:
    """
    Confirm that trashed entries are visible as trashed.

    Each round re-fetches every pending entry; entries that no longer exist
    count as gone. Stragglers are retried as a batch after a fixed delay for
    up to `max_retries` rounds. Whatever is still pending afterwards is
    logged, not raised: the ledger is eventually consistent.

    Args:
        book: The bucket book
        entries: Entries that were trashed
        max_retries: Retry rounds after the first check
        retry_delay_ms: Delay between rounds in milliseconds
        sleep: Sleep function (seconds)

    Returns:
        Ids still not reported as trashed (empty when all are confirmed)
    """
    if not entries:
        return []

    pending = [tx.id for tx in entries]
    retry_count = 0

    while pending and retry_count <= max_retries:
        still_pending = []
        for tx_id in pending:
            tx = book.get_transaction(tx_id)
            if tx is not None and not tx.trashed:
                still_pending.append(tx_id)

        if not still_pending:
            logger.info("All %d transactions confirmed trashed", len(entries))
            return []

        pending = still_pending
        retry_count += 1

        if retry_count <= max_retries:
            logger.info(
                "%d transactions not yet trashed, retry %d/%d", len(pending), retry_count, max_retries
            )
            sleep(retry_delay_ms / 1000)

    logger.warning("%d transactions still not trashed after %d retries", len(pending), max_retries)
    return pending


def cleanup_by_gl_id(
    book: LedgerBook,
    hashtag: str,
    date: str,
    gl_transaction_id: str,
    expected_count: int | None = None,
    max_retries: int = VERIFY_MAX_RETRIES,
    retry_delay_ms: int = VERIFY_RETRY_DELAY_MS,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Find, trash and verify the entries derived from a GL transaction.

    Returns:
        Number of entries trashed
    """
    entries = find_by_gl_id(book, hashtag, date, gl_transaction_id, expected_count)
    if not entries:
        logger.info("No bucket transactions found for GL transaction %s", gl_transaction_id)
        return 0

    count = trash_entries(book, entries)
    verify_trashed(book, entries, max_retries, retry_delay_ms, sleep)
    logger.info("Trashed %d bucket transactions for GL transaction %s", count, gl_transaction_id)
    return count


def cleanup_by_gl_account_id(
    book: LedgerBook,
    gl_account_id: str,
    max_retries: int = VERIFY_MAX_RETRIES,
    retry_delay_ms: int = VERIFY_RETRY_DELAY_MS,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Find, trash and verify every entry linked to a GL savings account.

    Returns:
        Number of entries trashed
    """
    entries = find_by_gl_account_id(book, gl_account_id)
    if not entries:
        logger.info("No bucket transactions found for gl_account_id: %s", gl_account_id)
        return 0

    logger.info("Trashing %d bucket transactions for gl_account_id: %s", len(entries), gl_account_id)
    count = trash_entries(book, entries)
    verify_trashed(book, entries, max_retries, retry_delay_ms, sleep)
    return count
