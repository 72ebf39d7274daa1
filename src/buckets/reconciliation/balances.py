#!/usr/bin/env python3
"""
Balance Reconciliation

Cross-checks that the GL savings accounts and the bucket accounts hold the
same total. Derived entries are only marked checked when they do.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from ..core.money import Money
from ..distribution.percentages import is_bucket_account
from ..ledger.client import LedgerBook
from ..ledger.models import Account, Transaction
from ..savings.context import SAVINGS_PROPERTY

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class BalanceValidation:
    """GL savings total versus bucket total."""

    is_balanced: bool
    gl_total: Decimal
    bucket_total: Decimal
    difference: Decimal  # gl_total - bucket_total


def build_accounts_query(accounts: list[Account]) -> str:
    """
    One OR query over all account names, so a single balances call covers them.

    Example:
        account:"RDB LONG" or account:"Cash SHORT"
    """
    return " or ".join(f'account:"{account.name}"' for account in accounts)


def _sum_balances(book: LedgerBook, accounts: list[Account]) -> Decimal:
    if not accounts:
        return Decimal(0)

    total = Decimal(0)
    for container in book.get_balances(build_accounts_query(accounts)):
        total += container.cumulative_balance.to_decimal()
    return total


def get_gl_savings_total(gl_book: LedgerBook) -> Decimal:
    """Cumulative balance of all active GL accounts carrying savings:"true"."""
    savings_accounts = [
        a for a in gl_book.list_accounts() if a.get_property(SAVINGS_PROPERTY) == "true" and not a.archived
    ]
    return _sum_balances(gl_book, savings_accounts)


def get_bucket_total(bucket_book: LedgerBook) -> Decimal:
    """Cumulative balance of all bucket accounts (ASSET with a percentage)."""
    bucket_accounts = [a for a in bucket_book.list_accounts() if is_bucket_account(a)]
    return _sum_balances(bucket_book, bucket_accounts)


def validate_balances(gl_book: LedgerBook, bucket_book: LedgerBook) -> BalanceValidation:
    """
    Compare the GL savings total with the bucket total.

    Balanced means the absolute difference is below a fixed 0.01 tolerance.

    Args:
        gl_book: The GL book
        bucket_book: The bucket book

    Returns:
        BalanceValidation
    """
    gl_total = get_gl_savings_total(gl_book)
    bucket_total = get_bucket_total(bucket_book)
    difference = gl_total - bucket_total

    result = BalanceValidation(
        is_balanced=abs(difference) < BALANCE_TOLERANCE,
        gl_total=gl_total,
        bucket_total=bucket_total,
        difference=difference,
    )
    logger.info(
        "Balance validation: GL=%s, Bucket=%s, Diff=%s, Balanced=%s",
        gl_total,
        bucket_total,
        difference,
        result.is_balanced,
    )
    return result


def fetch_account_balance(book: LedgerBook, account_name: str) -> Money:
    """Cumulative balance of a single account (zero when the report is empty)."""
    containers = book.get_balances(f'account:"{account_name}"')
    if not containers:
        return Money.zero()
    return containers[0].cumulative_balance


def mark_checked(bucket_book: LedgerBook, validation: BalanceValidation, transactions: list[Transaction]) -> int:
    """
    Mark derived entries as checked when the books are balanced.

    Returns:
        Number of entries checked (0 when unbalanced or nothing was created)
    """
    if not validation.is_balanced:
        logger.warning("Balance mismatch of %s - transactions NOT checked", validation.difference)
        return 0
    if not transactions:
        return 0

    bucket_book.check_transactions(transactions)
    logger.info("Checked %d transactions", len(transactions))
    return len(transactions)
