"""
Reconciliation Package

Keeps the bucket book consistent with the GL book.

Key Components:
- matcher: locate entries derived from a GL transaction or account
- cleanup: trash matched entries and verify the trash with bounded retry
- balances: GL versus bucket totals and marking entries checked
"""

from .balances import (
    BALANCE_TOLERANCE,
    BalanceValidation,
    build_accounts_query,
    fetch_account_balance,
    get_bucket_total,
    get_gl_savings_total,
    mark_checked,
    validate_balances,
)
from .cleanup import (
    VERIFY_MAX_RETRIES,
    VERIFY_RETRY_DELAY_MS,
    cleanup_by_gl_account_id,
    cleanup_by_gl_id,
    trash_entries,
    verify_trashed,
)
from .matcher import build_gl_id_query, find_by_gl_account_id, find_by_gl_id

__all__ = [
    # Balances
    "BALANCE_TOLERANCE",
    "BalanceValidation",
    "build_accounts_query",
    "fetch_account_balance",
    "get_bucket_total",
    "get_gl_savings_total",
    "mark_checked",
    "validate_balances",
    # Cleanup
    "VERIFY_MAX_RETRIES",
    "VERIFY_RETRY_DELAY_MS",
    "cleanup_by_gl_account_id",
    "cleanup_by_gl_id",
    "trash_entries",
    "verify_trashed",
    # Matching
    "build_gl_id_query",
    "find_by_gl_account_id",
    "find_by_gl_id",
]
