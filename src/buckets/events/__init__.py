"""
Events Package

Turns ledger events into engine actions.

Key Components:
- EventHandler: runs detection, cleanup, distribution and reconciliation
- classify_event: the transaction and account-update transition tables
"""

from .handler import (
    ACCOUNT_UPDATE_RULES,
    TRANSACTION_TRANSITIONS,
    AccountChange,
    Action,
    EventHandler,
    EventKind,
    EventOutcome,
    classify_account_update,
    classify_event,
    cleanup_dates,
)

__all__ = [
    # Transitions
    "ACCOUNT_UPDATE_RULES",
    "TRANSACTION_TRANSITIONS",
    "AccountChange",
    "Action",
    "EventKind",
    "classify_account_update",
    "classify_event",
    # Handling
    "EventHandler",
    "EventOutcome",
    "cleanup_dates",
]
