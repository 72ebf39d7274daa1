#!/usr/bin/env python3
"""
Ledger Event Handler

Maps each ledger event to one engine action through explicit transition
tables, then runs it: detection, cleanup, percentage validation,
distribution, balance reconciliation and marking entries checked.

Transaction events:
- POSTED, UNTRASHED, RESTORED -> distribute
- UPDATED -> clean up previous entries, then distribute
- DELETED -> clean up previous entries

Account events are classified by what changed (archived state first, then
the savings flag); see ACCOUNT_UPDATE_RULES.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core.config import Config
from ..core.dates import FinancialDate
from ..distribution.percentages import describe_invalid, validate_percentages
from ..distribution.strategies import DistributionResult, distribute
from ..ledger.client import LedgerBook, LedgerClient
from ..ledger.models import Account, WebhookEvent
from ..reconciliation.balances import (
    BalanceValidation,
    fetch_account_balance,
    mark_checked,
    validate_balances,
)
from ..reconciliation.cleanup import (
    VERIFY_MAX_RETRIES,
    VERIFY_RETRY_DELAY_MS,
    cleanup_by_gl_account_id,
    cleanup_by_gl_id,
)
from ..savings.context import BUCKET_BOOK_ID_PROPERTY, SAVINGS_PROPERTY, SavingsContext
from ..savings.detector import build_initialization_context, detect_savings

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Ledger event types the handler understands."""

    TRANSACTION_POSTED = "TRANSACTION_POSTED"
    TRANSACTION_UPDATED = "TRANSACTION_UPDATED"
    TRANSACTION_DELETED = "TRANSACTION_DELETED"
    TRANSACTION_UNTRASHED = "TRANSACTION_UNTRASHED"
    TRANSACTION_RESTORED = "TRANSACTION_RESTORED"
    ACCOUNT_UPDATED = "ACCOUNT_UPDATED"
    ACCOUNT_DELETED = "ACCOUNT_DELETED"


class Action(Enum):
    """What the handler does for an event."""

    IGNORE = "ignore"
    DISTRIBUTE = "distribute"
    REDISTRIBUTE = "redistribute"
    CLEANUP = "cleanup"
    ARCHIVE_CLEANUP = "archive_cleanup"
    INITIALIZATION = "initialization"
    UNARCHIVE_INITIALIZATION = "unarchive_initialization"


TRANSACTION_TRANSITIONS: dict[EventKind, Action] = {
    EventKind.TRANSACTION_POSTED: Action.DISTRIBUTE,
    EventKind.TRANSACTION_UPDATED: Action.REDISTRIBUTE,
    EventKind.TRANSACTION_DELETED: Action.CLEANUP,
    # Old entries stay trashed; timestamped remote ids keep new ones distinct
    EventKind.TRANSACTION_UNTRASHED: Action.DISTRIBUTE,
    EventKind.TRANSACTION_RESTORED: Action.DISTRIBUTE,
}

INITIALIZATION_DESCRIPTIONS = {
    Action.INITIALIZATION: "Initial balance",
    Action.UNARCHIVE_INITIALIZATION: "Balance after unarchive",
}


@dataclass(frozen=True)
class AccountChange:
    """
    State of an account-updated event.

    The platform reports the archived state change as `active` in the
    previous attributes, with inverted meaning: active "false" means the
    account *was* archived.
    """

    archived_changed: bool
    archived_now: bool
    archived_before: bool
    savings_changed: bool
    savings_now: str | None
    savings_before: str | None

    @classmethod
    def from_event(cls, account: Account, previous_attributes: dict[str, str]) -> "AccountChange":
        return cls(
            archived_changed="active" in previous_attributes,
            archived_now=account.archived,
            archived_before=previous_attributes.get("active") == "false",
            savings_changed=SAVINGS_PROPERTY in previous_attributes,
            savings_now=account.get_property(SAVINGS_PROPERTY),
            savings_before=previous_attributes.get(SAVINGS_PROPERTY),
        )


# Ordered: the first matching rule wins, archive changes before savings changes
ACCOUNT_UPDATE_RULES: list[tuple[Callable[[AccountChange], bool], Action]] = [
    (
        lambda c: c.archived_changed and c.archived_now and not c.archived_before and c.savings_now == "true",
        Action.ARCHIVE_CLEANUP,
    ),
    (
        lambda c: c.archived_changed and not c.archived_now and c.archived_before and c.savings_now == "true",
        Action.UNARCHIVE_INITIALIZATION,
    ),
    (
        lambda c: c.savings_changed
        and c.savings_now == "true"
        and c.savings_before != "true"
        and not c.archived_now,
        Action.INITIALIZATION,
    ),
    (
        lambda c: c.savings_changed and c.savings_before == "true" and c.savings_now != "true",
        Action.CLEANUP,
    ),
]


def classify_account_update(change: AccountChange) -> Action:
    """Apply ACCOUNT_UPDATE_RULES to an account change."""
    for predicate, action in ACCOUNT_UPDATE_RULES:
        if predicate(change):
            return action
    return Action.IGNORE


def classify_event(event: WebhookEvent) -> Action:
    """
    Decide the action for an event without touching the ledger.

    Transaction events still go through savings detection before the
    action runs.
    """
    try:
        kind = EventKind(event.type)
    except ValueError:
        return Action.IGNORE

    if kind in TRANSACTION_TRANSITIONS:
        return TRANSACTION_TRANSITIONS[kind]

    if event.account is None:
        return Action.IGNORE
    if kind == EventKind.ACCOUNT_DELETED:
        return Action.CLEANUP if event.account.get_property(SAVINGS_PROPERTY) == "true" else Action.IGNORE
    return classify_account_update(AccountChange.from_event(event.account, event.previous_attributes))


def cleanup_dates(date: str, previous_attributes: dict[str, str]) -> list[str]:
    """
    Dates to search for derived entries of a GL transaction.

    Entries carry the GL transaction's date, so an edit that moved the date
    leaves the old entries on the previous one.
    """
    previous_date = previous_attributes.get("date")
    if previous_date and previous_date != date:
        return [date, previous_date]
    return [date]


@dataclass
class EventOutcome:
    """What the handler did for one event."""

    success: bool
    action: Action
    message: str | None = None
    error: str | None = None
    trashed_count: int = 0
    distribution: DistributionResult | None = None
    balance_validation: BalanceValidation | None = None
    checked_count: int = 0
    account_id: str | None = None
    account_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly summary."""
        result: dict[str, Any] = {"success": self.success, "action": self.action.value}
        if self.message:
            result["message"] = self.message
        if self.error:
            result["error"] = self.error
        if self.action in (Action.CLEANUP, Action.ARCHIVE_CLEANUP, Action.REDISTRIBUTE):
            result["trashedCount"] = self.trashed_count
        if self.distribution is not None:
            result["distributed"] = str(self.distribution.total_distributed)
            result["transactions"] = self.distribution.transaction_count
        if self.balance_validation is not None:
            result["balanceValidation"] = {
                "isBalanced": self.balance_validation.is_balanced,
                "glTotal": str(self.balance_validation.gl_total),
                "bucketTotal": str(self.balance_validation.bucket_total),
                "difference": str(self.balance_validation.difference),
            }
            result["checkedCount"] = self.checked_count
        if self.account_id:
            result["accountId"] = self.account_id
            result["accountName"] = self.account_name
        return result


class EventHandler:
    """
    Runs the engine for one ledger event at a time.

    Holds no state between events beyond its collaborators.
    """

    def __init__(
        self,
        client: LedgerClient,
        max_retries: int = VERIFY_MAX_RETRIES,
        retry_delay_ms: int = VERIFY_RETRY_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], str] | None = None,
        clock: Callable[[], int] | None = None,
    ):
        """
        Initialize the handler.

        Args:
            client: Authenticated ledger client
            max_retries: Trash verification retry rounds
            retry_delay_ms: Delay between verification rounds
            sleep: Sleep function used by verification
            today: Returns today's date (YYYY-MM-DD) for initialization entries
            clock: Millisecond clock for remote ids
        """
        self.client = client
        self.max_retries = max_retries
        self.retry_delay_ms = retry_delay_ms
        self.sleep = sleep
        self.today = today or (lambda: FinancialDate.today().to_iso_string())
        self.clock = clock

    @classmethod
    def from_config(cls, client: LedgerClient, config: Config) -> "EventHandler":
        return cls(
            client,
            max_retries=config.verification.max_retries,
            retry_delay_ms=config.verification.retry_delay_ms,
        )

    def handle(self, event: WebhookEvent) -> EventOutcome:
        """
        Handle one event.

        Args:
            event: Parsed ledger event

        Returns:
            EventOutcome describing the action taken
        """
        action = classify_event(event)
        logger.info("Event %s -> %s", event.type, action.value)

        if action == Action.IGNORE:
            return EventOutcome(success=True, action=action, message="No relevant change")

        if event.account is not None:
            return self._handle_account(event, event.account, action)
        return self._handle_transaction(event, action)

    def _cleanup_kwargs(self) -> dict[str, Any]:
        return {"max_retries": self.max_retries, "retry_delay_ms": self.retry_delay_ms, "sleep": self.sleep}

    def _distribute_kwargs(self) -> dict[str, Any]:
        return {"clock": self.clock} if self.clock else {}

    def _handle_transaction(self, event: WebhookEvent, action: Action) -> EventOutcome:
        if event.transaction is None:
            return EventOutcome(success=True, action=Action.IGNORE, message="Event carries no transaction")

        detection = detect_savings(event.book, event.transaction)
        if not detection.is_savings:
            logger.info("Not a savings transaction: %s", detection.reason)
            return EventOutcome(success=True, action=Action.IGNORE, message=detection.reason)

        context = detection.context
        bucket_book = LedgerBook.open(self.client, context.bucket_book_id)
        logger.info("Bucket book: %s", bucket_book.name)

        trashed = 0
        if action in (Action.CLEANUP, Action.REDISTRIBUTE):
            for date in cleanup_dates(context.date, event.previous_attributes):
                trashed += cleanup_by_gl_id(
                    bucket_book,
                    context.bucket_hashtag or "",
                    date,
                    context.transaction_id,
                    **self._cleanup_kwargs(),
                )
            if action == Action.CLEANUP:
                return EventOutcome(success=True, action=action, trashed_count=trashed)

        outcome = self._distribute_and_reconcile(event.book_id, bucket_book, context, action)
        outcome.trashed_count = trashed
        return outcome

    def _handle_account(self, event: WebhookEvent, account: Account, action: Action) -> EventOutcome:
        bucket_book_id = event.book.get_property(BUCKET_BOOK_ID_PROPERTY)
        if not bucket_book_id:
            return EventOutcome(success=True, action=Action.IGNORE, message="GL book has no bucket_book_id")

        if action in (Action.CLEANUP, Action.ARCHIVE_CLEANUP):
            bucket_book = LedgerBook.open(self.client, bucket_book_id)
            trashed = cleanup_by_gl_account_id(bucket_book, account.id, **self._cleanup_kwargs())
            logger.info("Trashed %d bucket transactions for account %s", trashed, account.name)
            return EventOutcome(
                success=True,
                action=action,
                trashed_count=trashed,
                account_id=account.id,
                account_name=account.name,
            )

        return self._initialize_account(event.book_id, bucket_book_id, account, action)

    def _initialize_account(
        self, gl_book_id: str, bucket_book_id: str, account: Account, action: Action
    ) -> EventOutcome:
        """Seed the buckets with the existing balance of a newly active savings account."""
        if not account.is_asset:
            return EventOutcome(
                success=True,
                action=Action.IGNORE,
                message=f"Account type is {account.type}, not ASSET - skipping initialization",
            )

        gl_book = LedgerBook.open(self.client, gl_book_id)
        balance = fetch_account_balance(gl_book, account.name)
        if not balance.is_positive():
            return EventOutcome(
                success=True,
                action=Action.IGNORE,
                message=f"Account balance is {balance}, skipping initialization (must be > 0)",
            )

        bucket_book = LedgerBook.open(self.client, bucket_book_id)
        context = build_initialization_context(
            bucket_book.book,
            account,
            balance,
            INITIALIZATION_DESCRIPTIONS[action],
            self.today(),
        )
        logger.info("Initializing %s for balance %s (suffix=%s)", account.name, balance, context.suffix or "none")

        outcome = self._distribute_and_reconcile(gl_book_id, bucket_book, context, action, gl_book)
        outcome.account_id = account.id
        outcome.account_name = account.name
        return outcome

    def _distribute_and_reconcile(
        self,
        gl_book_id: str,
        bucket_book: LedgerBook,
        context: SavingsContext,
        action: Action,
        gl_book: LedgerBook | None = None,
    ) -> EventOutcome:
        """Validate percentages, distribute, then check entries if the books balance."""
        verb = "initialize" if context.is_initialization else "distribute"

        validation = validate_percentages(bucket_book)
        if not validation.is_valid:
            return EventOutcome(success=False, action=action, error=f"Cannot {verb}: {describe_invalid(validation)}")

        distribution = distribute(bucket_book, context, **self._distribute_kwargs())
        if not distribution.success:
            logger.error("Distribution failed: %s", distribution.error)
            return EventOutcome(success=False, action=action, error=distribution.error, distribution=distribution)

        if gl_book is None:
            gl_book = LedgerBook.open(self.client, gl_book_id)
        balance_validation = validate_balances(gl_book, bucket_book)
        checked = mark_checked(bucket_book, balance_validation, list(getattr(distribution, "transactions", [])))

        return EventOutcome(
            success=True,
            action=action,
            distribution=distribution,
            balance_validation=balance_validation,
            checked_count=checked,
        )

