#!/usr/bin/env python3
"""
Savings Context

The immutable value object built once per event and carried through every
downstream stage, plus the property names that form the operational contract
with the ledger books.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from ..core.money import Money

# GL book
BUCKET_BOOK_ID_PROPERTY = "bucket_book_id"
# GL accounts and groups
SAVINGS_PROPERTY = "savings"
# Bucket book
BUCKET_INCOME_ACC_PROPERTY = "bucket_income_acc"
BUCKET_WITHDRAWAL_ACC_PROPERTY = "bucket_withdrawal_acc"
BUCKET_HASHTAG_PROPERTY = "bucket_hashtag"
# Bucket accounts
PERCENTAGE_PROPERTY = "percentage"
# GL transactions
BUCKET_OVERRIDE_PROPERTY = "bucket"
# Derived bucket entries
GL_ACCOUNT_ID_PROPERTY = "gl_account_id"

DEFAULT_INCOME_ACCOUNT = "Savings"
DEFAULT_WITHDRAWAL_ACCOUNT = "Withdrawal"


class Direction(Enum):
    """Which way money moved relative to the savings account."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass(frozen=True)
class SavingsContext:
    """
    Everything the distribution and cleanup stages need about one event.

    `transaction_id` is the GL transaction id, or the savings account id for
    synthetic initialization events. At most one of `suffix` and
    `bucket_override` is set; the override always wins and suffix extraction
    is skipped when it is present.
    """

    # Identity
    bucket_book_id: str
    transaction_id: str
    date: str  # YYYY-MM-DD
    description: str
    amount: Money

    # Routing
    direction: Direction

    # Provenance
    savings_account_name: str
    savings_account_id: str
    savings_account_normalized_name: str
    savings_group_name: str | None = None

    # Bucket book configuration
    bucket_hashtag: str | None = None
    bucket_income_acc: str = DEFAULT_INCOME_ACCOUNT
    bucket_withdrawal_acc: str = DEFAULT_WITHDRAWAL_ACCOUNT

    suffix: str | None = None
    bucket_override: str | None = None  # e.g. "Car LONG, Holiday"

    from_account: str = ""
    to_account: str = ""
    is_initialization: bool = False

    def __post_init__(self) -> None:
        if self.suffix and self.bucket_override:
            raise ValueError("A savings context cannot carry both a suffix and a bucket override")

    @property
    def source_id(self) -> str:
        """Identifier embedded in remote ids of entries derived from this context."""
        return self.savings_account_id if self.is_initialization else self.transaction_id

    @property
    def gl_hashtag(self) -> str:
        """Back-reference hashtag naming the savings account."""
        return f"#gl_{self.savings_account_normalized_name}"


@dataclass(frozen=True)
class SavingsDetected:
    """The event concerns a savings account."""

    context: SavingsContext
    is_savings: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True)
class NotSavings:
    """The event does not concern a savings account; the caller no-ops."""

    reason: str
    is_savings: Literal[False] = field(default=False, init=False)


SavingsDetectionResult = SavingsDetected | NotSavings
