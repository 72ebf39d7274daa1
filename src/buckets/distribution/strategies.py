#!/usr/bin/env python3
"""
Bucket Distribution Strategies

Mirrors a savings event into the bucket book as one entry per target bucket
account. Three mutually exclusive strategies:
1. Full - every bucket account, by configured percentage
2. Suffix-filtered - bucket accounts sharing the event's suffix, with their
   percentages renormalized to 100
3. Override - the accounts named in the transaction's `bucket` property,
   split equally

Entry amounts are rounded down to the bucket book's precision and the units
left over go to the largest dropped fractions, so no entry changes sign and
the entries always add up to the event amount.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal

from ..core.amounts import HUNDRED, InvalidAmountError, allocate_proportionally, fold_remainder
from ..core.money import Money
from ..ledger.client import LedgerBook, LedgerError
from ..ledger.models import Account, Transaction, TransactionDraft
from ..savings.context import GL_ACCOUNT_ID_PROPERTY, Direction, SavingsContext
from ..savings.suffix import account_matches_suffix
from .percentages import BucketAccount, list_bucket_accounts

logger = logging.getLogger(__name__)

INIT_PREFIX = "init_"


@dataclass(frozen=True)
class Distributed:
    """Entries were created for every target account."""

    transactions: list[Transaction]
    total_distributed: Decimal
    success: Literal[True] = field(default=True, init=False)
    skipped: Literal[False] = field(default=False, init=False)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True)
class DistributionSkipped:
    """The strategy does not apply to this context; nothing was created."""

    reason: str
    success: Literal[True] = field(default=True, init=False)
    skipped: Literal[True] = field(default=True, init=False)
    transaction_count: int = field(default=0, init=False)
    total_distributed: Decimal = field(default=Decimal(0), init=False)


@dataclass(frozen=True)
class DistributionFailed:
    """
    Distribution was refused or stopped.

    Configuration errors fail before anything is created. A remote failure
    partway through leaves the entries already created in `transactions`;
    they are not rolled back.
    """

    error: str
    transactions: list[Transaction] = field(default_factory=list)
    total_distributed: Decimal = Decimal(0)
    success: Literal[False] = field(default=False, init=False)
    skipped: Literal[False] = field(default=False, init=False)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)


DistributionResult = Distributed | DistributionSkipped | DistributionFailed


def _now_millis() -> int:
    return int(time.time() * 1000)


def build_remote_id(
    identifier: str,
    normalized_account_name: str,
    is_initialization: bool = False,
    clock: Callable[[], int] = _now_millis,
) -> str:
    """
    Build the remote id stored on a derived entry.

    Format: {identifier}_{normalizedAccountName}_{timestamp}, with an `init_`
    prefix for initialization entries. The millisecond timestamp keeps ids of
    repeated distributions for the same source distinct.

    Examples:
        build_remote_id("tx1", "car_long") -> "tx1_car_long_1735689600000"
        build_remote_id("acc9", "car_long", True) -> "init_acc9_car_long_1735689600000"
    """
    prefix = INIT_PREFIX if is_initialization else ""
    return f"{prefix}{identifier}_{normalized_account_name}_{clock()}"


def build_description(context: SavingsContext) -> str:
    """Base description, then the bucket hashtag if configured, then the GL back-reference."""
    parts = [context.description]
    if context.bucket_hashtag:
        parts.append(context.bucket_hashtag)
    parts.append(context.gl_hashtag)
    return " ".join(part for part in parts if part)


def _post_entries(
    book: LedgerBook,
    context: SavingsContext,
    targets: list[tuple[Account, Decimal]],
    clock: Callable[[], int],
) -> DistributionResult:
    """Create one entry per (bucket account, percentage) target."""
    if not targets:
        return DistributionFailed(error="No bucket accounts found in bucket book")

    if context.direction == Direction.DEPOSIT:
        clearing_name = context.bucket_income_acc
    else:
        clearing_name = context.bucket_withdrawal_acc

    clearing_account = book.get_account(clearing_name)
    if clearing_account is None:
        return DistributionFailed(error=f"Clearing account '{clearing_name}' not found in bucket book")

    amounts = allocate_proportionally(
        context.amount.to_decimal(), [pct for _, pct in targets], book.fraction_digits
    )
    description = build_description(context)

    transactions: list[Transaction] = []
    total = Decimal(0)

    for (bucket_account, _), amount in zip(targets, amounts):
        remote_id = build_remote_id(
            context.source_id,
            bucket_account.normalized_name,
            context.is_initialization,
            clock,
        )

        if context.direction == Direction.DEPOSIT:
            credit_account, debit_account = clearing_account, bucket_account
        else:
            credit_account, debit_account = bucket_account, clearing_account

        draft = TransactionDraft(
            date=context.date,
            amount=Money.from_decimal(amount),
            description=description,
            credit_account=credit_account,
            debit_account=debit_account,
            properties={GL_ACCOUNT_ID_PROPERTY: context.savings_account_id},
            remote_ids=[remote_id],
        )

        try:
            posted = book.create_transaction(draft)
        except LedgerError as e:
            logger.error(
                "Distribution stopped after %d of %d entries: %s", len(transactions), len(targets), e
            )
            return DistributionFailed(
                error=f"Failed to create entry for '{bucket_account.name}': {e}",
                transactions=transactions,
                total_distributed=total,
            )

        logger.debug("Created %s -> %s: %s (%s)", credit_account.name, debit_account.name, amount, remote_id)
        transactions.append(posted)
        total += amount

    logger.info("Distributed %s to %d buckets", total, len(transactions))
    return Distributed(transactions=transactions, total_distributed=total)


def distribute_to_all_buckets(
    book: LedgerBook,
    context: SavingsContext,
    clock: Callable[[], int] = _now_millis,
) -> DistributionResult:
    """
    Distribute to every bucket account by its configured percentage.

    Only runs for unqualified events: a context carrying a suffix or an
    override is skipped without creating anything.

    Args:
        book: The bucket book
        context: Savings context of the event
        clock: Millisecond clock for remote ids

    Returns:
        DistributionResult
    """
    if context.suffix or context.bucket_override:
        return DistributionSkipped(reason="Context is routed by suffix or override")

    try:
        buckets = list_bucket_accounts(book.list_accounts())
    except InvalidAmountError as e:
        return DistributionFailed(error=str(e))

    return _post_entries(book, context, [(b.account, b.percentage) for b in buckets], clock)


def renormalize_percentages(buckets: list[BucketAccount]) -> list[Decimal]:
    """
    Rescale a subset's percentages so they sum to exactly 100.

    Each share becomes original / sum(originals) * 100; the residual left by
    division is folded into the first account.

    Raises:
        ValueError: If the subset's percentages sum to zero
    """
    original_sum = sum((b.percentage for b in buckets), Decimal(0))
    if original_sum == 0:
        raise ValueError("Matched bucket percentages sum to 0")

    rescaled = [b.percentage / original_sum * HUNDRED for b in buckets]
    return fold_remainder(rescaled, HUNDRED)


def distribute_to_suffix_buckets(
    book: LedgerBook,
    context: SavingsContext,
    clock: Callable[[], int] = _now_millis,
) -> DistributionResult:
    """
    Distribute to the bucket accounts whose name or group carries the context's suffix.

    An empty match is an error, not a skip: the operator is presumed to have
    forgotten to configure buckets for the suffix.

    Args:
        book: The bucket book
        context: Savings context with a suffix
        clock: Millisecond clock for remote ids

    Returns:
        DistributionResult
    """
    suffix = context.suffix
    if not suffix:
        return DistributionFailed(error="No suffix provided")

    try:
        buckets = list_bucket_accounts(book.list_accounts())
    except InvalidAmountError as e:
        return DistributionFailed(error=str(e))

    matching = [b for b in buckets if account_matches_suffix(b.account, suffix)]
    if not matching:
        return DistributionFailed(error=f"No accounts match suffix '{suffix}' in bucket book")

    try:
        percentages = renormalize_percentages(matching)
    except ValueError:
        return DistributionFailed(error=f"Accounts matching suffix '{suffix}' have a total percentage of 0")

    logger.info("Suffix %s matched %d of %d bucket accounts", suffix, len(matching), len(buckets))
    targets = [(b.account, pct) for b, pct in zip(matching, percentages)]
    return _post_entries(book, context, targets, clock)


def parse_override(bucket_override: str) -> list[str]:
    """Split a comma-separated override into trimmed, non-empty account names."""
    return [name.strip() for name in bucket_override.split(",") if name.strip()]


def distribute_to_override_buckets(
    book: LedgerBook,
    context: SavingsContext,
    clock: Callable[[], int] = _now_millis,
) -> DistributionResult:
    """
    Distribute equally to the accounts named in the context's override.

    Configured percentages are ignored. Every missing account name is
    reported, not just the first.

    Args:
        book: The bucket book
        context: Savings context with a bucket override
        clock: Millisecond clock for remote ids

    Returns:
        DistributionResult
    """
    names = parse_override(context.bucket_override or "")
    if not names:
        return DistributionFailed(error="No bucket override provided")

    accounts: list[Account] = []
    missing: list[str] = []
    for name in names:
        account = book.get_account(name)
        if account is None:
            missing.append(name)
        else:
            accounts.append(account)

    if missing:
        return DistributionFailed(error=f"Accounts not found: {', '.join(missing)}")

    percentage = HUNDRED / len(accounts)
    logger.info("Override distribution to %d accounts", len(accounts))
    return _post_entries(book, context, [(a, percentage) for a in accounts], clock)


def distribute(
    book: LedgerBook,
    context: SavingsContext,
    clock: Callable[[], int] = _now_millis,
) -> DistributionResult:
    """
    Run the strategy the context selects: override, then suffix, then full.

    Callers validate percentages first.
    """
    if context.bucket_override:
        logger.info("Using override distribution: %s", context.bucket_override)
        return distribute_to_override_buckets(book, context, clock)
    if context.suffix:
        logger.info("Using suffix-based distribution: %s", context.suffix)
        return distribute_to_suffix_buckets(book, context, clock)
    logger.info("Using percentage-based distribution to all buckets")
    return distribute_to_all_buckets(book, context, clock)
