#!/usr/bin/env python3
"""
Bucket Percentage Validation

Bucket accounts are ASSET accounts of the bucket book carrying a `percentage`
property. Their percentages must add up to exactly 100 before any
distribution runs; the check is repeated live for every distribution.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from ..core.amounts import HUNDRED, InvalidAmountError, parse_percentage
from ..ledger.client import LedgerBook
from ..ledger.models import Account
from ..savings.context import PERCENTAGE_PROPERTY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BucketAccount:
    """A bucket account paired with its configured percentage."""

    account: Account
    percentage: Decimal


@dataclass(frozen=True)
class PercentageValidation:
    """Outcome of the percentage check."""

    is_valid: bool
    total_percentage: Decimal
    account_count: int  # Accounts that contributed to the total
    invalid_accounts: list[str] = field(default_factory=list)  # Unparseable percentages


def is_bucket_account(account: Account) -> bool:
    """ASSET account with a percentage property set."""
    return account.is_asset and account.get_property(PERCENTAGE_PROPERTY) is not None


def list_bucket_accounts(accounts: list[Account]) -> list[BucketAccount]:
    """
    Select bucket accounts, in listing order, with parsed percentages.

    Raises:
        InvalidAmountError: If a bucket account's percentage is not a number
    """
    buckets = []
    for account in accounts:
        if not is_bucket_account(account):
            continue
        raw = account.get_property(PERCENTAGE_PROPERTY) or ""
        try:
            percentage = parse_percentage(raw)
        except InvalidAmountError as e:
            raise InvalidAmountError(f"Bucket account '{account.name}' has invalid percentage {raw!r}") from e
        buckets.append(BucketAccount(account=account, percentage=percentage))
    return buckets


def validate_percentages(bucket_book: LedgerBook) -> PercentageValidation:
    """
    Check that the bucket accounts' percentages sum to exactly 100.

    Equality is exact: percentages are operator configuration, not measured
    quantities.

    Args:
        bucket_book: The bucket book

    Returns:
        PercentageValidation with the total and the number of contributing accounts
    """
    total = Decimal(0)
    count = 0
    invalid: list[str] = []

    for account in bucket_book.list_accounts():
        if not is_bucket_account(account):
            continue
        try:
            total += parse_percentage(account.get_property(PERCENTAGE_PROPERTY) or "")
        except InvalidAmountError:
            invalid.append(account.name)
            continue
        count += 1

    is_valid = total == HUNDRED and not invalid
    if is_valid:
        logger.info("Percentage validation passed: %d accounts totaling 100%%", count)
    else:
        logger.info(
            "Percentage validation failed: %s%% (%d accounts, %d invalid)", total, count, len(invalid)
        )

    return PercentageValidation(
        is_valid=is_valid,
        total_percentage=total,
        account_count=count,
        invalid_accounts=invalid,
    )


def describe_invalid(validation: PercentageValidation) -> str:
    """Human-readable reason for a failed validation."""
    if validation.invalid_accounts:
        return f"bucket percentages are not numbers on: {', '.join(validation.invalid_accounts)}"
    return f"bucket percentages sum to {validation.total_percentage}%, not 100%"
