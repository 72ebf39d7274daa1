#!/usr/bin/env python3
"""
Savings Detector

Decides whether a ledger event concerns a savings account and, if so, builds
the `SavingsContext` that drives distribution.

Detection order:
1. The GL book must name a bucket book that is a sibling in its collection
2. Debited account with savings:"true" -> deposit; credited -> withdrawal
3. Otherwise the accounts' groups (debited first), unless the account itself
   is explicitly savings:"false"
4. A transaction-level `bucket` override suppresses suffix derivation
"""

import logging

from ..core.money import Money
from ..ledger.models import Account, Book, Group, Transaction
from .context import (
    BUCKET_BOOK_ID_PROPERTY,
    BUCKET_HASHTAG_PROPERTY,
    BUCKET_INCOME_ACC_PROPERTY,
    BUCKET_OVERRIDE_PROPERTY,
    BUCKET_WITHDRAWAL_ACC_PROPERTY,
    DEFAULT_INCOME_ACCOUNT,
    DEFAULT_WITHDRAWAL_ACCOUNT,
    SAVINGS_PROPERTY,
    Direction,
    NotSavings,
    SavingsContext,
    SavingsDetected,
    SavingsDetectionResult,
)
from .suffix import extract_suffix, extract_suffix_from_account

logger = logging.getLogger(__name__)


def _has_savings(account: Account) -> bool:
    return account.get_property(SAVINGS_PROPERTY) == "true"


def _savings_disabled(account: Account) -> bool:
    return account.get_property(SAVINGS_PROPERTY) == "false"


def _find_savings_group(account: Account) -> Group | None:
    """First group of the account carrying savings:"true"."""
    return next((g for g in account.groups if g.properties.get(SAVINGS_PROPERTY) == "true"), None)


def _derive_suffix(savings_account: Account, savings_group: Group | None) -> str | None:
    """Suffix from the detecting group, then the account name, then the account's groups."""
    if savings_group:
        suffix = extract_suffix(savings_group.name)
        if suffix:
            return suffix
    return extract_suffix_from_account(savings_account)


def detect_savings(book: Book, transaction: Transaction) -> SavingsDetectionResult:
    """
    Detect whether a GL transaction concerns a savings account.

    Args:
        book: GL book, including the sibling books of its collection
        transaction: The transaction the event is about

    Returns:
        SavingsDetected with a populated context, or NotSavings with a reason
    """
    bucket_book_id = book.get_property(BUCKET_BOOK_ID_PROPERTY)
    if not bucket_book_id:
        return NotSavings(reason="GL book has no bucket_book_id")

    bucket_book = book.find_sibling(bucket_book_id)
    if bucket_book is None:
        return NotSavings(reason=f"Bucket book {bucket_book_id} not found in collection")

    credit_account = transaction.credit_account
    debit_account = transaction.debit_account
    if credit_account is None or debit_account is None:
        return NotSavings(reason="Transaction is missing an account")

    savings_account: Account | None = None
    savings_group: Group | None = None
    direction = Direction.DEPOSIT

    if _has_savings(debit_account):
        savings_account = debit_account
        direction = Direction.DEPOSIT
    elif _has_savings(credit_account):
        savings_account = credit_account
        direction = Direction.WITHDRAWAL
    else:
        if not _savings_disabled(debit_account):
            savings_group = _find_savings_group(debit_account)
            if savings_group:
                savings_account = debit_account
                direction = Direction.DEPOSIT

        if savings_account is None and not _savings_disabled(credit_account):
            savings_group = _find_savings_group(credit_account)
            if savings_group:
                savings_account = credit_account
                direction = Direction.WITHDRAWAL

    if savings_account is None:
        return NotSavings(reason="No savings account or group involved")

    # Override takes precedence: suffix is never computed when it is present
    bucket_override = transaction.properties.get(BUCKET_OVERRIDE_PROPERTY) or None
    suffix = None if bucket_override else _derive_suffix(savings_account, savings_group)

    context = SavingsContext(
        bucket_book_id=bucket_book_id,
        transaction_id=transaction.id,
        date=transaction.date,
        description=transaction.description,
        amount=transaction.amount,
        direction=direction,
        savings_account_name=savings_account.name,
        savings_account_id=savings_account.id,
        savings_account_normalized_name=savings_account.normalized_name,
        savings_group_name=savings_group.name if savings_group else None,
        bucket_hashtag=bucket_book.get_property(BUCKET_HASHTAG_PROPERTY) or None,
        bucket_income_acc=bucket_book.get_property(BUCKET_INCOME_ACC_PROPERTY) or DEFAULT_INCOME_ACCOUNT,
        bucket_withdrawal_acc=(
            bucket_book.get_property(BUCKET_WITHDRAWAL_ACC_PROPERTY) or DEFAULT_WITHDRAWAL_ACCOUNT
        ),
        suffix=suffix,
        bucket_override=bucket_override,
        from_account=credit_account.name,
        to_account=debit_account.name,
    )

    logger.info(
        "Savings %s detected on %s (suffix=%s, override=%s)",
        direction.value,
        savings_account.name,
        suffix or "none",
        bucket_override or "none",
    )
    return SavingsDetected(context=context)


def build_initialization_context(
    bucket_book: Book,
    account: Account,
    balance: Money,
    description: str,
    date: str,
) -> SavingsContext:
    """
    Build the synthetic context that seeds buckets with an account's existing balance.

    The account id stands in for the transaction id, the direction is always a
    deposit and the suffix comes from the account name or its groups.

    Args:
        bucket_book: Bucket book, for the clearing account and hashtag properties
        account: The GL savings account being initialized
        balance: Cumulative GL balance of the account
        description: Description for the generated entries
        date: Entry date (YYYY-MM-DD)

    Returns:
        SavingsContext with is_initialization set
    """
    return SavingsContext(
        bucket_book_id=bucket_book.id,
        transaction_id=account.id,
        date=date,
        description=description,
        amount=balance,
        direction=Direction.DEPOSIT,
        savings_account_name=account.name,
        savings_account_id=account.id,
        savings_account_normalized_name=account.normalized_name,
        bucket_hashtag=bucket_book.get_property(BUCKET_HASHTAG_PROPERTY) or None,
        bucket_income_acc=bucket_book.get_property(BUCKET_INCOME_ACC_PROPERTY) or DEFAULT_INCOME_ACCOUNT,
        bucket_withdrawal_acc=(
            bucket_book.get_property(BUCKET_WITHDRAWAL_ACC_PROPERTY) or DEFAULT_WITHDRAWAL_ACCOUNT
        ),
        suffix=extract_suffix_from_account(account),
        from_account=account.name,
        to_account=account.name,
        is_initialization=True,
    )
