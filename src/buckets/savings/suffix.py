#!/usr/bin/env python3
"""
Suffix Extraction

A suffix is an uppercase routing tag taken from the last word of an account
or group name ("RDB LONG" -> "LONG"). Buckets sharing a suffix form an
independently balanced subset. This module is the single place the rule lives.
"""

import re

from ..ledger.models import Account

_SUFFIX_PATTERN = re.compile(r"[A-Z]+")


def extract_suffix(name: str) -> str | None:
    """
    Extract the routing suffix from a name.

    Args:
        name: Account or group name

    Returns:
        The last whitespace-separated word when the name has at least two
        words and that word is made only of uppercase ASCII letters,
        otherwise None

    Examples:
        extract_suffix("RDB LONG") -> "LONG"
        extract_suffix("Provisioning") -> None
        extract_suffix("Bank Account") -> None
        extract_suffix("Car LONG2") -> None
    """
    parts = name.split()
    if len(parts) < 2:
        return None

    last_word = parts[-1]
    if _SUFFIX_PATTERN.fullmatch(last_word):
        return last_word
    return None


def extract_suffix_from_account(account: Account) -> str | None:
    """
    Extract a suffix from the account name, falling back to its groups in order.

    Used when building initialization contexts for a newly flagged savings account.
    """
    suffix = extract_suffix(account.name)
    if suffix:
        return suffix

    for group in account.groups:
        suffix = extract_suffix(group.name)
        if suffix:
            return suffix
    return None


def account_matches_suffix(account: Account, suffix: str) -> bool:
    """Check whether the account name or any of its group names carries `suffix`."""
    if extract_suffix(account.name) == suffix:
        return True
    return any(extract_suffix(group.name) == suffix for group in account.groups)
