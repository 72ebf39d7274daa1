"""
Ledger Platform Integration Package

Typed models of the remote double-entry ledger platform and the client used
to talk to it.

Key Components:
- models: Book, Account, Group, Transaction, balance reports, webhook events
- client: LedgerClient capability surface, BkperClient (httpx), LedgerBook
"""

from .client import (
    BkperClient,
    LedgerApiError,
    LedgerBook,
    LedgerClient,
    LedgerError,
)
from .models import (
    ASSET,
    Account,
    BalanceContainer,
    Book,
    Group,
    Transaction,
    TransactionDraft,
    TransactionPage,
    WebhookEvent,
    normalize_name,
)

__all__ = [
    # Client
    "BkperClient",
    "LedgerApiError",
    "LedgerBook",
    "LedgerClient",
    "LedgerError",
    # Models
    "ASSET",
    "Account",
    "BalanceContainer",
    "Book",
    "Group",
    "Transaction",
    "TransactionDraft",
    "TransactionPage",
    "WebhookEvent",
    "normalize_name",
]
