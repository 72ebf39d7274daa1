#!/usr/bin/env python3
"""
Ledger Domain Models

Type-safe models representing the remote ledger platform's data structures
(books, accounts, groups, transactions, balance reports and webhook events).
Field names follow Python conventions; `from_dict` accepts the platform's
camelCase JSON.
"""

from dataclasses import dataclass, field
from typing import Any

from ..core.money import Money

ASSET = "ASSET"


def normalize_name(name: str) -> str:
    """
    Normalize an account name the way the ledger platform does.

    Examples:
        normalize_name("Car LONG") -> "car_long"
        normalize_name("  Emergency   Fund ") -> "emergency_fund"
    """
    return "_".join(name.strip().lower().split())


@dataclass
class Group:
    """Account group from the ledger API."""

    id: str
    name: str
    properties: dict[str, str] = field(default_factory=dict)
    normalized_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Group":
        """
        Create Group from API dict.

        Args:
            data: Group object from the API or a webhook payload

        Returns:
            Group instance
        """
        name = data.get("name", "")
        return cls(
            id=data.get("id", ""),
            name=name,
            properties=dict(data.get("properties") or {}),
            normalized_name=data.get("normalizedName") or normalize_name(name),
        )


@dataclass
class Account:
    """
    Ledger account from API.

    Bucket accounts and savings accounts are both plain accounts; what makes
    them special is the `percentage` or `savings` property.
    """

    id: str
    name: str
    type: str  # "ASSET", "LIABILITY", "INCOMING", "OUTGOING"
    properties: dict[str, str] = field(default_factory=dict)
    groups: list[Group] = field(default_factory=list)
    archived: bool = False
    normalized_name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        """
        Create Account from API dict.

        Args:
            data: Account object from the API or a webhook payload

        Returns:
            Account instance
        """
        name = data.get("name", "")
        return cls(
            id=data.get("id", ""),
            name=name,
            type=data.get("type", ""),
            properties=dict(data.get("properties") or {}),
            groups=[Group.from_dict(g) for g in data.get("groups") or []],
            archived=data.get("archived") is True,
            normalized_name=data.get("normalizedName") or normalize_name(name),
        )

    @property
    def is_asset(self) -> bool:
        """Check whether this is an ASSET account."""
        return self.type == ASSET

    def get_property(self, key: str) -> str | None:
        """Get a custom property value, or None when unset."""
        return self.properties.get(key)


@dataclass
class Book:
    """
    Ledger book.

    `collection_books` holds the sibling books of the book's collection when
    the API (or a webhook payload) includes them.
    """

    id: str
    name: str
    properties: dict[str, str] = field(default_factory=dict)
    fraction_digits: int = 2
    collection_books: list["Book"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Book":
        """Create Book from API dict."""
        collection = data.get("collection") or {}
        fraction_digits = data.get("fractionDigits")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            properties=dict(data.get("properties") or {}),
            fraction_digits=int(fraction_digits) if fraction_digits is not None else 2,
            collection_books=[cls.from_dict(b) for b in collection.get("books") or []],
        )

    def get_property(self, key: str) -> str | None:
        """Get a book property value, or None when unset."""
        return self.properties.get(key)

    def find_sibling(self, book_id: str) -> "Book | None":
        """Find a book of the same collection by id."""
        return next((b for b in self.collection_books if b.id == book_id), None)


@dataclass
class Transaction:
    """Ledger transaction from API."""

    id: str
    date: str  # YYYY-MM-DD
    amount: Money
    description: str
    credit_account: Account | None = None
    debit_account: Account | None = None
    properties: dict[str, str] = field(default_factory=dict)
    remote_ids: list[str] = field(default_factory=list)
    checked: bool = False
    posted: bool = False
    trashed: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        """
        Create Transaction from API dict.

        Args:
            data: Transaction object from the API or a webhook payload

        Returns:
            Transaction instance
        """
        credit = data.get("creditAccount")
        debit = data.get("debitAccount")
        return cls(
            id=data.get("id", ""),
            date=data.get("date", ""),
            amount=Money.from_string(str(data.get("amount") or "0")),
            description=data.get("description") or "",
            credit_account=Account.from_dict(credit) if credit else None,
            debit_account=Account.from_dict(debit) if debit else None,
            properties=dict(data.get("properties") or {}),
            remote_ids=list(data.get("remoteIds") or []),
            checked=data.get("checked") is True,
            posted=data.get("posted") is True,
            trashed=data.get("trashed") is True,
        )

    def has_remote_id_prefix(self, prefix: str) -> bool:
        """Check whether any stored remote id starts with `prefix`."""
        return any(remote_id.startswith(prefix) for remote_id in self.remote_ids)


@dataclass
class TransactionDraft:
    """A transaction to be created and posted in a book."""

    date: str
    amount: Money
    description: str
    credit_account: Account
    debit_account: Account
    properties: dict[str, str] = field(default_factory=dict)
    remote_ids: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Convert to the API request body."""
        return {
            "date": self.date,
            "amount": str(self.amount),
            "description": self.description,
            "creditAccount": {"id": self.credit_account.id, "name": self.credit_account.name},
            "debitAccount": {"id": self.debit_account.id, "name": self.debit_account.name},
            "properties": dict(self.properties),
            "remoteIds": list(self.remote_ids),
        }


@dataclass
class TransactionPage:
    """One page of a transaction search; `cursor` is None on the last page."""

    items: list[Transaction]
    cursor: str | None = None


@dataclass
class BalanceContainer:
    """One account grouping of a balances report."""

    name: str
    cumulative_balance: Money

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BalanceContainer":
        """Create BalanceContainer from an API balance entry."""
        return cls(
            name=data.get("name", ""),
            cumulative_balance=Money.from_string(str(data.get("cumulativeBalance") or "0")),
        )


def _attribute_value(value: Any) -> str:
    """Render a previous attribute value the way the platform renders properties (`true`, not `True`)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass
class WebhookEvent:
    """
    Event delivered by the ledger platform.

    Transaction events carry `transaction`; account events carry `account`
    (the payload's object *is* the account). `previous_attributes` lists the
    attributes that changed, keyed by name, with their old values.
    """

    type: str
    book_id: str
    book: Book
    transaction: Transaction | None = None
    account: Account | None = None
    previous_attributes: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WebhookEvent":
        """Create WebhookEvent from the raw JSON payload."""
        event_type = data.get("type", "")
        payload_data = data.get("data") or {}
        obj = payload_data.get("object") or {}

        transaction = None
        account = None
        if event_type.startswith("ACCOUNT_"):
            if obj.get("id"):
                account = Account.from_dict(obj)
        elif obj.get("transaction"):
            transaction = Transaction.from_dict(obj["transaction"])

        book = Book.from_dict(data.get("book") or {})
        return cls(
            type=event_type,
            book_id=data.get("bookId") or book.id,
            book=book,
            transaction=transaction,
            account=account,
            previous_attributes={
                k: _attribute_value(v) for k, v in (payload_data.get("previousAttributes") or {}).items()
            },
        )
