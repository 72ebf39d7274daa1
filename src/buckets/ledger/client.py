#!/usr/bin/env python3
"""
Ledger Platform Client

Capability surface the engine needs from the remote ledger platform, an HTTP
implementation of it, and `LedgerBook`, the book-scoped handle that is passed
explicitly into every engine call.

Classes:
- LedgerClient: abstract capability surface (books, accounts, groups,
  transaction search/create/trash/check, balance reports)
- BkperClient: implementation over the platform's REST API using httpx
- LedgerBook: one client bound to one book
"""

import logging
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx

from ..core.config import LedgerConfig
from .models import (
    Account,
    BalanceContainer,
    Book,
    Group,
    Transaction,
    TransactionDraft,
    TransactionPage,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.bkper.app/v5"


class LedgerError(Exception):
    """Raised when the ledger platform cannot be reached or misbehaves."""

    pass


class LedgerApiError(LedgerError):
    """Raised when the ledger platform answers with a non-success status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Ledger API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class LedgerClient(ABC):
    """
    Abstract capability surface of the remote ledger platform.

    Every method is blocking. Implementations raise `LedgerError` for
    transport and API failures.
    """

    @abstractmethod
    def get_book(self, book_id: str) -> Book:
        """Fetch a book with its properties."""

    @abstractmethod
    def list_accounts(self, book_id: str) -> list[Account]:
        """List all accounts of a book, with properties and group memberships."""

    @abstractmethod
    def list_groups(self, book_id: str) -> list[Group]:
        """List all groups of a book."""

    @abstractmethod
    def get_account(self, book_id: str, name: str) -> Account | None:
        """Look up an account by exact name; None when it does not exist."""

    @abstractmethod
    def list_transactions(self, book_id: str, query: str, cursor: str | None = None) -> TransactionPage:
        """Search transactions with a platform query, one page per call."""

    @abstractmethod
    def create_transaction(self, book_id: str, draft: TransactionDraft) -> Transaction:
        """Create and post a transaction."""

    @abstractmethod
    def trash_transactions(self, book_id: str, transaction_ids: list[str], trash_checked: bool = True) -> None:
        """Batch soft-delete transactions, optionally un-checking checked ones first."""

    @abstractmethod
    def check_transactions(self, book_id: str, transaction_ids: list[str]) -> None:
        """Batch mark transactions as checked (reconciled)."""

    @abstractmethod
    def get_balances(self, book_id: str, query: str) -> list[BalanceContainer]:
        """Fetch a balances report; one container per matched account."""

    @abstractmethod
    def get_transaction(self, book_id: str, transaction_id: str) -> Transaction | None:
        """Fetch a single transaction by id; None when it does not exist."""


class BkperClient(LedgerClient):
    """
    Ledger client over the platform's REST API.

    Authenticates with an OAuth bearer token and identifies the application
    with its API key.
    """

    def __init__(
        self,
        api_key: str | None = None,
        oauth_token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        page_size: int = 100,
        http_client: httpx.Client | None = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Application API key, sent as the `key` query parameter
            oauth_token: User OAuth token, sent as a bearer token
            base_url: API root URL
            timeout: Request timeout in seconds
            page_size: Transactions requested per search page
            http_client: Preconfigured httpx client (tests inject a mock transport)
        """
        self.page_size = page_size
        headers = {"Accept": "application/json"}
        if oauth_token:
            headers["Authorization"] = f"Bearer {oauth_token}"
        params = {"key": api_key} if api_key else {}

        if http_client is None:
            http_client = httpx.Client(base_url=base_url, timeout=timeout)
        http_client.headers.update(headers)
        http_client.params = http_client.params.merge(params)
        self._http = http_client
        self._group_cache: dict[str, dict[str, Group]] = {}

    @classmethod
    def from_config(cls, config: LedgerConfig, oauth_token: str | None = None) -> "BkperClient":
        """Build a client from configuration; an explicit token overrides the configured one."""
        return cls(
            api_key=config.api_key,
            oauth_token=oauth_token or config.oauth_token,
            base_url=config.base_url,
            timeout=config.timeout,
            page_size=config.page_size,
        )

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def __enter__(self) -> "BkperClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and decode the JSON body (None for empty bodies)."""
        logger.debug("%s %s %s", method, path, params or "")
        try:
            response = self._http.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise LedgerApiError(e.response.status_code, _error_message(e.response)) from e
        except httpx.HTTPError as e:
            raise LedgerError(f"Request to {path} failed: {e}") from e

        if not response.content:
            return None
        return response.json()

    def _get_or_none(self, path: str) -> Any:
        """GET that maps 404 to None."""
        try:
            return self._request("GET", path)
        except LedgerApiError as e:
            if e.status_code == 404:
                return None
            raise

    def get_book(self, book_id: str) -> Book:
        data = self._request("GET", f"/books/{book_id}")
        return Book.from_dict(data or {})

    def list_groups(self, book_id: str) -> list[Group]:
        data = self._request("GET", f"/books/{book_id}/groups") or {}
        groups = [Group.from_dict(g) for g in data.get("items", [])]
        self._group_cache[book_id] = {g.id: g for g in groups}
        return groups

    def list_accounts(self, book_id: str) -> list[Account]:
        data = self._request("GET", f"/books/{book_id}/accounts") or {}
        accounts = [Account.from_dict(a) for a in data.get("items", [])]
        self._resolve_group_names(book_id, accounts)
        return accounts

    def get_account(self, book_id: str, name: str) -> Account | None:
        data = self._get_or_none(f"/books/{book_id}/accounts/{quote(name, safe='')}")
        if not data:
            return None
        account = Account.from_dict(data)
        self._resolve_group_names(book_id, [account])
        return account

    def _resolve_group_names(self, book_id: str, accounts: list[Account]) -> None:
        """Fill in names and properties for groups the API returned by id only."""
        if not any(not g.name for a in accounts for g in a.groups):
            return
        if book_id not in self._group_cache:
            self.list_groups(book_id)
        known = self._group_cache[book_id]
        for account in accounts:
            account.groups = [known.get(g.id, g) if not g.name else g for g in account.groups]

    def list_transactions(self, book_id: str, query: str, cursor: str | None = None) -> TransactionPage:
        params: dict[str, Any] = {"query": query, "limit": self.page_size}
        if cursor:
            params["cursor"] = cursor
        data = self._request("GET", f"/books/{book_id}/transactions", params=params) or {}
        return TransactionPage(
            items=[Transaction.from_dict(t) for t in data.get("items", [])],
            cursor=data.get("cursor") or None,
        )

    def create_transaction(self, book_id: str, draft: TransactionDraft) -> Transaction:
        created = self._request("POST", f"/books/{book_id}/transactions", json=draft.to_payload())
        posted = self._request("PATCH", f"/books/{book_id}/transactions/post", json=created)
        return Transaction.from_dict(posted or created)

    def trash_transactions(self, book_id: str, transaction_ids: list[str], trash_checked: bool = True) -> None:
        if not transaction_ids:
            return
        self._request(
            "PATCH",
            f"/books/{book_id}/transactions/trash/batch",
            params={"trashChecked": str(trash_checked).lower()},
            json={"items": [{"id": tx_id} for tx_id in transaction_ids]},
        )

    def check_transactions(self, book_id: str, transaction_ids: list[str]) -> None:
        if not transaction_ids:
            return
        self._request(
            "PATCH",
            f"/books/{book_id}/transactions/check/batch",
            json={"items": [{"id": tx_id} for tx_id in transaction_ids]},
        )

    def get_balances(self, book_id: str, query: str) -> list[BalanceContainer]:
        data = self._request("GET", f"/books/{book_id}/balances", params={"query": query}) or {}
        return [BalanceContainer.from_dict(b) for b in data.get("accountBalances", [])]

    def get_transaction(self, book_id: str, transaction_id: str) -> Transaction | None:
        data = self._get_or_none(f"/books/{book_id}/transactions/{transaction_id}")
        return Transaction.from_dict(data) if data else None


def _error_message(response: httpx.Response) -> str:
    """Extract the platform's error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(error or body)


class LedgerBook:
    """
    A ledger client bound to one book.

    The engine receives LedgerBook handles explicitly; nothing in the engine
    reaches for a process-wide session.
    """

    def __init__(self, client: LedgerClient, book: Book):
        self.client = client
        self.book = book

    @classmethod
    def open(cls, client: LedgerClient, book_id: str) -> "LedgerBook":
        """Fetch a book and bind it to `client`."""
        return cls(client, client.get_book(book_id))

    @property
    def id(self) -> str:
        return self.book.id

    @property
    def name(self) -> str:
        return self.book.name

    @property
    def fraction_digits(self) -> int:
        return self.book.fraction_digits

    def get_property(self, key: str) -> str | None:
        return self.book.get_property(key)

    def list_accounts(self) -> list[Account]:
        return self.client.list_accounts(self.id)

    def get_account(self, name: str) -> Account | None:
        return self.client.get_account(self.id, name)

    def list_transactions(self, query: str, cursor: str | None = None) -> TransactionPage:
        return self.client.list_transactions(self.id, query, cursor)

    def create_transaction(self, draft: TransactionDraft) -> Transaction:
        return self.client.create_transaction(self.id, draft)

    def trash_transactions(self, transactions: list[Transaction], trash_checked: bool = True) -> None:
        self.client.trash_transactions(self.id, [tx.id for tx in transactions], trash_checked)

    def check_transactions(self, transactions: list[Transaction]) -> None:
        self.client.check_transactions(self.id, [tx.id for tx in transactions])

    def get_balances(self, query: str) -> list[BalanceContainer]:
        return self.client.get_balances(self.id, query)

    def get_transaction(self, transaction_id: str) -> Transaction | None:
        return self.client.get_transaction(self.id, transaction_id)

    def __repr__(self) -> str:
        return f"LedgerBook(id={self.id!r}, name={self.name!r})"
