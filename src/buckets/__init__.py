"""
Savings Buckets - Envelope Budgeting for Ledger Savings Accounts

Mirrors every movement on a general-ledger savings account into a separate
bucket book, split across bucket accounts, and keeps the two books
reconciled.

Key Features:
- Savings detection on accounts and groups, with suffix routing
- Full, suffix-filtered and override distribution strategies
- Cleanup of derived entries with trash verification
- Initialization when an account becomes savings or is unarchived
- GL versus bucket balance reconciliation

Domain Packages:
- core: Decimal amounts, Money, configuration
- ledger: platform models and the httpx client
- savings: detection and SavingsContext
- distribution: percentage validation and strategies
- reconciliation: matching, cleanup and balance checks
- events: event transitions and orchestration
- cli: command-line interface

Example Usage:
    from buckets.ledger import BkperClient, WebhookEvent
    from buckets.events import EventHandler

    handler = EventHandler(BkperClient(api_key="...", oauth_token="..."))
    outcome = handler.handle(WebhookEvent.from_dict(payload))
"""

__version__ = "0.1.0"
__author__ = "Savings Buckets Contributors"

from .core.config import Environment, get_config
from .core.money import Money
from .events.handler import EventHandler, EventOutcome
from .ledger.client import BkperClient, LedgerBook, LedgerClient
from .savings.context import SavingsContext

__all__ = [
    # Engine
    "EventHandler",
    "EventOutcome",
    "SavingsContext",
    # Ledger
    "BkperClient",
    "LedgerBook",
    "LedgerClient",
    # Core
    "Money",
    # Configuration
    "get_config",
    "Environment",
]
