"""
Core Utilities Package

Shared primitives used across the savings buckets engine.

This package provides:
- Decimal amount handling with explicit remainder folding
- Money and FinancialDate value types
- Configuration management for environment-specific settings
"""

from .amounts import (
    InvalidAmountError,
    fold_remainder,
    format_decimal,
    parse_amount,
    parse_percentage,
    quantize,
    share_of,
)
from .config import (
    Config,
    Environment,
    LedgerConfig,
    VerificationConfig,
    get_config,
    reload_config,
)
from .dates import FinancialDate
from .money import Money

__all__ = [
    # Configuration
    "Config",
    "Environment",
    "LedgerConfig",
    "VerificationConfig",
    "get_config",
    "reload_config",
    # Primitives
    "FinancialDate",
    "Money",
    # Amount utilities
    "InvalidAmountError",
    "fold_remainder",
    "format_decimal",
    "parse_amount",
    "parse_percentage",
    "quantize",
    "share_of",
]
