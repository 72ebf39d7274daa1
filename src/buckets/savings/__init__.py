"""
Savings Detection Package

Decides whether a ledger event concerns a savings account and captures the
event as an immutable SavingsContext.

Key Components:
- suffix: routing suffix extraction for account and group names
- context: SavingsContext, Direction, detection result variants
- detector: event detection and initialization contexts
"""

from .context import (
    Direction,
    NotSavings,
    SavingsContext,
    SavingsDetected,
    SavingsDetectionResult,
)
from .detector import build_initialization_context, detect_savings
from .suffix import account_matches_suffix, extract_suffix, extract_suffix_from_account

__all__ = [
    # Context
    "Direction",
    "NotSavings",
    "SavingsContext",
    "SavingsDetected",
    "SavingsDetectionResult",
    # Detection
    "build_initialization_context",
    "detect_savings",
    # Suffix
    "account_matches_suffix",
    "extract_suffix",
    "extract_suffix_from_account",
]
