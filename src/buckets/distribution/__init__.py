"""
Bucket Distribution Package

Splits a savings event across bucket accounts in the bucket book.

Key Components:
- percentages: bucket account selection and the sum-to-100 check
- strategies: full, suffix-filtered and override distribution
"""

from .percentages import (
    BucketAccount,
    PercentageValidation,
    describe_invalid,
    is_bucket_account,
    list_bucket_accounts,
    validate_percentages,
)
from .strategies import (
    Distributed,
    DistributionFailed,
    DistributionResult,
    DistributionSkipped,
    build_description,
    build_remote_id,
    distribute,
    distribute_to_all_buckets,
    distribute_to_override_buckets,
    distribute_to_suffix_buckets,
    parse_override,
    renormalize_percentages,
)

__all__ = [
    # Percentages
    "BucketAccount",
    "PercentageValidation",
    "describe_invalid",
    "is_bucket_account",
    "list_bucket_accounts",
    "validate_percentages",
    # Results
    "Distributed",
    "DistributionFailed",
    "DistributionResult",
    "DistributionSkipped",
    # Strategies
    "build_description",
    "build_remote_id",
    "distribute",
    "distribute_to_all_buckets",
    "distribute_to_override_buckets",
    "distribute_to_suffix_buckets",
    "parse_override",
    "renormalize_percentages",
]
