#!/usr/bin/env python3
"""
Configuration Management for Savings Buckets

Handles environment-based configuration with secure defaults and validation.
Supports multiple environments (development, test, production) with appropriate
security measures for each.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class LedgerConfig:
    """Remote ledger platform API configuration."""

    api_key: str | None = None
    oauth_token: str | None = None
    base_url: str = "https://api.bkper.app/v5"
    timeout: int = 30
    page_size: int = 100  # Transactions per search page


@dataclass
class VerificationConfig:
    """Trash verification retry settings."""

    max_retries: int = 5
    retry_delay_ms: int = 500


@dataclass
class Config:
    """
    Main configuration class for the savings buckets engine.

    Loads configuration from environment variables with secure defaults
    and validation for each environment type.
    """

    environment: Environment

    # Component configurations
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("BUCKETS_ENV", "development"))

        ledger = LedgerConfig(
            api_key=os.getenv("BKPER_API_KEY"),
            oauth_token=os.getenv("BKPER_OAUTH_TOKEN"),
            base_url=os.getenv("BKPER_BASE_URL", "https://api.bkper.app/v5").rstrip("/"),
            timeout=int(os.getenv("BKPER_TIMEOUT", "30")),
            page_size=int(os.getenv("BKPER_PAGE_SIZE", "100")),
        )

        verification = VerificationConfig(
            max_retries=int(os.getenv("VERIFY_MAX_RETRIES", "5")),
            retry_delay_ms=int(os.getenv("VERIFY_RETRY_DELAY_MS", "500")),
        )

        return cls(
            environment=env,
            ledger=ledger,
            verification=verification,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        # Credentials are mandatory only when talking to the real platform
        if self.environment == Environment.PRODUCTION and not self.ledger.api_key:
            errors.append("BKPER_API_KEY is required in production")

        if self.ledger.timeout <= 0:
            errors.append("Ledger timeout must be positive")
        if self.ledger.page_size <= 0:
            errors.append("Ledger page size must be positive")
        if self.verification.max_retries < 0:
            errors.append("Verification max retries must be non-negative")
        if self.verification.retry_delay_ms < 0:
            errors.append("Verification retry delay must be non-negative")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        # Configure format based on environment
        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")

        # Reduce noise from the HTTP stack in production
        if self.environment == Environment.PRODUCTION:
            logging.getLogger("httpx").setLevel(logging.WARNING)
            logging.getLogger("httpcore").setLevel(logging.WARNING)

    def get_sensitive_fields(self) -> list:
        """Get list of field names that contain sensitive data."""
        return [
            "ledger.api_key",
            "ledger.oauth_token",
        ]

    def to_dict(self, include_sensitive: bool = False) -> dict[str, Any]:
        """Convert configuration to dictionary, optionally excluding sensitive data."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, "__dict__") and not isinstance(field_value, Enum):
                # Nested dataclass
                nested_dict: dict[str, Any] = {}
                for nested_name, nested_value in field_value.__dict__.items():
                    full_field_name = f"{field_name}.{nested_name}"

                    if not include_sensitive and full_field_name in self.get_sensitive_fields():
                        nested_dict[nested_name] = "***REDACTED***" if nested_value else None
                    else:
                        nested_dict[nested_name] = nested_value

                result[field_name] = nested_dict
            elif isinstance(field_value, Enum):
                result[field_name] = field_value.value
            else:
                result[field_name] = field_value

        return result


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_environment()

        # Validate configuration
        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        # Setup logging
        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()
