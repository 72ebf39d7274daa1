"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import pytest

import buckets.core.config as config_module
from tests.fixtures.ledger import FakeLedgerClient, create_books


@pytest.fixture
def ledger() -> FakeLedgerClient:
    """Empty in-memory ledger."""
    return FakeLedgerClient()


@pytest.fixture
def books(ledger):
    """GL book and a bucket book with a 60/40 split and default clearing accounts."""
    return create_books(ledger, [("Car", "60"), ("Holiday", "40")])


@pytest.fixture
def frozen_clock():
    """Millisecond clock pinned to 2025-01-01T00:00:00Z."""
    return lambda: 1735689600000


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Set up test environment variables."""
    # Ensure tests never reach the real platform
    monkeypatch.setenv("BUCKETS_ENV", "test")
    monkeypatch.setenv("BKPER_BASE_URL", "https://ledger.test/v5")

    # Mock sensitive environment variables
    monkeypatch.setenv("BKPER_API_KEY", "test-key")
    monkeypatch.setenv("BKPER_OAUTH_TOKEN", "test-token")

    # No real waiting between trash verification rounds
    monkeypatch.setenv("VERIFY_RETRY_DELAY_MS", "0")

    # Each test sees configuration built from its own environment
    monkeypatch.setattr(config_module, "_config", None)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "currency: Tests for amount and percentage precision")
    config.addinivalue_line("markers", "ledger: Tests for ledger models and the platform client")
    config.addinivalue_line("markers", "distribution: Tests for bucket distribution")
    config.addinivalue_line("markers", "reconciliation: Tests for cleanup and balance checks")
    config.addinivalue_line("markers", "cli: Tests for the command-line interface")
