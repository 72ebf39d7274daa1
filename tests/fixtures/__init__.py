"""
Test Fixtures and Utilities

Provides an in-memory ledger client that records its calls, a helper that
creates a linked GL and bucket book pair, and builders for webhook payloads.
"""
