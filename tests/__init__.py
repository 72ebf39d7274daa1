"""
Test Suite for Savings Buckets

Test Structure:
- fixtures/: In-memory ledger and webhook payload builders
- unit/: Unit tests mirroring src/ package structure
- integration/: Event handling and CLI workflows against the in-memory ledger

All books, accounts and amounts are synthetic.
"""
