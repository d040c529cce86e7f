"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the token ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_conservation.py - Fixed supply and non-negative balances/allowances
2. test_atomicity.py - All-or-nothing operations
3. test_idempotency.py - Side-effect-free reads and the approve overwrite law

These tests use hypothesis for property-based testing.
"""
