"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the bond ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_round_trip.py - Key and record codecs are exact inverses
2. test_exclusivity.py - add creates, update overwrites, never both
3. test_monotonicity.py - Lifecycle states only move forward
4. test_cursor_release.py - Every scan releases its cursor on every exit path

These tests use hypothesis for property-based testing.
"""
