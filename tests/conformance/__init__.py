"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the account state machine.

The tests are organized by invariant:
1. test_balance_invariant.py - total == available + held, lock monotonicity
2. test_atomicity.py - failed operations leave the account unchanged
3. test_reversibility.py - dispute/resolve cycles restore balances
4. test_determinism.py - identical input produces identical reports

These tests use hypothesis for property-based testing.
"""
