"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the tape calculator.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. round_trip.py - Display and canonical forms convert losslessly
2. fold.py - The sum is the left fold of the rows
3. atomicity.py - A failed operation leaves the text unchanged
4. frame_inverse.py - Stripping a frame restores the text exactly
5. alignment.py - Written ledgers are aligned and read back unchanged

These tests use hypothesis for property-based testing.
"""
