"""
Test Suite

Tests for the MaintDesk admin core. Everything runs against the in-memory
record store; no MongoDB is needed.

To run tests:
    pytest
    pytest backend/tests/test_aggregator.py
"""
