"""
Test fixtures package for claimtree tests.

This package provides factory functions for creating test objects:
- common.py: Keys, account records and small ledgers

Usage:
    from fixtures import make_keys, make_ledger

    def test_something():
        keys = make_keys()
        records = make_ledger(keys)
"""

from .common import (
    TEST_KEY_SEED,
    TEST_RECIPIENT,
    TEST_RECIPIENT_BYTES,
    make_keys,
    make_regular_record,
    make_multisig_record,
    make_ledger,
)

__all__ = [
    "TEST_KEY_SEED",
    "TEST_RECIPIENT",
    "TEST_RECIPIENT_BYTES",
    "make_keys",
    "make_regular_record",
    "make_multisig_record",
    "make_ledger",
]
