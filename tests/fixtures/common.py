"""
Common test fixtures shared by all modules.

Provides factory functions for core claimtree data structures:
- KeyMaterial (deterministic, seeded)
- AccountRecord (regular and multisig)
- Small mixed ledgers

Keys are derived from a fixed seed so that addresses, leaves and roots
are stable across test runs.
"""

from decimal import Decimal
from typing import Optional, Sequence

from core.crypto.lisk32 import decode_lisk32
from core.ledger.fixtures import generate_key_material
from core.schemas.ledger import (
    AccountRecord,
    KeyMaterial,
    MultisigAuth,
    RegularAuth,
)


TEST_KEY_SEED = b"claimtree-test-keys"
TEST_RECIPIENT = "0x34A1D3fff3958843C43aD80F30b94c510645C316"
TEST_RECIPIENT_BYTES = bytes.fromhex("34A1D3fff3958843C43aD80F30b94c510645C316")


# =============================================================================
# Key Factories
# =============================================================================

def make_keys(count: int = 8, seed: bytes = TEST_KEY_SEED) -> list[KeyMaterial]:
    """Create reproducible signing keys."""
    return generate_key_material(count, seed=seed)


# =============================================================================
# Record Factories
# =============================================================================

def make_regular_record(
    key: KeyMaterial,
    balance: Decimal | str = "1.5",
) -> AccountRecord:
    """Create a regular account owned by key."""
    return AccountRecord(
        source_address=key.address,
        target_address=decode_lisk32(key.address),
        balance=Decimal(balance),
        auth=RegularAuth(),
    )


def make_multisig_record(
    holder: KeyMaterial,
    mandatory: Sequence[KeyMaterial],
    optional: Sequence[KeyMaterial] = (),
    threshold: Optional[int] = None,
    balance: Decimal | str = "10",
) -> AccountRecord:
    """
    Create a multisig account.

    Args:
        holder: Key whose address the account lives at
        mandatory: Mandatory signers, in declaration order
        optional: Optional signers, in declaration order
        threshold: Defaults to the number of mandatory keys
    """
    return AccountRecord(
        source_address=holder.address,
        target_address=decode_lisk32(holder.address),
        balance=Decimal(balance),
        auth=MultisigAuth(
            threshold=threshold if threshold is not None else len(mandatory),
            mandatory_keys=tuple(k.public_key for k in mandatory),
            optional_keys=tuple(k.public_key for k in optional),
        ),
    )


def make_ledger(keys: Optional[Sequence[KeyMaterial]] = None) -> list[AccountRecord]:
    """
    Create a small mixed ledger.

    Layout (with the default 8 keys):
    - keys[0..4): regular accounts
    - keys[4]: 2-of-2 multisig over keys[0], keys[1]
    - keys[5]: 2-of-3 multisig, mandatory keys[2], optional keys[3], keys[4]
    """
    keys = list(keys) if keys is not None else make_keys()
    records = [
        make_regular_record(keys[i], balance=Decimal(i) + Decimal("0.12345678"))
        for i in range(4)
    ]
    records.append(make_multisig_record(keys[4], mandatory=keys[0:2], balance="42"))
    records.append(make_multisig_record(
        keys[5], mandatory=keys[2:3], optional=keys[3:5], threshold=2, balance="0.00000001",
    ))
    return records
