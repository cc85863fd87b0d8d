"""
Example Dataset Generator

Builds the fixture ledger used by the example run. Nothing here is part
of the commitment pipeline: balances come from a replaceable balance
function and keys from throwaway Ed25519 material.

Fixture convention (must match the example signing flow):
- Regular accounts use the addresses of keys[0 .. num_regular).
- Each multisig account uses the address of the next unused key.
- A multisig archetype (threshold, M, O) takes its mandatory keys from
  keys[0 .. M) and its optional keys from keys[M .. M + O), always counted
  from the start of the key list, so multisig members overlap with the
  regular account holders.
"""
from __future__ import annotations

import logging
import random
from decimal import ROUND_DOWN, Decimal
from typing import Callable, Sequence

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from core.crypto.hashing import sha256
from core.crypto.lisk32 import decode_lisk32, lisk32_from_public_key
from core.crypto.signatures import public_key_from_seed
from core.schemas.errors import MalformedLedgerError
from core.schemas.ledger import (
    DEFAULT_ARCHETYPES,
    AccountRecord,
    KeyMaterial,
    MultisigArchetype,
    MultisigAuth,
    RegularAuth,
)


logger = logging.getLogger(__name__)

DEFAULT_NUM_REGULAR = 50
DEFAULT_FIXTURE_SEED = 0

BalanceFn = Callable[[int], Decimal]

_EIGHT_PLACES = Decimal("0.00000001")


def seeded_balances(seed: int = DEFAULT_FIXTURE_SEED) -> BalanceFn:
    """
    Balance function: position + U[0, 1), truncated to 8 decimals.

    Each position draws from its own generator seeded by (seed, position),
    so a balance does not depend on how many were drawn before it.
    """
    def balance(position: int) -> Decimal:
        fraction = Decimal(random.Random(f"{seed}:{position}").random())
        return (position + fraction).quantize(_EIGHT_PLACES, rounding=ROUND_DOWN)

    return balance


def required_key_count(num_regular: int, archetypes: Sequence[MultisigArchetype]) -> int:
    """Keys needed for num_regular regular accounts plus one per archetype."""
    holders = num_regular + len(archetypes)
    members = max((a.num_keys for a in archetypes), default=0)
    return max(holders, members)


def generate_ledger(
    keys: Sequence[KeyMaterial],
    archetypes: Sequence[MultisigArchetype] = DEFAULT_ARCHETYPES,
    num_regular: int = DEFAULT_NUM_REGULAR,
    balance_fn: BalanceFn | None = None,
) -> list[AccountRecord]:
    """
    Generate the example ledger.

    Raises:
        MalformedLedgerError: If keys is shorter than required_key_count().
    """
    needed = required_key_count(num_regular, archetypes)
    if len(keys) < needed:
        raise MalformedLedgerError(
            f"Key material has {len(keys)} entries, {needed} required",
            details={"available": len(keys), "required": needed},
        )
    balance_fn = balance_fn or seeded_balances()

    records: list[AccountRecord] = []
    for index in range(num_regular):
        key = keys[index]
        records.append(AccountRecord(
            source_address=key.address,
            target_address=decode_lisk32(key.address),
            balance=balance_fn(index),
            auth=RegularAuth(),
        ))

    for archetype in archetypes:
        position = len(records)
        holder = keys[position]
        mandatory = keys[:archetype.num_mandatory]
        optional = keys[archetype.num_mandatory:archetype.num_keys]
        records.append(AccountRecord(
            source_address=holder.address,
            target_address=decode_lisk32(holder.address),
            balance=balance_fn(position),
            auth=MultisigAuth(
                threshold=archetype.threshold,
                mandatory_keys=tuple(k.public_key for k in mandatory),
                optional_keys=tuple(k.public_key for k in optional),
            ),
        ))

    logger.info(
        "Generated fixture ledger: %d regular, %d multisig accounts",
        num_regular, len(archetypes),
    )
    return records


def _key_from_seed(seed: bytes) -> KeyMaterial:
    public_key = public_key_from_seed(seed)
    return KeyMaterial(
        address=lisk32_from_public_key(public_key),
        public_key=public_key,
        private_key=seed,
    )


def generate_key_material(count: int, seed: bytes | None = None) -> list[KeyMaterial]:
    """
    Create fixture signing keys.

    With a seed the keys are reproducible (seed_i = sha256(seed | i));
    without one they are freshly generated. Not for custody of real funds.
    """
    keys: list[KeyMaterial] = []
    for i in range(count):
        if seed is not None:
            raw = sha256(seed + i.to_bytes(4, "big"))
        else:
            raw = ed25519.Ed25519PrivateKey.generate().private_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PrivateFormat.Raw,
                encryption_algorithm=serialization.NoEncryption(),
            )
        keys.append(_key_from_seed(raw))
    return keys


__all__ = [
    "DEFAULT_NUM_REGULAR",
    "BalanceFn",
    "seeded_balances",
    "required_key_count",
    "generate_ledger",
    "generate_key_material",
]
