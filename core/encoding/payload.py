"""
Leaf Payload Encoding

Tight (non-padded) packing of one account record, byte-compatible with
the verifier's decode routine:

    regular:  address(20) | balance_units uint64 BE (8) | 0 as uint256 (32)
    multisig: address(20) | balance_units uint64 BE (8) | threshold uint256 (32)
              | mandatory keys (32 each) | optional keys (32 each)

Nothing in the pipeline can detect a divergence from the verifier's
layout at runtime; decode_payload exists so tests and the artifact
validator can check the layout from the other side.
"""
from __future__ import annotations

from dataclasses import dataclass

from core.schemas.errors import EncodingMismatchError
from core.schemas.ledger import AccountRecord, MultisigAuth


ADDRESS_WIDTH = 20
BALANCE_WIDTH = 8
UINT256_WIDTH = 32
KEY_WIDTH = 32

HEADER_WIDTH = ADDRESS_WIDTH + BALANCE_WIDTH + UINT256_WIDTH


def _uint(value: int, width: int) -> bytes:
    return value.to_bytes(width, "big", signed=False)


def encode_payload(record: AccountRecord) -> bytes:
    """
    Encode an account record into its leaf payload.

    Pure and deterministic; the key order of a multisig record is copied
    verbatim into the payload.
    """
    header = record.target_address + _uint(record.balance_units, BALANCE_WIDTH)
    auth = record.auth
    if isinstance(auth, MultisigAuth):
        return (
            header
            + _uint(auth.threshold, UINT256_WIDTH)
            + b"".join(auth.mandatory_keys)
            + b"".join(auth.optional_keys)
        )
    return header + _uint(0, UINT256_WIDTH)


def encode_commitment_preimage(leaf_hash: bytes, recipient: bytes) -> bytes:
    """Tight packing of (bytes32 leaf_hash, address recipient)."""
    if len(leaf_hash) != 32:
        raise ValueError(f"leaf hash must be 32 bytes, got {len(leaf_hash)}")
    if len(recipient) != ADDRESS_WIDTH:
        raise ValueError(f"recipient must be {ADDRESS_WIDTH} bytes, got {len(recipient)}")
    return leaf_hash + recipient


@dataclass(frozen=True)
class DecodedPayload:
    """Fields recovered from a leaf payload."""
    address: bytes
    balance_units: int
    threshold: int
    mandatory_keys: tuple[bytes, ...] = ()
    optional_keys: tuple[bytes, ...] = ()


def decode_payload(payload: bytes, num_mandatory: int = 0, num_optional: int = 0) -> DecodedPayload:
    """
    Decode a leaf payload the way the verifier does.

    The key sections have no length prefix, so the split between mandatory
    and optional keys must be supplied by the caller (the verifier receives
    both counts alongside the payload).

    Raises:
        EncodingMismatchError: If the payload length does not match the
            layout implied by the threshold and key counts.
    """
    if len(payload) < HEADER_WIDTH:
        raise EncodingMismatchError(
            f"Payload is {len(payload)} bytes, shorter than the {HEADER_WIDTH}-byte header",
        )

    address = payload[:ADDRESS_WIDTH]
    balance_units = int.from_bytes(payload[ADDRESS_WIDTH:ADDRESS_WIDTH + BALANCE_WIDTH], "big")
    threshold = int.from_bytes(payload[ADDRESS_WIDTH + BALANCE_WIDTH:HEADER_WIDTH], "big")

    keys_section = payload[HEADER_WIDTH:]
    expected = (num_mandatory + num_optional) * KEY_WIDTH
    if len(keys_section) != expected:
        raise EncodingMismatchError(
            f"Key section is {len(keys_section)} bytes, expected {expected}",
            details={"num_mandatory": num_mandatory, "num_optional": num_optional},
        )
    if threshold == 0 and expected:
        raise EncodingMismatchError("Regular payload must not carry keys")

    keys = [keys_section[i:i + KEY_WIDTH] for i in range(0, len(keys_section), KEY_WIDTH)]
    return DecodedPayload(
        address=address,
        balance_units=balance_units,
        threshold=threshold,
        mandatory_keys=tuple(keys[:num_mandatory]),
        optional_keys=tuple(keys[num_mandatory:]),
    )


__all__ = [
    "HEADER_WIDTH",
    "encode_payload",
    "encode_commitment_preimage",
    "DecodedPayload",
    "decode_payload",
]
