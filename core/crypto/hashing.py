"""
Hashing Utilities
Hash primitives shared by the leaf hasher, the Merkle tree and the
signature collector.

This module provides:
- keccak-256 for leaves, tree nodes and commitments (the EVM verifier's hash)
- SHA-256 for Lisk address derivation and artifact file digests
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- Leaves are never salted; identical payloads produce identical leaves
- All operations are deterministic
"""
from __future__ import annotations

import hashlib

from eth_utils import keccak


def keccak256(data: bytes) -> bytes:
    """
    Compute keccak-256 (the pre-standard SHA-3 used by the EVM) of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=data)


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_leaf(payload: bytes) -> bytes:
    """
    Hash an encoded account payload into a 32-byte Merkle leaf.

    Rule: leaf = keccak256(payload)

    The verifier recomputes leaves with the same primitive, so this must
    stay keccak-256 over the exact payload bytes.
    """
    return keccak256(payload)


def sorted_pair_hash(a: bytes, b: bytes) -> bytes:
    """
    Combine two sibling digests: keccak256(min(a, b) + max(a, b)).

    Ordering is bytewise ascending, which makes the combination
    commutative: sorted_pair_hash(a, b) == sorted_pair_hash(b, a).
    """
    if b < a:
        a, b = b, a
    return keccak256(a + b)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def parse_hex(hex_string: str, length: int | None = None) -> bytes:
    """
    Decode hex with or without the 0x prefix, optionally enforcing a length.

    Ledger and key files written by other tooling omit the prefix, while
    artifacts written by this package always carry it.
    """
    content = hex_string[2:] if hex_string.startswith(("0x", "0X")) else hex_string
    try:
        data = bytes.fromhex(content)
    except ValueError as e:
        raise ValueError(f"Invalid hex string {hex_string[:12]}...: {e}") from e
    if length is not None and len(data) != length:
        raise ValueError(f"Expected {length} bytes, got {len(data)}")
    return data


__all__ = [
    "keccak256",
    "sha256",
    "hash_leaf",
    "sorted_pair_hash",
    "to_hex",
    "from_hex",
    "parse_hex",
]
