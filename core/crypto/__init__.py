"""
Core cryptographic utilities.

Hashing (keccak-256 leaves and tree nodes), Lisk32 addresses,
Ed25519 signatures and redemption commitments.
"""
from .hashing import (
    keccak256,
    sha256,
    hash_leaf,
    sorted_pair_hash,
    to_hex,
    from_hex,
    parse_hex,
)

__all__ = [
    "keccak256",
    "sha256",
    "hash_leaf",
    "sorted_pair_hash",
    "to_hex",
    "from_hex",
    "parse_hex",
]
