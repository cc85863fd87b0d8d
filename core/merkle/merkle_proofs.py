"""
Merkle Proofs Convenience Wrappers
Thin wrappers around core Merkle tree functions for cleaner API.

This module provides class-based interfaces:
- MerkleProver: Generate proofs for leaves or raw payloads
- MerkleVerifier: Verify proofs, including hex-encoded artifact proofs
"""
from __future__ import annotations

from typing import Sequence

from core.crypto.hashing import from_hex, hash_leaf
from core.merkle.merkle_tree import (
    MerkleProof,
    MerkleTree,
    build_merkle_root,
    verify_merkle_proof,
)


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Example:
        >>> proof = MerkleProver.prove(leaves, leaves[1])
        >>> proof.leaf == leaves[1]
        True
    """

    @staticmethod
    def prove(leaves: Sequence[bytes], leaf: bytes) -> MerkleProof:
        """
        Generate a Merkle proof for a leaf hash.

        Raises:
            NotFoundError: If the leaf is not among the leaves
            ValueError: If leaves is empty
        """
        return MerkleTree(leaves).merkle_proof(leaf)

    @staticmethod
    def prove_payload(payloads: Sequence[bytes], payload: bytes) -> MerkleProof:
        """Generate a proof for an encoded payload (hashed into its leaf first)."""
        leaves = [hash_leaf(p) for p in payloads]
        return MerkleTree(leaves).merkle_proof(hash_leaf(payload))

    @staticmethod
    def compute_root(leaves: Sequence[bytes]) -> bytes:
        return build_merkle_root(leaves)

    @staticmethod
    def compute_root_from_payloads(payloads: Sequence[bytes]) -> bytes:
        """Compute the root for a sequence of encoded payloads."""
        return build_merkle_root([hash_leaf(p) for p in payloads])


class MerkleVerifier:
    """
    Convenience class for verifying Merkle proofs.

    Example:
        >>> MerkleVerifier.verify(MerkleProver.prove(leaves, leaves[1]))
        True
    """

    @staticmethod
    def verify(proof: MerkleProof) -> bool:
        return verify_merkle_proof(proof.leaf, proof.siblings, proof.root)

    @staticmethod
    def verify_hex(leaf_hex: str, proof_hex: Sequence[str], root_hex: str) -> bool:
        """
        Verify a proof as written in the tree result artifact.

        Raises:
            ValueError: If any value is not 0x-prefixed hex
        """
        return verify_merkle_proof(
            from_hex(leaf_hex),
            [from_hex(s) for s in proof_hex],
            from_hex(root_hex),
        )


__all__ = [
    "MerkleProver",
    "MerkleVerifier",
]
