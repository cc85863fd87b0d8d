"""
Merkle Tree and Commitments
Merkle tree construction + proof generation/verification for the
migration ledger.

This module provides:
- MerkleTree: Immutable tree over leaf hashes with root and proof(leaf)
- MerkleProof: Dataclass representing an inclusion proof
- verify_merkle_proof: Fold a proof with sorted-pair hashing

Canonical Commitment Rules:
1. Leaf hashing: keccak256(payload)
2. Leaves sorted and de-duplicated before layering
3. Parent hashing: keccak256(min(a, b) + max(a, b))
4. Odd node: promoted unchanged
5. Single leaf: root = leaf

Usage:
    from core.merkle import MerkleTree, verify_merkle_proof

    tree = MerkleTree(leaves)
    proof = tree.proof(leaves[2])
    assert verify_merkle_proof(leaves[2], proof, tree.root)
"""
from .merkle_tree import (
    MerkleProof,
    MerkleTree,
    merkle_parent,
    build_merkle_root,
    build_merkle_proof,
    process_proof,
    verify_merkle_proof,
    compute_tree_depth,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Core types
    "MerkleProof",
    "MerkleTree",
    # Core functions
    "merkle_parent",
    "build_merkle_root",
    "build_merkle_proof",
    "process_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
