"""
Merkle Tree Implementation
Merkle tree construction, proof generation, and verification over
keccak-256 leaves.

Canonical Commitment Rules (Hard Contracts):
1. Leaves: keccak256(payload), see core.crypto.hashing.hash_leaf()
2. Leaf set: sorted ascending (bytewise) and de-duplicated before layering
3. Parent hashing: keccak256(min(a, b) + max(a, b)) ("sorted-pair hashing")
4. Odd node at a level: promoted unchanged to the next level
5. Single leaf: root = leaf, proof = []
6. Empty leaf set: rejected

Determinism Notes:
- Rules 2 and 3 make the root independent of input order
- Proofs carry no left/right flags; a verifier only needs sibling digests
- Promoted levels contribute no proof entry
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from core.crypto.hashing import sorted_pair_hash, to_hex
from core.schemas.errors import NotFoundError


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle inclusion proof for one leaf.

    Attributes:
        leaf: The leaf hash being proven
        siblings: Sibling hashes from bottom to top of tree
        root: The Merkle root this proof is against
    """
    leaf: bytes
    siblings: tuple[bytes, ...]
    root: bytes


def merkle_parent(left: bytes, right: bytes) -> bytes:
    """
    Compute the parent hash of two child nodes.

    Child order does not matter: merkle_parent(a, b) == merkle_parent(b, a).
    """
    return sorted_pair_hash(left, right)


def _next_layer(layer: Sequence[bytes]) -> list[bytes]:
    parents: list[bytes] = []
    for i in range(0, len(layer), 2):
        if i + 1 < len(layer):
            parents.append(merkle_parent(layer[i], layer[i + 1]))
        else:
            # Unpaired node is promoted unchanged
            parents.append(layer[i])
    return parents


class MerkleTree:
    """
    Immutable binary Merkle tree over a set of 32-byte leaf hashes.

    Example:
        >>> tree = MerkleTree([leaf_a, leaf_b, leaf_c])
        >>> proof = tree.proof(leaf_c)
        >>> verify_merkle_proof(leaf_c, proof, tree.root)
        True
    """

    def __init__(self, leaves: Iterable[bytes]) -> None:
        ordered = sorted(set(leaves))
        if not ordered:
            raise ValueError("Cannot build a Merkle tree from an empty leaf set")
        for leaf in ordered:
            if len(leaf) != 32:
                raise ValueError(f"Leaf hashes must be 32 bytes, got {len(leaf)}")

        layers: list[tuple[bytes, ...]] = [tuple(ordered)]
        while len(layers[-1]) > 1:
            layers.append(tuple(_next_layer(layers[-1])))

        self._layers: tuple[tuple[bytes, ...], ...] = tuple(layers)
        self._positions: dict[bytes, int] = {leaf: i for i, leaf in enumerate(ordered)}

    @classmethod
    def build(cls, leaves: Iterable[bytes]) -> "MerkleTree":
        return cls(leaves)

    @property
    def root(self) -> bytes:
        return self._layers[-1][0]

    @property
    def leaves(self) -> tuple[bytes, ...]:
        """Leaves in tree order (sorted, de-duplicated)."""
        return self._layers[0]

    @property
    def depth(self) -> int:
        """Number of layers including the leaf layer and the root."""
        return len(self._layers)

    def __len__(self) -> int:
        return len(self._layers[0])

    def __contains__(self, leaf: object) -> bool:
        return leaf in self._positions

    def proof(self, leaf: bytes) -> list[bytes]:
        """
        Sibling digests from the leaf's position up to the root.

        Raises:
            NotFoundError: If the leaf is not in the tree.
        """
        index = self._positions.get(leaf)
        if index is None:
            raise NotFoundError(leaf)

        siblings: list[bytes] = []
        for layer in self._layers[:-1]:
            sibling_index = index ^ 1
            if sibling_index < len(layer):
                siblings.append(layer[sibling_index])
            index //= 2
        return siblings

    def hex_proof(self, leaf: bytes) -> list[str]:
        return [to_hex(s) for s in self.proof(leaf)]

    def merkle_proof(self, leaf: bytes) -> MerkleProof:
        return MerkleProof(leaf=leaf, siblings=tuple(self.proof(leaf)), root=self.root)


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """Compute the root of a leaf set without keeping the tree."""
    return MerkleTree(leaves).root


def build_merkle_proof(leaves: Sequence[bytes], leaf: bytes) -> MerkleProof:
    """Build a tree over `leaves` and return the proof for `leaf`."""
    return MerkleTree(leaves).merkle_proof(leaf)


def process_proof(leaf: bytes, siblings: Iterable[bytes]) -> bytes:
    """Fold a proof into the root it implies."""
    current = leaf
    for sibling in siblings:
        current = merkle_parent(current, sibling)
    return current


def verify_merkle_proof(leaf: bytes, siblings: Iterable[bytes], root: bytes) -> bool:
    """
    Verify a Merkle proof the way the on-chain verifier does.

    Starting from the leaf, apply sorted-pair hashing with each sibling in
    order; the result must equal the root.
    """
    return process_proof(leaf, siblings) == root


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of layers (leaves through root) of a tree with num_leaves distinct leaves.

    A single leaf has depth 1; an empty tree has depth 0.
    """
    if num_leaves <= 0:
        return 0
    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1
    return depth


__all__ = [
    "MerkleProof",
    "MerkleTree",
    "merkle_parent",
    "build_merkle_root",
    "build_merkle_proof",
    "process_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
]
