"""
Migration Pipeline

Deterministic, in-process pipeline:

    records -> payloads -> leaves -> Merkle tree -> proofs -> signatures

Stages hand typed values to each other directly; nothing is written until
the whole run has succeeded (see orchestrator.artifacts.io). Records are
correlated across stages by leaf hash, never by list position.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from core.crypto.authorization import collect_signatures
from core.crypto.hashing import hash_leaf, parse_hex, to_hex
from core.crypto.signatures import Keyring
from core.encoding.payload import encode_payload
from core.merkle.merkle_tree import MerkleTree
from core.schemas.artifacts import (
    SignatureBundleArtifact,
    SignaturePairArtifact,
    SimpleNodeArtifact,
    SimpleTreeResultArtifact,
    TreeNodeArtifact,
    TreeResultArtifact,
)
from core.schemas.commitments import AuthorizationBundle, LeafNode
from core.schemas.errors import DuplicateLeafError, MalformedLedgerError
from core.schemas.ledger import AccountRecord, KeyMaterial, MultisigAuth


logger = logging.getLogger(__name__)


# =============================================================================
# Stages
# =============================================================================

def build_leaves(records: Iterable[AccountRecord]) -> list[LeafNode]:
    """
    Encode and hash every record.

    Raises:
        DuplicateLeafError: If two records produce the same leaf; the tree
            could not tell them apart.
    """
    leaves: list[LeafNode] = []
    seen: dict[bytes, str] = {}
    for record in records:
        payload = encode_payload(record)
        leaf_hash = hash_leaf(payload)
        if leaf_hash in seen:
            raise DuplicateLeafError(leaf_hash, [seen[leaf_hash], record.source_address])
        seen[leaf_hash] = record.source_address
        leaves.append(LeafNode(hash=leaf_hash, payload=payload, record=record))
    return leaves


def build_tree(leaves: Sequence[LeafNode]) -> MerkleTree:
    """Build the Merkle tree over all leaf hashes."""
    if not leaves:
        raise MalformedLedgerError("Ledger contains no accounts")
    return MerkleTree(leaf.hash for leaf in leaves)


def parse_recipient(recipient: str | bytes) -> bytes:
    """Accept a 0x address string or 20 raw bytes."""
    if isinstance(recipient, bytes):
        raw = recipient
    else:
        try:
            raw = parse_hex(recipient)
        except ValueError as e:
            raise ValueError(f"Invalid recipient address {recipient!r}: {e}") from e
    if len(raw) != 20:
        raise ValueError(f"Recipient must be 20 bytes, got {len(raw)}")
    return raw


# =============================================================================
# Result
# =============================================================================

@dataclass
class PipelineResult:
    """Everything a run produced, ready to be exported."""
    leaves: tuple[LeafNode, ...]
    tree: MerkleTree
    proofs: dict[bytes, list[bytes]]
    authorizations: Optional[dict[bytes, AuthorizationBundle]] = None
    recipient: Optional[bytes] = None
    _by_hash: dict[bytes, LeafNode] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._by_hash = {leaf.hash: leaf for leaf in self.leaves}

    @property
    def root(self) -> bytes:
        return self.tree.root

    @property
    def signed(self) -> bool:
        return self.authorizations is not None

    def leaf(self, leaf_hash: bytes) -> LeafNode:
        return self._by_hash[leaf_hash]

    def to_artifact(self) -> TreeResultArtifact:
        """Merged per-account export: encoded fields, hash, proof, signatures."""
        nodes = [self._node_artifact(leaf) for leaf in self.leaves]
        signatures = None
        if self.authorizations is not None:
            signatures = [
                _bundle_artifact(self.authorizations[leaf.hash]) for leaf in self.leaves
            ]
        return TreeResultArtifact(
            merkle_root=to_hex(self.root),
            nodes=nodes,
            signatures=signatures,
        )

    def to_simple_artifact(self) -> SimpleTreeResultArtifact:
        """Reduced export for lightweight verifier harnesses."""
        nodes = []
        for leaf in self.leaves:
            mandatory, optional = _keys_hex(leaf.record)
            nodes.append(SimpleNodeArtifact(
                address=to_hex(leaf.record.target_address),
                balance_units=leaf.record.balance_units,
                threshold=leaf.record.threshold,
                mandatory_keys=mandatory,
                optional_keys=optional,
                proof=[to_hex(s) for s in self.proofs[leaf.hash]],
            ))
        return SimpleTreeResultArtifact(merkle_root=to_hex(self.root), nodes=nodes)

    def _node_artifact(self, leaf: LeafNode) -> TreeNodeArtifact:
        record = leaf.record
        mandatory, optional = _keys_hex(record)
        return TreeNodeArtifact(
            lsk_address=record.source_address,
            address=to_hex(record.target_address),
            balance=record.balance,
            balance_units=record.balance_units,
            threshold=record.threshold,
            mandatory_keys=mandatory,
            optional_keys=optional,
            payload=to_hex(leaf.payload),
            hash=to_hex(leaf.hash),
            proof=[to_hex(s) for s in self.proofs[leaf.hash]],
        )


def _keys_hex(record: AccountRecord) -> tuple[list[str], list[str]]:
    if isinstance(record.auth, MultisigAuth):
        return (
            [to_hex(k) for k in record.auth.mandatory_keys],
            [to_hex(k) for k in record.auth.optional_keys],
        )
    return [], []


def _bundle_artifact(bundle: AuthorizationBundle) -> SignatureBundleArtifact:
    return SignatureBundleArtifact(
        leaf_hash=to_hex(bundle.leaf_hash),
        commitment=to_hex(bundle.commitment),
        signatures=[
            SignaturePairArtifact(
                public_key=to_hex(pair.public_key),
                r=to_hex(pair.r),
                s=to_hex(pair.s),
            )
            for pair in bundle.signatures
        ],
    )


# =============================================================================
# Pipeline
# =============================================================================

@dataclass
class MigrationPipeline:
    """
    Runs the whole commitment pipeline in memory.

    Signing happens only when key material is supplied; every signer is
    checked against the keyring before the first signature is produced.
    """
    recipient: str | bytes
    keys: Optional[Sequence[KeyMaterial]] = None
    _keyring: Optional[Keyring] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.recipient = parse_recipient(self.recipient)
        if self.keys is not None:
            self._keyring = Keyring(self.keys)

    def run(self, records: Sequence[AccountRecord]) -> PipelineResult:
        logger.info("Encoding %d accounts", len(records))
        leaves = build_leaves(records)

        logger.info("Building Merkle tree over %d leaves", len(leaves))
        tree = build_tree(leaves)
        proofs = {leaf.hash: tree.proof(leaf.hash) for leaf in leaves}
        logger.info("Merkle root: %s (depth %d)", to_hex(tree.root), tree.depth)

        authorizations = None
        if self._keyring is not None:
            logger.info("Collecting signatures with %d keys", len(self._keyring))
            authorizations = collect_signatures(leaves, self._keyring, self.recipient)
            total = sum(len(b.signatures) for b in authorizations.values())
            logger.info("Collected %d signatures for %d leaves", total, len(authorizations))
        else:
            logger.info("No key material supplied, skipping signature collection")

        return PipelineResult(
            leaves=tuple(leaves),
            tree=tree,
            proofs=proofs,
            authorizations=authorizations,
            recipient=self.recipient,
        )


def run_pipeline(
    records: Sequence[AccountRecord],
    recipient: str | bytes,
    keys: Optional[Sequence[KeyMaterial]] = None,
) -> PipelineResult:
    """Convenience wrapper around MigrationPipeline(...).run(records)."""
    return MigrationPipeline(recipient=recipient, keys=keys).run(records)


__all__ = [
    "build_leaves",
    "build_tree",
    "parse_recipient",
    "PipelineResult",
    "MigrationPipeline",
    "run_pipeline",
]
