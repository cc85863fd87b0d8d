"""
Artifact Validation
File: validate.py

Purpose: Re-check a written artifact set the way the receiving chain
would: payloads decode to the exported fields, leaves hash from payloads,
proofs fold to the root, signatures verify against commitments bound to
the recipient. Failures are reported as CheckResults, never raised.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from core.crypto.authorization import build_commitment
from core.crypto.hashing import from_hex, hash_leaf, to_hex
from core.crypto.lisk32 import decode_lisk32
from core.crypto.signatures import verify_signature
from core.encoding.payload import decode_payload
from core.merkle.merkle_proofs import MerkleVerifier
from core.merkle.merkle_tree import MerkleTree
from core.schemas.artifacts import (
    ArtifactManifest,
    SignatureBundleArtifact,
    TreeNodeArtifact,
    TreeResultArtifact,
)
from core.schemas.errors import ClaimTreeException
from core.schemas.ledger import to_beddows
from core.schemas.verification import CheckResult, VerificationResult

from orchestrator.artifacts.io import (
    ArtifactNames,
    compute_sha256,
    load_manifest,
    load_tree_result,
    read_artifact_bytes,
)


logger = logging.getLogger(__name__)


def _node_problems(node: TreeNodeArtifact, root: bytes) -> list[str]:
    problems: list[str] = []
    try:
        payload = from_hex(node.payload)
        leaf = from_hex(node.hash)
        decoded = decode_payload(payload, len(node.mandatory_keys), len(node.optional_keys))
    except (ValueError, ClaimTreeException) as e:
        return [f"undecodable: {e}"]

    if hash_leaf(payload) != leaf:
        problems.append("hash != keccak256(payload)")
    if decoded.address != from_hex(node.address):
        problems.append("payload address mismatch")
    try:
        if decode_lisk32(node.lsk_address) != decoded.address:
            problems.append("lskAddress does not decode to address")
    except ClaimTreeException as e:
        problems.append(f"invalid lskAddress: {e.message}")
    if decoded.balance_units != node.balance_units:
        problems.append("payload balance mismatch")
    if to_beddows(node.balance) != node.balance_units:
        problems.append("balanceUnits != floor(balance * 10^8)")
    if decoded.threshold != node.threshold:
        problems.append("payload threshold mismatch")
    if [k.hex() for k in decoded.mandatory_keys] != [k.removeprefix("0x") for k in node.mandatory_keys]:
        problems.append("mandatory keys mismatch")
    if [k.hex() for k in decoded.optional_keys] != [k.removeprefix("0x") for k in node.optional_keys]:
        problems.append("optional keys mismatch")
    try:
        proof_ok = MerkleVerifier.verify_hex(node.hash, node.proof, to_hex(root))
    except ValueError as e:
        problems.append(f"undecodable proof: {e}")
    else:
        if not proof_ok:
            problems.append("proof does not reproduce the root")
    return problems


def _bundle_problems(
    bundle: SignatureBundleArtifact,
    node: TreeNodeArtifact,
    recipient: Optional[bytes],
) -> list[str]:
    problems: list[str] = []
    try:
        commitment = from_hex(bundle.commitment)
        leaf = from_hex(bundle.leaf_hash)
    except ValueError as e:
        return [f"undecodable: {e}"]

    if recipient is not None and commitment != build_commitment(leaf, recipient):
        problems.append("commitment does not bind leaf to recipient")

    signers = [s.public_key.lower() for s in bundle.signatures]
    if node.threshold:
        expected = [k.lower() for k in node.mandatory_keys + node.optional_keys]
        if signers != expected:
            problems.append("signers differ from declared keys")
    elif len(signers) != 1:
        problems.append(f"regular account has {len(signers)} signatures")

    for pair in bundle.signatures:
        try:
            ok = verify_signature(
                from_hex(pair.public_key), from_hex(pair.r), from_hex(pair.s), commitment,
            )
        except ValueError:
            ok = False
        if not ok:
            problems.append(f"invalid signature from {pair.public_key}")
    return problems


def validate_tree_result(
    result: TreeResultArtifact,
    recipient: Optional[bytes] = None,
) -> VerificationResult:
    """
    Validate a tree result artifact.

    Args:
        result: Loaded tree result
        recipient: Expected commitment recipient; commitments are not
            re-derived when None
    """
    checks: list[CheckResult] = []

    try:
        root = from_hex(result.merkle_root)
        tree = MerkleTree(from_hex(n.hash) for n in result.nodes)
    except (ValueError, ClaimTreeException) as e:
        checks.append(CheckResult.failed("tree_rebuild", f"Cannot rebuild tree: {e}"))
        return VerificationResult.from_checks(checks)

    if tree.root == root:
        checks.append(CheckResult.passed("tree_root", "Rebuilt root matches merkleRoot"))
    else:
        checks.append(CheckResult.failed(
            "tree_root",
            "Rebuilt root differs from merkleRoot",
            {"expected": result.merkle_root, "actual": "0x" + tree.root.hex()},
        ))

    if len(tree) != len(result.nodes):
        checks.append(CheckResult.failed(
            "unique_leaves", "Two or more nodes share a leaf hash",
            {"nodes": len(result.nodes), "distinct": len(tree)},
        ))

    failures = {n.lsk_address: p for n in result.nodes if (p := _node_problems(n, root))}
    if failures:
        checks.append(CheckResult.failed(
            "nodes", f"{len(failures)} of {len(result.nodes)} nodes failed", {"failures": failures},
        ))
    else:
        checks.append(CheckResult.passed("nodes", f"All {len(result.nodes)} nodes verified"))

    if result.signatures is None:
        checks.append(CheckResult.warning("signatures", "No signatures in artifact"))
    else:
        by_hash = {n.hash.lower(): n for n in result.nodes}
        sig_failures: dict[str, list[str]] = {}
        for bundle in result.signatures:
            node = by_hash.get(bundle.leaf_hash.lower())
            if node is None:
                sig_failures[bundle.leaf_hash] = ["bundle for unknown leaf"]
                continue
            problems = _bundle_problems(bundle, node, recipient)
            if problems:
                sig_failures[node.lsk_address] = problems
        missing = set(by_hash) - {b.leaf_hash.lower() for b in result.signatures}
        if missing:
            sig_failures["<missing>"] = sorted(missing)
        if sig_failures:
            checks.append(CheckResult.failed(
                "signatures", f"{len(sig_failures)} signature bundle(s) failed",
                {"failures": sig_failures},
            ))
        else:
            checks.append(CheckResult.passed(
                "signatures", f"All {len(result.signatures)} signature bundles verified",
            ))

    return VerificationResult.from_checks(checks)


def validate_manifest_files(out_dir: str | Path, manifest: ArtifactManifest) -> list[CheckResult]:
    """Check every file listed in the manifest against its digest."""
    checks: list[CheckResult] = []
    for key, data in read_artifact_bytes(out_dir, manifest).items():
        entry = manifest.files[key]
        if data is None:
            checks.append(CheckResult.failed(f"hash_{key}", f"{entry.path} not found"))
            continue
        actual = compute_sha256(data)
        if actual == entry.sha256:
            checks.append(CheckResult.passed(f"hash_{key}", f"{entry.path} hash valid"))
        else:
            checks.append(CheckResult.failed(
                f"hash_{key}", f"{entry.path} hash mismatch",
                {"expected": entry.sha256, "actual": actual},
            ))
    return checks


def validate_artifact_dir(
    out_dir: str | Path,
    recipient: Optional[bytes] = None,
    names: ArtifactNames = ArtifactNames(),
) -> VerificationResult:
    """Validate manifest digests and the tree result of a written artifact set."""
    out_dir = Path(out_dir)
    checks: list[CheckResult] = []

    try:
        manifest = load_manifest(out_dir / names.manifest)
        result = load_tree_result(out_dir / names.result)
    except ClaimTreeException as e:
        return VerificationResult(
            ok=False,
            checks=[CheckResult.failed("load", e.message)],
            error=e.to_error_model(),
        )

    logger.info("Validating artifact set in %s", out_dir)
    checks.extend(validate_manifest_files(out_dir, manifest))
    if manifest.merkle_root.lower() != result.merkle_root.lower():
        checks.append(CheckResult.failed("manifest_root", "Manifest root differs from result root"))
    checks.extend(validate_tree_result(result, recipient).checks)
    return VerificationResult.from_checks(checks)


__all__ = [
    "validate_tree_result",
    "validate_manifest_files",
    "validate_artifact_dir",
]
