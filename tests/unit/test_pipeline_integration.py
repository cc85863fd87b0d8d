"""
Pipeline Integration Tests
Tests for orchestrator/pipeline.py

End-to-end in-process run over a small mixed ledger:
records -> payloads -> leaves -> tree -> proofs -> signatures
"""
import random

import pytest

from core.crypto.authorization import build_commitment, verify_bundle
from core.crypto.hashing import from_hex, hash_leaf, to_hex
from core.encoding.payload import encode_payload
from core.merkle.merkle_tree import verify_merkle_proof
from core.schemas.errors import DuplicateLeafError, MalformedLedgerError, MissingKeyError
from orchestrator.pipeline import (
    MigrationPipeline,
    build_leaves,
    build_tree,
    parse_recipient,
    run_pipeline,
)

from fixtures.common import TEST_RECIPIENT, make_regular_record


class TestStages:
    """Individual pipeline stages."""

    def test_build_leaves_hash_payloads(self, records):
        leaves = build_leaves(records)

        assert len(leaves) == len(records)
        for leaf, record in zip(leaves, records):
            assert leaf.record == record
            assert leaf.payload == encode_payload(record)
            assert leaf.hash == hash_leaf(leaf.payload)

    def test_duplicate_records_rejected(self, keys):
        record = make_regular_record(keys[0])
        with pytest.raises(DuplicateLeafError) as exc_info:
            build_leaves([record, record])
        assert exc_info.value.code == "DUPLICATE_LEAF"
        assert isinstance(exc_info.value, MalformedLedgerError)

    def test_empty_ledger_rejected(self):
        with pytest.raises(MalformedLedgerError, match="no accounts"):
            build_tree([])

    def test_parse_recipient(self, recipient):
        assert parse_recipient(TEST_RECIPIENT) == recipient
        assert parse_recipient(recipient) == recipient
        with pytest.raises(ValueError, match="20 bytes"):
            parse_recipient("0x1234")

    def test_recipient_string_accepted(self, records, recipient):
        assert run_pipeline(records, TEST_RECIPIENT).recipient == recipient
        assert MigrationPipeline(recipient=TEST_RECIPIENT).recipient == recipient


class TestSignedRun:
    """A run with key material."""

    def test_every_proof_replays_to_root(self, pipeline_result):
        for leaf in pipeline_result.leaves:
            proof = pipeline_result.proofs[leaf.hash]
            assert verify_merkle_proof(leaf.hash, proof, pipeline_result.root)

    def test_bundle_per_leaf(self, pipeline_result, recipient):
        assert pipeline_result.signed
        assert set(pipeline_result.authorizations) == {l.hash for l in pipeline_result.leaves}

        for leaf in pipeline_result.leaves:
            bundle = pipeline_result.authorizations[leaf.hash]
            assert bundle.commitment == build_commitment(leaf.hash, recipient)
            assert verify_bundle(bundle)

    def test_signature_counts(self, pipeline_result):
        for leaf in pipeline_result.leaves:
            bundle = pipeline_result.authorizations[leaf.hash]
            if leaf.record.is_multisig:
                declared = list(leaf.record.auth.all_keys)
                assert [p.public_key for p in bundle.signatures] == declared
            else:
                assert len(bundle.signatures) == 1

    def test_root_invariant_under_permutation(self, records, keys, recipient, pipeline_result):
        shuffled = records[:]
        random.Random(11).shuffle(shuffled)

        assert run_pipeline(shuffled, recipient, keys=keys).root == pipeline_result.root

    def test_root_independent_of_signing(self, records, recipient, pipeline_result):
        assert run_pipeline(records, recipient).root == pipeline_result.root

    def test_missing_key_aborts(self, records, keys, recipient):
        with pytest.raises(MissingKeyError):
            run_pipeline(records, recipient, keys=keys[:2])

    def test_leaf_lookup(self, pipeline_result):
        for leaf in pipeline_result.leaves:
            assert pipeline_result.leaf(leaf.hash) is leaf
        with pytest.raises(KeyError):
            pipeline_result.leaf(bytes(32))


class TestUnsignedRun:
    """A run without key material."""

    def test_no_authorizations(self, records, recipient):
        result = MigrationPipeline(recipient=recipient).run(records)

        assert not result.signed
        assert result.authorizations is None
        assert result.to_artifact().signatures is None


class TestArtifactModels:
    """Conversion of a run into the exported models."""

    def test_nodes_follow_ledger_order(self, pipeline_result, records):
        artifact = pipeline_result.to_artifact()

        assert artifact.merkle_root == to_hex(pipeline_result.root)
        assert [n.lsk_address for n in artifact.nodes] == [r.source_address for r in records]

    def test_node_fields(self, pipeline_result):
        artifact = pipeline_result.to_artifact()
        for node, leaf in zip(artifact.nodes, pipeline_result.leaves):
            assert node.address == to_hex(leaf.record.target_address)
            assert node.balance_units == leaf.record.balance_units
            assert node.threshold == leaf.record.threshold
            assert from_hex(node.payload) == leaf.payload
            assert from_hex(node.hash) == leaf.hash
            assert [from_hex(s) for s in node.proof] == pipeline_result.proofs[leaf.hash]

    def test_multisig_keys_exported(self, pipeline_result):
        artifact = pipeline_result.to_artifact()
        multisig = [n for n in artifact.nodes if n.threshold]

        assert len(multisig) == 2
        assert all(n.mandatory_keys for n in multisig)

    def test_signature_bundles_exported(self, pipeline_result):
        artifact = pipeline_result.to_artifact()

        assert [b.leaf_hash for b in artifact.signatures] == [n.hash for n in artifact.nodes]
        for bundle in artifact.signatures:
            assert len(from_hex(bundle.commitment)) == 41
            for pair in bundle.signatures:
                assert len(from_hex(pair.r)) == 32
                assert len(from_hex(pair.s)) == 32

    def test_simple_artifact(self, pipeline_result):
        simple = pipeline_result.to_simple_artifact()
        full = pipeline_result.to_artifact()

        assert simple.merkle_root == full.merkle_root
        assert [n.proof for n in simple.nodes] == [n.proof for n in full.nodes]
        assert [n.balance_units for n in simple.nodes] == [n.balance_units for n in full.nodes]
