"""
Artifact IO & Validation Tests
Tests for orchestrator/artifacts/io.py and orchestrator/artifacts/validate.py

Tests:
1. Write artifact set, load it back, validation passes
2. Manifest digests match the written files
3. A failed write leaves the output directory untouched
4. Tampered files, proofs and signatures are reported as failed checks
"""
import json
from decimal import Decimal

import pytest

from core.schemas.errors import ArtifactIOError
from core.schemas.versioning import FORMAT_VERSION
from orchestrator.artifacts import io as artifact_io
from orchestrator.artifacts.io import (
    MANIFEST_FILE,
    RESULT_FILE,
    SIMPLE_RESULT_FILE,
    compute_sha256,
    load_manifest,
    load_simple_tree_result,
    load_tree_result,
    render_artifacts,
    write_artifacts,
)
from orchestrator.artifacts.validate import validate_artifact_dir, validate_tree_result
from orchestrator.pipeline import run_pipeline

from fixtures.common import make_regular_record


def fail_replace_on_call(monkeypatch, failing_call):
    """Make the n-th os.replace call raise; all others go through."""
    real_replace = artifact_io.os.replace
    calls = []

    def flaky_replace(src, dst):
        calls.append(dst)
        if len(calls) == failing_call:
            raise OSError("device went away")
        return real_replace(src, dst)

    monkeypatch.setattr(artifact_io.os, "replace", flaky_replace)


class TestWriteArtifacts:
    """Tests for write_artifacts()."""

    def test_files_written(self, pipeline_result, tmp_path):
        written = write_artifacts(pipeline_result, tmp_path, include_simple=True)

        assert set(written) == {RESULT_FILE, SIMPLE_RESULT_FILE, MANIFEST_FILE}
        assert sorted(p.name for p in tmp_path.iterdir()) == sorted(written)

    def test_simple_variant_optional(self, pipeline_result, tmp_path):
        write_artifacts(pipeline_result, tmp_path)
        assert not (tmp_path / SIMPLE_RESULT_FILE).exists()

    def test_output_dir_created(self, pipeline_result, tmp_path):
        out = tmp_path / "nested" / "out"
        write_artifacts(pipeline_result, out)
        assert (out / RESULT_FILE).exists()

    def test_manifest_digests(self, pipeline_result, tmp_path):
        write_artifacts(pipeline_result, tmp_path, include_simple=True)
        manifest = load_manifest(tmp_path / MANIFEST_FILE)

        assert manifest.format_version == FORMAT_VERSION
        assert manifest.leaf_count == len(pipeline_result.leaves)
        assert manifest.signed
        for entry in manifest.files.values():
            data = (tmp_path / entry.path).read_bytes()
            assert entry.sha256 == compute_sha256(data)
            assert entry.size == len(data)

    def test_rendering_deterministic(self, pipeline_result):
        assert render_artifacts(pipeline_result) == render_artifacts(pipeline_result)

    def test_camel_case_fields(self, pipeline_result, tmp_path):
        write_artifacts(pipeline_result, tmp_path)
        data = json.loads((tmp_path / RESULT_FILE).read_text())

        assert "merkleRoot" in data
        node = data["nodes"][0]
        assert {"lskAddress", "address", "balance", "balanceUnits", "payload", "hash", "proof"} <= set(node)
        assert {"leafHash", "commitment", "signatures"} <= set(data["signatures"][0])
        assert {"publicKey", "r", "s"} == set(data["signatures"][0]["signatures"][0])

    def test_unsigned_run_omits_signatures(self, records, recipient, tmp_path):
        write_artifacts(run_pipeline(records, recipient), tmp_path)
        data = json.loads((tmp_path / RESULT_FILE).read_text())
        assert "signatures" not in data

    def test_failed_move_leaves_directory_untouched(self, pipeline_result, tmp_path, monkeypatch):
        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(artifact_io.os, "replace", failing_replace)

        with pytest.raises(ArtifactIOError, match="disk full"):
            write_artifacts(pipeline_result, tmp_path, include_simple=True)
        assert list(tmp_path.iterdir()) == []

    def test_previous_set_kept_on_failure(self, pipeline_result, tmp_path, monkeypatch):
        write_artifacts(pipeline_result, tmp_path)
        before = (tmp_path / RESULT_FILE).read_bytes()

        def failing_replace(src, dst):
            raise OSError("boom")

        monkeypatch.setattr(artifact_io.os, "replace", failing_replace)
        with pytest.raises(ArtifactIOError):
            write_artifacts(pipeline_result, tmp_path)

        assert (tmp_path / RESULT_FILE).read_bytes() == before
        assert not any(p.name.startswith(".staging-") for p in tmp_path.iterdir())

    def test_failed_second_move_leaves_directory_empty(self, pipeline_result, tmp_path, monkeypatch):
        fail_replace_on_call(monkeypatch, 2)

        with pytest.raises(ArtifactIOError, match="device went away"):
            write_artifacts(pipeline_result, tmp_path, include_simple=True)
        assert list(tmp_path.iterdir()) == []

    def test_failed_second_move_restores_previous_set(self, pipeline_result, records, recipient, tmp_path, monkeypatch):
        write_artifacts(pipeline_result, tmp_path, include_simple=True)
        before = {p.name: p.read_bytes() for p in tmp_path.iterdir()}

        fail_replace_on_call(monkeypatch, 2)
        with pytest.raises(ArtifactIOError):
            write_artifacts(run_pipeline(records[:-1], recipient), tmp_path, include_simple=True)

        assert {p.name: p.read_bytes() for p in tmp_path.iterdir()} == before
        assert validate_artifact_dir(tmp_path, recipient=recipient).ok

    def test_simple_file_matches_harness_layout(self, pipeline_result, tmp_path):
        write_artifacts(pipeline_result, tmp_path, include_simple=True)
        data = json.loads((tmp_path / SIMPLE_RESULT_FILE).read_text())

        assert list(data) == ["merkleRoot", "nodes"]
        for node in data["nodes"]:
            assert list(node) == [
                "b32Address",
                "balanceBeddows",
                "mandatoryKeys",
                "numberOfSignatures",
                "optionalKeys",
                "proof",
            ]
        assert [n["numberOfSignatures"] for n in data["nodes"]] == [0, 0, 0, 0, 2, 2]


class TestLoadArtifacts:
    """Tests for the loaders."""

    def test_round_trip(self, pipeline_result, tmp_path):
        write_artifacts(pipeline_result, tmp_path, include_simple=True)

        assert load_tree_result(tmp_path / RESULT_FILE) == pipeline_result.to_artifact()
        simple = load_simple_tree_result(tmp_path / SIMPLE_RESULT_FILE)
        assert simple.merkle_root == pipeline_result.to_artifact().merkle_root

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArtifactIOError, match="not found"):
            load_tree_result(tmp_path / RESULT_FILE)

    def test_malformed_file(self, tmp_path):
        (tmp_path / RESULT_FILE).write_text('{"nodes": []}')
        with pytest.raises(ArtifactIOError, match="Malformed"):
            load_tree_result(tmp_path / RESULT_FILE)

    def test_incompatible_manifest_version(self, pipeline_result, tmp_path):
        write_artifacts(pipeline_result, tmp_path)
        path = tmp_path / MANIFEST_FILE
        data = json.loads(path.read_text())
        data["formatVersion"] = "2.0"
        path.write_text(json.dumps(data))

        with pytest.raises(ArtifactIOError, match="Incompatible"):
            load_manifest(path)


class TestValidation:
    """Tests for validate_tree_result() and validate_artifact_dir()."""

    def test_valid_set(self, pipeline_result, recipient, tmp_path):
        write_artifacts(pipeline_result, tmp_path, include_simple=True)
        result = validate_artifact_dir(tmp_path, recipient=recipient)

        assert result.ok, result.get_error_messages()
        assert result.error_count == 0

    def test_tampered_file_detected(self, pipeline_result, recipient, tmp_path, assert_check_failed):
        write_artifacts(pipeline_result, tmp_path)
        path = tmp_path / RESULT_FILE
        data = json.loads(path.read_text())
        data["nodes"][0]["balanceUnits"] += 1
        path.write_text(json.dumps(data))

        result = validate_artifact_dir(tmp_path, recipient=recipient)

        assert not result.ok
        assert_check_failed(result, "hash_result")
        assert_check_failed(result, "nodes")

    def test_bad_proof_detected(self, pipeline_result, recipient, assert_check_failed):
        artifact = pipeline_result.to_artifact()
        node = artifact.nodes[0]
        broken = node.model_copy(update={"proof": list(reversed(node.proof)) + [node.hash]})
        tampered = artifact.model_copy(update={"nodes": [broken] + artifact.nodes[1:]})

        result = validate_tree_result(tampered, recipient)
        assert_check_failed(result, "nodes")

    def test_wrong_recipient_detected(self, pipeline_result, assert_check_failed, assert_check_passed):
        result = validate_tree_result(pipeline_result.to_artifact(), recipient=bytes(20))

        assert_check_passed(result, "nodes")
        assert_check_failed(result, "signatures")

    def test_forged_signature_detected(self, pipeline_result, recipient, assert_check_failed):
        artifact = pipeline_result.to_artifact()
        bundle = artifact.signatures[0]
        pair = bundle.signatures[0].model_copy(update={"s": "0x" + "00" * 32})
        forged = bundle.model_copy(update={"signatures": [pair]})
        tampered = artifact.model_copy(update={"signatures": [forged] + artifact.signatures[1:]})

        result = validate_tree_result(tampered, recipient)
        assert_check_failed(result, "signatures")

    def test_unsigned_result_warns(self, records, recipient, assert_check_passed):
        result = validate_tree_result(run_pipeline(records, recipient).to_artifact(), recipient)

        assert result.ok
        warnings = [c for c in result.checks if c.is_warning]
        assert [c.check_id for c in warnings] == ["signatures"]

    def test_missing_directory(self, tmp_path):
        result = validate_artifact_dir(tmp_path / "nothing")

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "ARTIFACT_IO_ERROR"

    def test_high_precision_balance_kept_exact(self, keys, recipient, tmp_path):
        record = make_regular_record(keys[0], balance="123456789.12345677")
        write_artifacts(run_pipeline([record], recipient), tmp_path)

        assert '"balance":123456789.12345677,' in (tmp_path / RESULT_FILE).read_text()
        node = load_tree_result(tmp_path / RESULT_FILE).nodes[0]
        assert node.balance == Decimal("123456789.12345677")
        assert node.balance_units == 12345678912345677
        assert validate_artifact_dir(tmp_path, recipient=recipient).ok

    def test_undecodable_proof_reported(self, pipeline_result, recipient, assert_check_failed):
        artifact = pipeline_result.to_artifact()
        broken = artifact.nodes[0].model_copy(update={"proof": ["not-hex"]})
        tampered = artifact.model_copy(update={"nodes": [broken] + artifact.nodes[1:]})

        result = validate_tree_result(tampered, recipient)

        assert_check_failed(result, "nodes")
        nodes_check = next(c for c in result.checks if c.check_id == "nodes")
        problems = nodes_check.details["failures"][broken.lsk_address]
        assert any(p.startswith("undecodable proof") for p in problems)
