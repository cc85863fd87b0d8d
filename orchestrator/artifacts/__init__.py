"""
Artifact Packaging & IO

Provides functionality for writing, loading, and validating the artifact
set of a pipeline run.
"""

from orchestrator.artifacts.io import (
    RESULT_FILE,
    SIMPLE_RESULT_FILE,
    MANIFEST_FILE,
    ArtifactNames,
    dump_json,
    compute_sha256,
    render_artifacts,
    write_artifacts,
    write_json,
    load_tree_result,
    load_simple_tree_result,
    load_manifest,
    read_artifact_bytes,
)

from orchestrator.artifacts.validate import (
    validate_tree_result,
    validate_manifest_files,
    validate_artifact_dir,
)

__all__ = [
    # IO
    "RESULT_FILE",
    "SIMPLE_RESULT_FILE",
    "MANIFEST_FILE",
    "ArtifactNames",
    "dump_json",
    "compute_sha256",
    "render_artifacts",
    "write_artifacts",
    "write_json",
    "load_tree_result",
    "load_simple_tree_result",
    "load_manifest",
    "read_artifact_bytes",
    # Validation
    "validate_tree_result",
    "validate_manifest_files",
    "validate_artifact_dir",
]
