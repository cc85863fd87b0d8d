"""
Artifact IO
File: io.py

Purpose: Write and read the artifact set of one run:

    merkle-tree-result.json         root, merged nodes, signatures
    merkle-tree-result-simple.json  reduced nodes (optional)
    manifest.json                   format version, root, file digests

Every file is rendered in memory first, then written into a staging
directory and moved into place. Files being replaced are copied aside
first; if any move fails the moved files are undone, so the output
directory holds either the complete new set or the previous one.
"""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from core.schemas.artifacts import (
    ArtifactManifest,
    ManifestFileEntry,
    SimpleTreeResultArtifact,
    TreeResultArtifact,
)
from core.schemas.canonical import dumps_canonical, loads_exact
from core.schemas.errors import ArtifactIOError
from core.schemas.versioning import is_compatible_format_version

from orchestrator.pipeline import PipelineResult


logger = logging.getLogger(__name__)


# File name defaults
RESULT_FILE = "merkle-tree-result.json"
SIMPLE_RESULT_FILE = "merkle-tree-result-simple.json"
MANIFEST_FILE = "manifest.json"


@dataclass(frozen=True)
class ArtifactNames:
    """File names of one artifact set."""
    result: str = RESULT_FILE
    simple_result: str = SIMPLE_RESULT_FILE
    manifest: str = MANIFEST_FILE


def dump_json(obj: Any) -> bytes:
    """Serialize a model or plain value to canonical JSON bytes."""
    return dumps_canonical(obj).encode("utf-8")


def compute_sha256(data: bytes) -> str:
    """Compute SHA-256 hex digest of data."""
    return hashlib.sha256(data).hexdigest()


def render_artifacts(
    result: PipelineResult,
    *,
    include_simple: bool = False,
    names: ArtifactNames = ArtifactNames(),
) -> dict[str, bytes]:
    """
    Render every file of the artifact set, manifest last.

    Returns:
        Mapping of file name to file content.
    """
    files: dict[str, bytes] = {names.result: dump_json(result.to_artifact())}
    if include_simple:
        files[names.simple_result] = dump_json(result.to_simple_artifact())

    manifest = ArtifactManifest(
        merkle_root="0x" + result.root.hex(),
        leaf_count=len(result.leaves),
        signed=result.signed,
        files={
            key: ManifestFileEntry(path=name, sha256=compute_sha256(data), size=len(data))
            for key, name, data in (
                ("result", names.result, files.get(names.result)),
                ("simple_result", names.simple_result, files.get(names.simple_result)),
            )
            if data is not None
        },
    )
    files[names.manifest] = dump_json(manifest)
    return files


def write_artifacts(
    result: PipelineResult,
    out_dir: str | Path,
    *,
    include_simple: bool = False,
    names: ArtifactNames = ArtifactNames(),
) -> dict[str, Path]:
    """
    Write the artifact set of a completed run.

    Args:
        result: Output of a successful pipeline run
        out_dir: Target directory (created if missing)
        include_simple: Also write the reduced-field variant

    Returns:
        Mapping of file name to written path

    Raises:
        ArtifactIOError: If the files cannot be written
    """
    files = render_artifacts(result, include_simple=include_simple, names=names)

    out_path = Path(out_dir)
    written: dict[str, Path] = {}
    try:
        out_path.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=out_path, prefix=".staging-") as staging:
            staging_path = Path(staging)
            backup_dir = staging_path / ".previous"
            backup_dir.mkdir()

            staged: list[tuple[Path, Path, Optional[Path]]] = []
            for name, data in files.items():
                tmp = staging_path / name
                tmp.write_bytes(data)
                final = out_path / name
                backup = None
                if final.exists():
                    backup = backup_dir / name
                    shutil.copy2(final, backup)
                staged.append((tmp, final, backup))

            published: list[tuple[Path, Optional[Path]]] = []
            try:
                for tmp, final, backup in staged:
                    os.replace(tmp, final)
                    published.append((final, backup))
            except OSError:
                _restore(published)
                raise
            written = {final.name: final for final, _ in published}
    except OSError as e:
        raise ArtifactIOError(f"Failed to write artifacts: {e}", path=str(out_path)) from e

    logger.info("Wrote %d artifact file(s) to %s", len(written), out_path)
    return written


def _restore(published: list[tuple[Path, Optional[Path]]]) -> None:
    """Undo a partly published set: put back previous files, drop new ones."""
    for final, backup in reversed(published):
        try:
            if backup is None:
                final.unlink(missing_ok=True)
            else:
                os.replace(backup, final)
        except OSError as e:
            logger.error("Could not restore %s: %s", final, e)


def write_json(path: str | Path, obj: Any) -> Path:
    """Write one JSON document through a staging file in the same directory."""
    path = Path(path)
    data = dump_json(obj)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".staging-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise ArtifactIOError(f"Failed to write {path}: {e}", path=str(path)) from e
    return path


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as e:
        raise ArtifactIOError(f"Artifact not found: {path}", path=str(path)) from e
    except OSError as e:
        raise ArtifactIOError(f"Failed to read {path}: {e}", path=str(path)) from e


def _parse(model: type[BaseModel], data: bytes, path: Path) -> Any:
    try:
        return model.model_validate(loads_exact(data))
    except (ValueError, ValidationError) as e:
        raise ArtifactIOError(f"Malformed artifact {path}: {e}", path=str(path)) from e


def load_tree_result(path: str | Path) -> TreeResultArtifact:
    """Load a tree result file."""
    path = Path(path)
    return _parse(TreeResultArtifact, _read_bytes(path), path)


def load_simple_tree_result(path: str | Path) -> SimpleTreeResultArtifact:
    path = Path(path)
    return _parse(SimpleTreeResultArtifact, _read_bytes(path), path)


def load_manifest(path: str | Path) -> ArtifactManifest:
    """Load a manifest, rejecting unknown format versions."""
    path = Path(path)
    manifest = _parse(ArtifactManifest, _read_bytes(path), path)
    if not is_compatible_format_version(manifest.format_version):
        raise ArtifactIOError(
            f"Incompatible format version: {manifest.format_version}", path=str(path)
        )
    return manifest


def read_artifact_bytes(out_dir: str | Path, manifest: ArtifactManifest) -> dict[str, Optional[bytes]]:
    """Raw content of every file listed in the manifest (None when missing)."""
    base = Path(out_dir)
    contents: dict[str, Optional[bytes]] = {}
    for key, entry in manifest.files.items():
        file_path = base / entry.path
        contents[key] = file_path.read_bytes() if file_path.exists() else None
    return contents


__all__ = [
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
]
