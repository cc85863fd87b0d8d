"""
CLI Build Command

Load a dataset, run the commitment pipeline and write the artifact set
next to the ledger.

Usage:
    claimtree build --example
    claimtree build [--out DIR] [--no-sign]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from core.config import RuntimeConfig
from core.crypto.hashing import to_hex
from core.ledger import load_key_material, load_ledger
from core.schemas.ledger import KeyMaterial
from orchestrator.artifacts.io import ArtifactNames, write_artifacts
from orchestrator.pipeline import MigrationPipeline

from claimtree_cli.config import CLIConfig


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class BuildSummary:
    """Summary of a build run for CLI output."""
    dataset: str = ""
    merkle_root: str = ""
    leaf_count: int = 0
    multisig_count: int = 0
    depth: int = 0
    signed: bool = False
    signature_count: int = 0
    recipient: str = ""
    written: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def artifact_names(runtime: RuntimeConfig) -> ArtifactNames:
    return ArtifactNames(
        result=runtime.paths.result_file,
        simple_result=runtime.paths.simple_result_file,
        manifest=runtime.paths.manifest_file,
    )


def resolve_signing_keys(
    runtime: RuntimeConfig,
    dataset_dir: Path,
    *,
    example: bool,
    no_sign: bool = False,
) -> Optional[list[KeyMaterial]]:
    """
    Decide whether this run signs, and with which keys.

    Example runs always sign with the fixture key file. Production runs
    sign only when enabled and a key file is present.
    """
    if no_sign:
        return None
    key_path = dataset_dir / runtime.paths.key_file
    if example:
        return load_key_material(key_path)
    if runtime.signing.sign_production and key_path.exists():
        return load_key_material(key_path)
    logger.info("No key file at %s, signatures will not be produced", key_path)
    return None


def build_dataset(
    runtime: RuntimeConfig,
    *,
    example: bool,
    out_dir: Path | None = None,
    no_sign: bool = False,
) -> BuildSummary:
    """
    Run the full build for one dataset directory.

    Raises:
        ClaimTreeException: On malformed input, missing keys or write failure;
            nothing is written in that case.
    """
    dataset_dir = runtime.paths.dataset_dir(example)
    logger.info("Building %s dataset in %s", "example" if example else "production", dataset_dir)

    records = load_ledger(dataset_dir / runtime.paths.ledger_file)
    keys = resolve_signing_keys(runtime, dataset_dir, example=example, no_sign=no_sign)

    pipeline = MigrationPipeline(recipient=runtime.signing.recipient, keys=keys)
    result = pipeline.run(records)

    written = write_artifacts(
        result,
        out_dir or dataset_dir,
        include_simple=example,
        names=artifact_names(runtime),
    )

    signature_count = 0
    if result.authorizations is not None:
        signature_count = sum(len(b.signatures) for b in result.authorizations.values())

    return BuildSummary(
        dataset=str(dataset_dir),
        merkle_root=to_hex(result.root),
        leaf_count=len(result.leaves),
        multisig_count=sum(1 for leaf in result.leaves if leaf.record.is_multisig),
        depth=result.tree.depth,
        signed=result.signed,
        signature_count=signature_count,
        recipient=to_hex(result.recipient) if result.recipient else "",
        written=[str(p) for p in written.values()],
    )


def print_summary_human(summary: BuildSummary) -> None:
    print(f"dataset: {summary.dataset}")
    print(f"merkle_root: {summary.merkle_root}")
    print(f"leaves: {summary.leaf_count} ({summary.multisig_count} multisig)")
    print(f"depth: {summary.depth}")
    if summary.signed:
        print(f"signatures: {summary.signature_count} (recipient {summary.recipient})")
    else:
        print("signatures: none")
    for path in summary.written:
        print(f"  wrote {path}")


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config: CLIConfig = args.cli_config
    out_dir = Path(args.out) if args.out else None

    summary = build_dataset(
        config.runtime,
        example=args.example,
        out_dir=out_dir,
        no_sign=args.no_sign,
    )

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    logger.info("Build complete: %s", summary.merkle_root)
    return EXIT_SUCCESS
