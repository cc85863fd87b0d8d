"""
CLI Verify Command

Re-validate a written artifact set offline:
- Verify file hashes (manifest)
- Rebuild the tree and replay every proof
- Check every signature against its commitment

Usage:
    claimtree verify [--example] [--dir DIR] [--json] [--debug]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from core.schemas.verification import VerificationResult
from orchestrator.artifacts.validate import validate_artifact_dir
from orchestrator.pipeline import parse_recipient

from claimtree_cli.commands.build import artifact_names
from claimtree_cli.config import CLIConfig


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of artifact verification for CLI output."""
    artifact_dir: str = ""
    ok: bool = False
    passed: int = 0
    failed: int = 0
    checks: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["checks"]:
            del d["checks"]
        if not d["errors"]:
            del d["errors"]
        return d


def build_summary(artifact_dir: Path, result: VerificationResult, debug: bool = False) -> VerifySummary:
    summary = VerifySummary(
        artifact_dir=str(artifact_dir),
        ok=result.ok,
        passed=result.passed_count,
        failed=result.error_count,
        errors=result.get_error_messages(),
    )
    if debug:
        summary.checks = [
            {
                "check_id": check.check_id,
                "ok": check.ok,
                "severity": check.severity,
                "message": check.message,
                "details": check.details,
            }
            for check in result.checks
        ]
    return summary


def print_summary_human(summary: VerifySummary) -> None:
    print(f"artifacts: {summary.artifact_dir}")
    print(f"ok: {str(summary.ok).lower()}")
    print(f"checks: {summary.passed} passed, {summary.failed} failed")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors[:10]:
            print(f"  ✗ {err}")

    for check in summary.checks[:20]:
        status = "✓" if check["ok"] else "✗"
        print(f"  {status} {check['check_id']}: {check['message']}")


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Returns:
        EXIT_SUCCESS when every check passed, EXIT_VERIFICATION_FAILED otherwise
    """
    config: CLIConfig = args.cli_config
    runtime = config.runtime
    artifact_dir = Path(args.dir) if args.dir else runtime.paths.dataset_dir(args.example)

    if not artifact_dir.exists():
        print(f"Error: Artifact directory not found: {artifact_dir}")
        return EXIT_RUNTIME_ERROR

    recipient = parse_recipient(runtime.signing.recipient)
    result = validate_artifact_dir(artifact_dir, recipient=recipient, names=artifact_names(runtime))
    summary = build_summary(artifact_dir, result, debug=args.debug)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2, default=str))
    else:
        print_summary_human(summary)

    if summary.ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS
    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
