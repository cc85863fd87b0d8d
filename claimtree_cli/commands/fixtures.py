"""
CLI Fixtures Command

Generate the example dataset: fixture key material (when missing or
explicitly requested) and a ledger built from it.

Usage:
    claimtree fixtures [--keys N] [--seed N] [--num-regular N]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path
from typing import Any

from core.config import RuntimeConfig
from core.ledger import (
    dump_key_material,
    dump_ledger,
    generate_key_material,
    generate_ledger,
    load_key_material,
    required_key_count,
    seeded_balances,
)
from core.schemas.ledger import DEFAULT_ARCHETYPES
from orchestrator.artifacts.io import write_json

from claimtree_cli.config import CLIConfig


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0


def generate_example_dataset(
    runtime: RuntimeConfig,
    *,
    key_count: int | None = None,
    key_seed: bytes | None = None,
) -> dict[str, Any]:
    """
    Write the example key file (if needed) and ledger.

    Args:
        runtime: Configuration supplying paths, seed and account count
        key_count: Regenerate the key file with this many keys
        key_seed: Make regenerated keys reproducible

    Returns:
        Summary of what was written
    """
    dataset_dir = runtime.paths.dataset_dir(example=True)
    key_path = dataset_dir / runtime.paths.key_file
    ledger_path = dataset_dir / runtime.paths.ledger_file

    num_regular = runtime.fixtures.num_regular
    needed = required_key_count(num_regular, DEFAULT_ARCHETYPES)

    keys_written = False
    if key_count is not None or not key_path.exists():
        count = max(key_count or runtime.fixtures.key_count, needed)
        keys = generate_key_material(count, seed=key_seed)
        write_json(key_path, dump_key_material(keys))
        keys_written = True
        logger.info("Wrote %d fixture keys to %s", len(keys), key_path)
    else:
        keys = load_key_material(key_path)

    records = generate_ledger(
        keys,
        DEFAULT_ARCHETYPES,
        num_regular=num_regular,
        balance_fn=seeded_balances(runtime.fixtures.seed),
    )
    write_json(ledger_path, dump_ledger(records))
    logger.info("Wrote %d ledger entries to %s", len(records), ledger_path)

    return {
        "dataset": str(dataset_dir),
        "ledger": str(ledger_path),
        "key_file": str(key_path),
        "keys_written": keys_written,
        "key_count": len(keys),
        "accounts": len(records),
        "multisig_accounts": sum(1 for r in records if r.is_multisig),
    }


def fixtures_cmd(args: Namespace) -> int:
    """Execute the fixtures command."""
    config: CLIConfig = args.cli_config
    runtime = config.runtime
    if args.num_regular is not None:
        runtime.fixtures.num_regular = args.num_regular
    if args.seed is not None:
        runtime.fixtures.seed = args.seed

    key_seed = args.key_seed.encode("utf-8") if args.key_seed else None
    summary = generate_example_dataset(runtime, key_count=args.keys, key_seed=key_seed)

    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"dataset: {summary['dataset']}")
        print(f"accounts: {summary['accounts']} ({summary['multisig_accounts']} multisig)")
        state = "generated" if summary["keys_written"] else "reused"
        print(f"keys: {summary['key_count']} ({state})")
        print(f"  wrote {Path(summary['ledger'])}")
        if summary["keys_written"]:
            print(f"  wrote {Path(summary['key_file'])}")
    return EXIT_SUCCESS
