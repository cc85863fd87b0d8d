"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m claimtree_cli fixtures [--keys N] [--key-seed TEXT] [--seed N] [--num-regular N]
    python -m claimtree_cli build [--example] [--out DIR] [--no-sign] [--json] [--debug]
    python -m claimtree_cli verify [--example] [--dir DIR] [--json] [--debug]
    python -m claimtree_cli config --init|--show

Environment Variables:
    CLAIMTREE_DATA_DIR          Root of the dataset directories (default: ./data)
    CLAIMTREE_RECIPIENT         0x address bound into every commitment
    CLAIMTREE_SIGN_PRODUCTION   Sign production runs when a key file exists (default: true)
    CLAIMTREE_FIXTURE_SEED      Seed of the example balance function
    CLAIMTREE_NUM_REGULAR       Regular accounts in the example ledger
    CLAIMTREE_LOG_LEVEL         Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from core.schemas.errors import ClaimTreeException

from claimtree_cli import __version__
from claimtree_cli.commands import build, fixtures, verify
from claimtree_cli.config import get_default_config_template, load_config


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Include detailed checks and tracebacks in output",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="claimtree",
        description="Build Merkle claim trees for the token migration and collect redemption signatures.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./claimtree.json or ~/.config/claimtree/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build the Merkle tree and signatures for a dataset",
        description="Load the ledger, build the tree, collect signatures and write the artifact set.",
    )
    build_parser.add_argument(
        "--example",
        action="store_true",
        default=False,
        help="Use the example dataset and its fixture keys",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output directory (default: the dataset directory)",
    )
    build_parser.add_argument(
        "--no-sign",
        action="store_true",
        default=False,
        help="Skip signature collection",
    )
    _add_output_flags(build_parser)
    build_parser.set_defaults(func=build.build_cmd)

    # --- fixtures command ---
    fixtures_parser = subparsers.add_parser(
        "fixtures",
        help="Generate the example ledger and fixture keys",
        description="Write fixture key material (when missing or --keys given) and the example ledger.",
    )
    fixtures_parser.add_argument(
        "--keys",
        type=int,
        default=None,
        help="Regenerate the key file with N keys",
    )
    fixtures_parser.add_argument(
        "--key-seed",
        type=str,
        default=None,
        help="Derive regenerated keys from this seed instead of fresh randomness",
    )
    fixtures_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed of the balance function (overrides config)",
    )
    fixtures_parser.add_argument(
        "--num-regular",
        type=int,
        default=None,
        help="Number of regular accounts (overrides config)",
    )
    _add_output_flags(fixtures_parser)
    fixtures_parser.set_defaults(func=fixtures.fixtures_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a written artifact set offline",
        description="Check manifest hashes, rebuild the tree, replay proofs and check signatures.",
    )
    verify_parser.add_argument(
        "--example",
        action="store_true",
        default=False,
        help="Verify the example dataset directory",
    )
    verify_parser.add_argument(
        "--dir",
        type=str,
        default=None,
        help="Artifact directory (default: the dataset directory)",
    )
    _add_output_flags(verify_parser)
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="claimtree.json",
        help="Path for config file (default: claimtree.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (CLAIMTREE_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: claimtree config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    debug = getattr(args, "debug", False)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ClaimTreeException as e:
        logger.error("%s: %s", e.code, e.message)
        if debug:
            traceback.print_exc()
        if getattr(args, "json", False):
            print(json.dumps(e.to_error_model().model_dump(mode="json"), indent=2))
        else:
            print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (OSError, ValueError) as e:
        if debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
