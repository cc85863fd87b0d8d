"""
Runtime Configuration

Central configuration for dataset locations, signing and fixture generation.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


# Recipient bound into every example redemption commitment
DEFAULT_RECIPIENT = "0x34A1D3fff3958843C43aD80F30b94c510645C316"


@dataclass
class PathsConfig:
    """Dataset layout: <data_dir>/<example_subdir|production_subdir>/<file>."""
    data_dir: str = "./data"
    example_subdir: str = "example"
    production_subdir: str = "mainnet"
    ledger_file: str = "balances.json"
    key_file: str = "dev-validators.json"
    result_file: str = "merkle-tree-result.json"
    simple_result_file: str = "merkle-tree-result-simple.json"
    manifest_file: str = "manifest.json"

    def dataset_dir(self, example: bool) -> Path:
        return Path(self.data_dir) / (self.example_subdir if example else self.production_subdir)


@dataclass
class SigningConfig:
    """Configuration for the signature collector."""
    recipient: str = DEFAULT_RECIPIENT
    # Sign in production mode when a key file is present in the dataset dir
    sign_production: bool = True


@dataclass
class FixtureConfig:
    """Configuration for the example dataset generator."""
    num_regular: int = 50
    seed: int = 0
    key_count: int = 103


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (CLAIMTREE_*, .env honoured)
    - A dictionary (e.g. the "runtime" section of the CLI config file)
    - Programmatic construction
    """
    paths: PathsConfig = field(default_factory=PathsConfig)
    signing: SigningConfig = field(default_factory=SigningConfig)
    fixtures: FixtureConfig = field(default_factory=FixtureConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - CLAIMTREE_DATA_DIR: Root of the dataset directories
        - CLAIMTREE_RECIPIENT: 0x address bound into commitments
        - CLAIMTREE_SIGN_PRODUCTION: Sign in production mode (true/false)
        - CLAIMTREE_FIXTURE_SEED: Seed of the example balance function
        - CLAIMTREE_NUM_REGULAR: Regular accounts in the example ledger
        """
        overrides: dict[str, Any] = {}

        if os.getenv("CLAIMTREE_DATA_DIR"):
            overrides.setdefault("paths", {})["data_dir"] = os.getenv("CLAIMTREE_DATA_DIR")

        if os.getenv("CLAIMTREE_RECIPIENT"):
            overrides.setdefault("signing", {})["recipient"] = os.getenv("CLAIMTREE_RECIPIENT")
        if os.getenv("CLAIMTREE_SIGN_PRODUCTION"):
            overrides.setdefault("signing", {})["sign_production"] = (
                os.getenv("CLAIMTREE_SIGN_PRODUCTION", "true").lower() == "true"
            )

        if os.getenv("CLAIMTREE_FIXTURE_SEED"):
            overrides.setdefault("fixtures", {})["seed"] = int(os.getenv("CLAIMTREE_FIXTURE_SEED", "0"))
        if os.getenv("CLAIMTREE_NUM_REGULAR"):
            overrides.setdefault("fixtures", {})["num_regular"] = int(os.getenv("CLAIMTREE_NUM_REGULAR", "50"))

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        paths_data = data.get("paths", {})
        signing_data = data.get("signing", {})
        fixtures_data = data.get("fixtures", {})

        return cls(
            paths=PathsConfig(**paths_data) if paths_data else PathsConfig(),
            signing=SigningConfig(**signing_data) if signing_data else SigningConfig(),
            fixtures=FixtureConfig(**fixtures_data) if fixtures_data else FixtureConfig(),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("paths", "signing", "fixtures"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "paths": {
                "data_dir": self.paths.data_dir,
                "example_subdir": self.paths.example_subdir,
                "production_subdir": self.paths.production_subdir,
                "ledger_file": self.paths.ledger_file,
                "key_file": self.paths.key_file,
                "result_file": self.paths.result_file,
                "simple_result_file": self.paths.simple_result_file,
                "manifest_file": self.paths.manifest_file,
            },
            "signing": {
                "recipient": self.signing.recipient,
                "sign_production": self.signing.sign_production,
            },
            "fixtures": {
                "num_regular": self.fixtures.num_regular,
                "seed": self.fixtures.seed,
                "key_count": self.fixtures.key_count,
            },
            "extra": self.extra,
        }
