"""
CLI Configuration

Configuration management for the claimtree CLI.
Supports environment variables and configuration files.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from core.config import RuntimeConfig


# Environment variable prefix
ENV_PREFIX = "CLAIMTREE_"

DEFAULT_CONFIG_PATHS = (
    Path("claimtree.json"),
    Path(".claimtree.json"),
    Path.home() / ".config" / "claimtree" / "config.json",
)


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    # Dataset layout, signing and fixture settings
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)

    # Output
    default_output_format: str = "human"  # "human" or "json"

    def to_dict(self) -> dict:
        return {
            "log_level": self.log_level,
            "log_file": self.log_file,
            "default_output_format": self.default_output_format,
            "runtime": self.runtime.to_dict(),
        }


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    config = CLIConfig()
    config.log_level = data.get("log_level", config.log_level)
    config.log_file = data.get("log_file", config.log_file)
    config.default_output_format = data.get("default_output_format", config.default_output_format)
    config.runtime = RuntimeConfig.from_dict(data.get("runtime", {}))
    return config


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file; when None the default
            locations are searched in order

    Returns:
        Merged configuration
    """
    config = CLIConfig()

    if config_path is not None:
        config = load_config_from_file(config_path)
    else:
        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO")
    if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config.log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")

    config.runtime = config.runtime.with_env_overrides()
    return config


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(CLIConfig().to_dict(), indent=2) + "\n"
