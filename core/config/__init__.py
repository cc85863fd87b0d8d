"""
Runtime Configuration Module

Provides configuration loading and management for claimtree.
"""

from .runtime import (
    DEFAULT_RECIPIENT,
    FixtureConfig,
    PathsConfig,
    RuntimeConfig,
    SigningConfig,
)

__all__ = [
    "DEFAULT_RECIPIENT",
    "FixtureConfig",
    "PathsConfig",
    "RuntimeConfig",
    "SigningConfig",
]
