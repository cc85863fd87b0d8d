"""
CLI command modules.
"""

from claimtree_cli.commands import build, fixtures, verify

__all__ = ["build", "fixtures", "verify"]
