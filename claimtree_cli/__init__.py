"""
Claimtree CLI

Command-line interface for building and checking migration claim trees.

Usage:
    python -m claimtree_cli fixtures
    python -m claimtree_cli build --example
    python -m claimtree_cli verify --example
    python -m claimtree_cli config --show
"""

__version__ = "0.1.0"
