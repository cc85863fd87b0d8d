"""
Pytest configuration and shared fixtures for claimtree tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_keys = _common.make_keys
make_ledger = _common.make_ledger
TEST_RECIPIENT_BYTES = _common.TEST_RECIPIENT_BYTES


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def keys():
    """Provide eight deterministic signing keys."""
    return make_keys()


@pytest.fixture
def records(keys):
    """Provide a small mixed ledger (4 regular, 2 multisig)."""
    return make_ledger(keys)


@pytest.fixture
def recipient():
    """Provide the raw 20-byte recipient address."""
    return TEST_RECIPIENT_BYTES


@pytest.fixture
def pipeline_result(records, keys, recipient):
    """Provide a signed pipeline run over the small ledger."""
    from orchestrator.pipeline import run_pipeline
    return run_pipeline(records, recipient, keys=keys)


@pytest.fixture(autouse=True)
def _clear_claimtree_env(monkeypatch):
    """Keep CLAIMTREE_* variables from the outer environment out of tests."""
    import os
    for name in list(os.environ):
        if name.startswith("CLAIMTREE_"):
            monkeypatch.delenv(name, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_check_passed():
    """Helper to assert a specific check passed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert checks[0].ok, f"Check '{check_id}' failed: {checks[0].message}"
    return _assert


@pytest.fixture
def assert_check_failed():
    """Helper to assert a specific check failed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert not checks[0].ok, f"Check '{check_id}' unexpectedly passed"
    return _assert
