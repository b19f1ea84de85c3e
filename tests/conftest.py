"""
Pytest Configuration and Shared Fixtures

Centralized fixtures for testing the agreement ledger: isolated
environment and configuration, temporary databases, a ready registry and
helpers for building content and signature hashes.
"""

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from covenant.contracts import ContractRegistry, create_registry
from covenant.core import LedgerConfig, LogicalClock, set_config


# =============================================================================
# Environment Setup
# =============================================================================


@pytest.fixture(autouse=True)
def clean_environment():
    """Ensure clean environment for each test."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def reset_config():
    """Reset the global ledger configuration between tests."""
    yield
    set_config(None)


# =============================================================================
# Temporary Directory Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_db_path(temp_dir: Path) -> Path:
    """Provide a temporary database path."""
    return temp_dir / "ledger.db"


# =============================================================================
# Ledger Fixtures
# =============================================================================


@pytest.fixture
def ledger_config() -> LedgerConfig:
    """In-memory configuration with default bounds."""
    return LedgerConfig()


@pytest.fixture
def registry(ledger_config: LedgerConfig) -> Generator[ContractRegistry, None, None]:
    """Provide a registry over a fresh in-memory database."""
    registry = create_registry(ledger_config)
    yield registry
    registry.close()


@pytest.fixture
def clock() -> LogicalClock:
    """Logical clock; each as_caller() call is one tick."""
    return LogicalClock()


@pytest.fixture
def content_hash() -> Callable[[str], bytes]:
    """Build a 32-byte content fingerprint from a label."""

    def _make(label: str = "content") -> bytes:
        return hashlib.sha256(label.encode()).digest()

    return _make


@pytest.fixture
def sign() -> Callable[[str], bytes]:
    """Build a 64-byte opaque signature from a label."""

    def _make(label: str = "signature") -> bytes:
        return hashlib.sha512(label.encode()).digest()

    return _make


@pytest.fixture
def nda(registry: ContractRegistry, clock: LogicalClock, content_hash) -> int:
    """An active two-signature NDA created by alice."""
    return registry.create_contract(
        clock.as_caller("alice"),
        "NDA",
        "Mutual non-disclosure",
        2,
        content_hash("nda-v0"),
    )
