from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Generator, Iterator
from pathlib import Path

import pytest

from gitbridge.vault import CredentialVault, MemoryKeyValueStore


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for test environment.

    Runs for every test so log output goes to stderr at WARNING and does not
    mix with test stdout.
    """
    from gitbridge.logging import configure_logging

    configure_logging(level=logging.WARNING)
    yield


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files.

    Also saves and restores the current working directory to prevent
    tests that use os.chdir() from affecting other tests.
    """
    original_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
    os.chdir(original_cwd)


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove all GITBRIDGE_ environment variables for clean testing."""
    original_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("GITBRIDGE_"):
            del os.environ[key]
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def cookie_store() -> MemoryKeyValueStore:
    """Empty in-memory cookie store."""
    return MemoryKeyValueStore()


@pytest.fixture
async def vault(cookie_store: MemoryKeyValueStore) -> CredentialVault:
    """Initialized vault over the in-memory cookie store."""
    credential_vault = CredentialVault(cookie_store)
    assert await credential_vault.ensure_encryption()
    return credential_vault
