"""Shared pytest fixtures for validator key tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from validator_keys.crypto.keys import KeyMaterial
from validator_keys.crypto.schemes import KeyScheme
from validator_keys.observability import configure_logging

ALL_SCHEMES = [KeyScheme.ED25519, KeyScheme.SECP256K1]

# Fixed secrets, valid under both schemes.
MASTER_SECRET_HEX = "00" * 31 + "01"


@pytest.fixture(params=ALL_SCHEMES, ids=lambda s: s.value)
def scheme(request: pytest.FixtureRequest) -> KeyScheme:
    """Parametrize a test over every signature scheme."""
    return request.param


@pytest.fixture
def master_keys(scheme: KeyScheme) -> KeyMaterial:
    return KeyMaterial.from_hex(MASTER_SECRET_HEX, scheme)


@pytest.fixture
def ed25519_master() -> KeyMaterial:
    return KeyMaterial.from_hex(MASTER_SECRET_HEX, KeyScheme.ED25519)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Restore default logging after tests that reconfigure it (CLI runs, level tests)."""
    yield
    configure_logging(log_format="console", log_level="WARNING", force=True)
