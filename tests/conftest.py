"""Global test fixtures for the Chronolock test suite."""

from __future__ import annotations

import os

import pytest

from chronolock.core.config import clear_config_cache
from chronolock.crypto.pairing import SimulatedPairingGroup
from chronolock.rotation.config import RotationConfig, TrustRoles
from chronolock.rotation.coordinator import RotationCoordinator

SYSTEM = "0x1"
SCHEDULER = "0x0"
OUTSIDER = "0xbad"
TESTNET_CHAIN_ID = 4
MAINNET_CHAIN_ID = 1


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all CHRONOLOCK_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("CHRONOLOCK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Every test starts and ends with a fresh settings singleton."""
    clear_config_cache()
    yield
    clear_config_cache()


# ============================================================================
# Rotation Fixtures
# ============================================================================


@pytest.fixture
def roles():
    """Distinct system and scheduler identities."""
    return TrustRoles(system=SYSTEM, scheduler=SCHEDULER)


@pytest.fixture
def rotation_config(roles):
    """RotationConfig on a test network."""
    return RotationConfig(roles, chain_id=TESTNET_CHAIN_ID)


@pytest.fixture
def coordinator(rotation_config):
    """Coordinator that has not been initialized."""
    return RotationCoordinator(rotation_config)


@pytest.fixture
def initialized(coordinator):
    """Coordinator after initialize()."""
    coordinator.initialize(SYSTEM)
    return coordinator


# ============================================================================
# Crypto Fixtures
# ============================================================================


@pytest.fixture
def sim_group():
    """Fast exponent-tracking pairing group."""
    return SimulatedPairingGroup()
