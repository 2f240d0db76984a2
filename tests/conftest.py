"""
Pytest configuration and shared fixtures for the test suite.
"""

import pytest

from fatbatch.config import FatConfig, set_config
from fatbatch.keys.factoid import get_codec, seed_to_private_address, seed_to_sk1
from fatbatch.keys.interface import KeyPair
from fatbatch.tx.batch_builder import TransactionBatchBuilder
from fatbatch.tx.builder import TransactionBuilder


TEST_CHAIN_ID = "ab" * 32
FIXED_TIMESTAMP = 1_600_000_000

# Addresses used throughout the FAT-2 reference documentation
REFERENCE_PRIVATE_ADDRESS = "Fs1PkAEbmo1XNangSnxmKqi1PN5sVDbQ6zsnXCsMUejT66WaDgkm"
REFERENCE_PUBLIC_ADDRESS = "FA3aECpw3gEZ7CMQvRNxEtKBGKAos3922oqYLcHQ9NqXHudC6YBM"

IDENTITY_CHAIN_ID = "888888" + "d0" * 29


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_config():
    """Make every test start from a fresh global configuration."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def test_config() -> FatConfig:
    """Create a test configuration."""
    return FatConfig(
        token_chain_id=TEST_CHAIN_ID,
        batch_version=1,
        log_level="DEBUG",
    )


@pytest.fixture
def fixed_clock():
    """Clock returning a constant unix timestamp."""
    return lambda: FIXED_TIMESTAMP


# ============================================================================
# Key Fixtures
# ============================================================================

def seed(index: int) -> bytes:
    """Generate a deterministic 32-byte test seed."""
    return bytes([index]) * 32


@pytest.fixture
def codec():
    return get_codec()


@pytest.fixture
def local_key() -> KeyPair:
    """Key pair of the locally held wallet."""
    return KeyPair.from_seed(seed(1))


@pytest.fixture
def local_private_address() -> str:
    return seed_to_private_address(seed(1))


@pytest.fixture
def local_public_address(codec, local_key) -> str:
    return codec.public_key_to_address(local_key.public_key)


@pytest.fixture
def device_key() -> KeyPair:
    """Key pair standing in for a hardware wallet."""
    return KeyPair.from_seed(seed(2))


@pytest.fixture
def device_address(codec, device_key) -> str:
    return codec.public_key_to_address(device_key.public_key)


@pytest.fixture
def other_key() -> KeyPair:
    return KeyPair.from_seed(seed(3))


@pytest.fixture
def destination_address(codec) -> str:
    return codec.public_key_to_address(KeyPair.from_seed(seed(4)).public_key)


@pytest.fixture
def sk1() -> str:
    """Identity key used to sign issuances."""
    return seed_to_sk1(seed(5))


# ============================================================================
# Transaction Fixtures
# ============================================================================

@pytest.fixture
def local_conversion(local_private_address):
    """150 pFCT -> PEG conversion signable with a local key."""
    return (
        TransactionBuilder()
        .set_input("pFCT", local_private_address, 150)
        .set_conversion("PEG")
        .build()
    )


@pytest.fixture
def device_transfer(device_address, destination_address):
    """150 pFCT transfer that has to be signed externally."""
    return (
        TransactionBuilder()
        .set_input("pFCT", device_address, 150)
        .add_transfer(destination_address, 150)
        .build()
    )


@pytest.fixture
def batch_builder(test_config, fixed_clock) -> TransactionBatchBuilder:
    """Batch builder on the test chain with a fixed clock."""
    return TransactionBatchBuilder(config=test_config, clock=fixed_clock)
