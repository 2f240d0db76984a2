"""
Test suite for Factoid address handling and key derivation.
"""

import pytest

from fatbatch.core.errors import InvalidAddress, InvalidKey
from fatbatch.crypto.signer import RedeemCondition
from fatbatch.keys.factoid import (
    FactoidAddressCodec,
    get_codec,
    is_valid_identity_chain_id,
    is_valid_sk1,
    rcd_hash,
    seed_to_private_address,
    sk1_key_pair,
)
from fatbatch.keys.interface import KeyPair

from conftest import (
    IDENTITY_CHAIN_ID,
    REFERENCE_PRIVATE_ADDRESS,
    REFERENCE_PUBLIC_ADDRESS,
    seed,
)


# ============================================================================
# Test Address Classification
# ============================================================================

class TestAddressValidation:
    """Tests for recognizing private and public addresses."""

    def test_reference_addresses(self, codec):
        """Test the documented reference addresses."""
        assert codec.is_valid_private_address(REFERENCE_PRIVATE_ADDRESS)
        assert not codec.is_valid_public_address(REFERENCE_PRIVATE_ADDRESS)
        assert codec.is_valid_public_address(REFERENCE_PUBLIC_ADDRESS)
        assert not codec.is_valid_private_address(REFERENCE_PUBLIC_ADDRESS)

    def test_prefixes(self, codec, local_private_address, local_public_address):
        """Test the human readable prefixes."""
        assert local_private_address.startswith("Fs")
        assert local_public_address.startswith("FA")

    def test_bad_checksum(self, codec):
        """Test that a single changed character invalidates an address."""
        tampered = REFERENCE_PUBLIC_ADDRESS[:-1] + (
            "N" if REFERENCE_PUBLIC_ADDRESS[-1] != "N" else "M"
        )
        assert not codec.is_valid_public_address(tampered)

    @pytest.mark.parametrize("value", ["", "FA", "not an address", "0OIl", None, 42])
    def test_garbage(self, codec, value):
        """Test that malformed values are simply invalid."""
        assert not codec.is_valid_public_address(value)
        assert not codec.is_valid_private_address(value)


# ============================================================================
# Test Key Derivation
# ============================================================================

class TestKeyDerivation:
    """Tests for deriving keys and public addresses."""

    def test_private_to_public(self, codec, local_private_address, local_public_address):
        """Test deriving the public address of a private address."""
        assert codec.public_address(local_private_address) == local_public_address

    def test_key_pair_roundtrip(self, codec, local_private_address, local_key):
        """Test that the key pair holds the encoded seed."""
        key_pair = codec.key_pair(local_private_address)
        assert key_pair.public_key == local_key.public_key
        assert key_pair.seed == seed(1)

    def test_key_pair_invalid(self, codec):
        """Test deriving keys from a public address fails."""
        with pytest.raises(InvalidAddress):
            codec.key_pair(REFERENCE_PUBLIC_ADDRESS)

    def test_public_address_is_rcd_hash(self, codec, local_key):
        """Test that distinct keys map to distinct addresses."""
        other = KeyPair.from_seed(seed(9))
        assert codec.public_key_to_address(local_key.public_key) != codec.public_key_to_address(other.public_key)
        assert len(rcd_hash(local_key.public_key)) == 32

    def test_seed_length(self):
        """Test that seeds must be 32 bytes."""
        with pytest.raises(InvalidKey):
            KeyPair.from_seed(b"\x01" * 31)
        with pytest.raises(InvalidKey):
            seed_to_private_address(b"\x01" * 33)

    def test_generate(self):
        """Test generating random key pairs."""
        a, b = KeyPair.generate(), KeyPair.generate()
        assert len(a.public_key) == 32
        assert a.public_key != b.public_key

    def test_shared_codec(self):
        """Test the module level codec."""
        assert isinstance(get_codec(), FactoidAddressCodec)
        assert get_codec() is get_codec()


# ============================================================================
# Test Identity Keys And RCDs
# ============================================================================

class TestIdentityKeys:
    """Tests for sk1 keys and identity chain ids."""

    def test_sk1(self, sk1):
        """Test sk1 encoding and key derivation."""
        assert sk1.startswith("sk1")
        assert is_valid_sk1(sk1)
        assert sk1_key_pair(sk1).seed == seed(5)

    def test_sk1_rejects_fs(self):
        """Test that a private Factoid address is not an sk1 key."""
        assert not is_valid_sk1(REFERENCE_PRIVATE_ADDRESS)
        with pytest.raises(InvalidKey):
            sk1_key_pair(REFERENCE_PRIVATE_ADDRESS)

    def test_identity_chain_id(self):
        """Test identity root chain id recognition."""
        assert is_valid_identity_chain_id(IDENTITY_CHAIN_ID)
        assert not is_valid_identity_chain_id("ab" * 32)
        assert not is_valid_identity_chain_id(IDENTITY_CHAIN_ID[:-1])


class TestRedeemCondition:
    """Tests for type 1 RCDs."""

    def test_serialization(self, local_key):
        """Test the ledger serialization of an RCD."""
        rcd = RedeemCondition(public_key=local_key.public_key)
        raw = rcd.to_bytes()
        assert raw[0] == 0x01
        assert len(raw) == 33
        assert RedeemCondition.from_bytes(raw) == rcd

    def test_address(self, local_key, local_public_address):
        """Test the address an RCD controls."""
        assert RedeemCondition(public_key=local_key.public_key).address() == local_public_address

    def test_invalid(self):
        """Test malformed RCDs."""
        with pytest.raises(InvalidKey):
            RedeemCondition(public_key=b"\x00" * 31)
        with pytest.raises(InvalidKey):
            RedeemCondition.from_bytes(b"\x02" + b"\x00" * 32)
