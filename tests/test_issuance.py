"""
Test suite for token issuance.
"""

import hashlib
import json

import pytest

from fatbatch.core.errors import InvalidAmount, InvalidKey, ValidationError
from fatbatch.core.issuance import IssuanceBuilder, token_chain_id
from fatbatch.crypto.signer import verify
from fatbatch.keys.factoid import sk1_key_pair

from conftest import FIXED_TIMESTAMP, IDENTITY_CHAIN_ID, REFERENCE_PRIVATE_ADDRESS


@pytest.fixture
def issuance_builder(sk1, fixed_clock):
    return IssuanceBuilder(IDENTITY_CHAIN_ID, "mytoken", sk1, clock=fixed_clock)


# ============================================================================
# Test Issuance Building
# ============================================================================

class TestIssuance:
    """Tests for building and signing issuances."""

    def test_build(self, issuance_builder, sk1):
        """Test a complete issuance."""
        issuance = (
            issuance_builder
            .symbol("TTK")
            .supply(1_000_000)
            .name("Test Token")
            .salt("abc")
            .metadata({"custom": "field"})
            .build()
        )

        assert issuance.content == (
            '{"type":"FAT-0","supply":1000000,"symbol":"TTK","name":"Test Token",'
            '"salt":"abc","metadata":{"custom":"field"}}'
        )
        assert issuance.timestamp == FIXED_TIMESTAMP
        assert issuance.rcd.public_key == sk1_key_pair(sk1).public_key
        assert issuance.verify_signature()

    def test_minimal(self, issuance_builder):
        """Test optional fields are omitted and a salt is generated."""
        issuance = issuance_builder.symbol("T").supply("5").build()

        content = json.loads(issuance.content)
        assert list(content) == ["type", "supply", "symbol", "salt"]
        assert len(content["salt"]) == 64

    def test_chain_id(self, issuance_builder):
        """Test the token chain id derivation."""
        issuance = issuance_builder.symbol("TTK").supply(1).build()

        expected = hashlib.sha256(
            hashlib.sha256(b"token").digest()
            + hashlib.sha256(b"mytoken").digest()
            + hashlib.sha256(b"issuer").digest()
            + hashlib.sha256(bytes.fromhex(IDENTITY_CHAIN_ID)).digest()
        ).digest()
        assert issuance.chain_id == expected
        assert token_chain_id("mytoken", IDENTITY_CHAIN_ID) == expected

    def test_ledger_entry(self, issuance_builder):
        """Test the issuance entry and its signature."""
        issuance = issuance_builder.symbol("TTK").supply(1).build()
        entry = issuance.ledger_entry()

        assert entry.chain_id == issuance.chain_id
        assert entry.ext_ids[0] == str(FIXED_TIMESTAMP).encode()
        assert entry.ext_ids[1][0] == 0x01
        assert verify(entry.ext_ids[1][1:], issuance.marshal_data(), entry.ext_ids[2])

    def test_custom_type(self, sk1):
        """Test a non default token type."""
        issuance = IssuanceBuilder(IDENTITY_CHAIN_ID, "t", sk1, token_type="FAT-1").symbol("A").supply(1).build()
        assert json.loads(issuance.content)["type"] == "FAT-1"


# ============================================================================
# Test Issuance Validation
# ============================================================================

class TestIssuanceValidation:
    """Tests for rejected issuance parameters."""

    def test_root_chain_id(self, sk1):
        """Test the issuer must be an identity chain."""
        with pytest.raises(ValidationError, match="Root Chain Id"):
            IssuanceBuilder("ab" * 32, "mytoken", sk1)

    def test_token_id(self, sk1):
        """Test the token id is required."""
        with pytest.raises(ValidationError):
            IssuanceBuilder(IDENTITY_CHAIN_ID, "", sk1)

    def test_sk1(self):
        """Test the signing key must be an sk1 key."""
        with pytest.raises(InvalidKey):
            IssuanceBuilder(IDENTITY_CHAIN_ID, "mytoken", REFERENCE_PRIVATE_ADDRESS)

    @pytest.mark.parametrize("symbol", ["", "ttk", "TOOLONG", "T1"])
    def test_symbol(self, issuance_builder, symbol):
        """Test symbols are 1-4 capital letters."""
        with pytest.raises(ValidationError):
            issuance_builder.symbol(symbol)

    def test_supply(self, issuance_builder):
        """Test supply must be positive."""
        with pytest.raises(InvalidAmount):
            issuance_builder.supply(0)
        with pytest.raises(InvalidAmount):
            issuance_builder.supply(1.5)

    def test_missing_symbol(self, issuance_builder):
        """Test the symbol is required."""
        with pytest.raises(ValidationError, match="symbol"):
            issuance_builder.supply(1).build()

    def test_missing_supply(self, issuance_builder):
        """Test the supply is required."""
        with pytest.raises(ValidationError, match="supply"):
            issuance_builder.symbol("TTK").build()

    def test_text_fields_must_encode_as_utf8(self, sk1, issuance_builder):
        """Test that text fields holding a lone surrogate are rejected."""
        with pytest.raises(ValidationError):
            IssuanceBuilder(IDENTITY_CHAIN_ID, "tok\ud800", sk1)
        with pytest.raises(ValidationError):
            IssuanceBuilder(IDENTITY_CHAIN_ID, "mytoken", sk1, token_type="FAT\ud800")
        with pytest.raises(ValidationError):
            issuance_builder.name("\ud800")
        with pytest.raises(ValidationError):
            issuance_builder.salt("\udfff")
