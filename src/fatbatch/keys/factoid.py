"""
Factoid address codec.

Implements AddressCodec for Factom addresses:
- Private Factoid addresses ("Fs...") carry the 32-byte Ed25519 seed
- Public Factoid addresses ("FA...") carry the hash of the RCD
- Identity secret keys ("sk1...") carry an Ed25519 seed for issuer signing

All three are base58 of ``prefix || payload || checksum`` where the checksum
is the first four bytes of sha256d(prefix || payload).
"""

import hashlib
import re
from typing import Optional

import base58

from fatbatch.core.errors import InvalidAddress, InvalidKey
from fatbatch.keys.interface import (
    AddressCodec,
    ED25519_PUBLIC_KEY_LENGTH,
    ED25519_SEED_LENGTH,
    KeyPair,
)

PRIVATE_FCT_PREFIX = bytes.fromhex("6478")
PUBLIC_FCT_PREFIX = bytes.fromhex("5fb1")
SK1_PREFIX = bytes.fromhex("4db6c9")

CHECKSUM_LENGTH = 4
PAYLOAD_LENGTH = 32

# RCD type 1: a single Ed25519 public key
RCD_TYPE_1 = b"\x01"

IDENTITY_CHAIN_ID = re.compile(r"^888888[0-9a-f]{58}$")


def sha256d(data: bytes) -> bytes:
    """Double SHA-256."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def _encode(prefix: bytes, payload: bytes) -> str:
    body = prefix + payload
    return base58.b58encode(body + sha256d(body)[:CHECKSUM_LENGTH]).decode("ascii")


def _decode(text: str, prefix: bytes) -> Optional[bytes]:
    """Return the payload of a prefixed base58check string, or None if malformed."""
    if not isinstance(text, str):
        return None

    try:
        raw = base58.b58decode(text)
    except ValueError:
        return None

    if len(raw) != len(prefix) + PAYLOAD_LENGTH + CHECKSUM_LENGTH:
        return None

    body, checksum = raw[:-CHECKSUM_LENGTH], raw[-CHECKSUM_LENGTH:]
    if not body.startswith(prefix) or sha256d(body)[:CHECKSUM_LENGTH] != checksum:
        return None

    return body[len(prefix):]


def rcd_hash(public_key: bytes) -> bytes:
    """Hash of the type 1 RCD for public_key, as embedded in a public address."""
    if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
        raise InvalidKey(f"Public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}")
    return sha256d(RCD_TYPE_1 + public_key)


def seed_to_private_address(seed: bytes) -> str:
    """Encode a raw 32-byte seed as a private Factoid address."""
    if len(seed) != ED25519_SEED_LENGTH:
        raise InvalidKey(f"Seed must be {ED25519_SEED_LENGTH} bytes")
    return _encode(PRIVATE_FCT_PREFIX, seed)


def seed_to_sk1(seed: bytes) -> str:
    """Encode a raw 32-byte seed as an sk1 identity key."""
    if len(seed) != ED25519_SEED_LENGTH:
        raise InvalidKey(f"Seed must be {ED25519_SEED_LENGTH} bytes")
    return _encode(SK1_PREFIX, seed)


def is_valid_sk1(key: str) -> bool:
    """Check whether key is a well-formed sk1 identity secret key."""
    return _decode(key, SK1_PREFIX) is not None


def sk1_key_pair(key: str) -> KeyPair:
    """
    Derive the signing key pair of an sk1 identity key.

    Raises:
        InvalidKey: If key is not a valid sk1 key
    """
    seed = _decode(key, SK1_PREFIX)
    if seed is None:
        raise InvalidKey("Supplied key is not a valid sk1 private key")
    return KeyPair.from_seed(seed)


def is_valid_identity_chain_id(chain_id: str) -> bool:
    """Identity root chain ids are 64 hex characters starting with 888888."""
    return isinstance(chain_id, str) and IDENTITY_CHAIN_ID.match(chain_id) is not None


class FactoidAddressCodec(AddressCodec):
    """
    AddressCodec for Factoid (FCT) addresses.

    Usage:
        ```python
        codec = FactoidAddressCodec()
        codec.public_address("Fs1PkAEbmo1XNangSnxmKqi1PN5sVDbQ6zsnXCsMUejT66WaDgkm")
        ```
    """

    def is_valid_private_address(self, address: str) -> bool:
        return _decode(address, PRIVATE_FCT_PREFIX) is not None

    def is_valid_public_address(self, address: str) -> bool:
        return _decode(address, PUBLIC_FCT_PREFIX) is not None

    def public_address(self, private_address: str) -> str:
        return self.public_key_to_address(self.key_pair(private_address).public_key)

    def key_pair(self, private_address: str) -> KeyPair:
        seed = _decode(private_address, PRIVATE_FCT_PREFIX)
        if seed is None:
            raise InvalidAddress("Not a valid private Factoid address")
        return KeyPair.from_seed(seed)

    def public_key_to_address(self, public_key: bytes) -> str:
        return _encode(PUBLIC_FCT_PREFIX, rcd_hash(bytes(public_key)))


_default_codec: Optional[AddressCodec] = None


def get_codec() -> AddressCodec:
    """Get or create the shared Factoid codec."""
    global _default_codec
    if _default_codec is None:
        _default_codec = FactoidAddressCodec()
    return _default_codec
