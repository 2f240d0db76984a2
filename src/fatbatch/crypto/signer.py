"""
Transaction Signer - hash-then-sign and hash-then-verify.

The marshalled data is hashed with SHA-512 and the 64-byte digest is what
gets signed, even though Ed25519 hashes its input again internally. Existing
verifiers of the format expect exactly this construction.
"""

import hashlib
from dataclasses import dataclass
from typing import Optional, Union

import structlog
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from fatbatch.core.errors import InvalidKey, NotSigned
from fatbatch.keys.factoid import RCD_TYPE_1, get_codec
from fatbatch.keys.interface import (
    ED25519_PUBLIC_KEY_LENGTH,
    ED25519_SIGNATURE_LENGTH,
    AddressCodec,
    KeyPair,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RedeemCondition:
    """
    Redeem condition descriptor (RCD) of type 1.

    Names the public key whose signature redeems an input. Serialized on the
    ledger as ``0x01 || public_key``.
    """

    public_key: bytes
    rcd_type: bytes = RCD_TYPE_1

    def __post_init__(self):
        if len(self.public_key) != ED25519_PUBLIC_KEY_LENGTH:
            raise InvalidKey(
                f"RCD public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(self.public_key)}"
            )
        if self.rcd_type != RCD_TYPE_1:
            raise InvalidKey(f"Unsupported RCD type {self.rcd_type.hex()}")

    @classmethod
    def from_bytes(cls, raw: bytes) -> "RedeemCondition":
        """Parse the ledger serialization of an RCD."""
        if len(raw) != 1 + ED25519_PUBLIC_KEY_LENGTH:
            raise InvalidKey(f"RCD must be {1 + ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(raw)}")
        return cls(public_key=bytes(raw[1:]), rcd_type=bytes(raw[:1]))

    def to_bytes(self) -> bytes:
        return self.rcd_type + self.public_key

    def address(self, codec: Optional[AddressCodec] = None) -> str:
        """Public address controlled by this RCD."""
        return (codec or get_codec()).public_key_to_address(self.public_key)


def sha512(data: bytes) -> bytes:
    return hashlib.sha512(data).digest()


def sign(key_pair: KeyPair, marshal_bytes: bytes) -> bytes:
    """
    Sign marshalled data.

    Args:
        key_pair: Key pair holding the secret key
        marshal_bytes: Output of marshal_data_sig

    Returns:
        64-byte detached signature over SHA-512(marshal_bytes)
    """
    signature = key_pair.sign(sha512(marshal_bytes))
    logger.debug("data_signed", message_size=len(marshal_bytes))
    return signature


def verify(
    public_key: Union[bytes, RedeemCondition, None],
    marshal_bytes: bytes,
    signature: Optional[bytes],
) -> bool:
    """
    Verify a detached signature over SHA-512(marshal_bytes).

    Args:
        public_key: Raw public key or the RCD that carries it
        marshal_bytes: Output of marshal_data_sig
        signature: Detached signature

    Returns:
        True if the signature is valid, False otherwise

    Raises:
        NotSigned: If the signature or the key is absent
    """
    if signature is None or public_key is None:
        raise NotSigned("Transaction not signed")

    if isinstance(public_key, RedeemCondition):
        public_key = public_key.public_key

    if len(public_key) != ED25519_PUBLIC_KEY_LENGTH or len(signature) != ED25519_SIGNATURE_LENGTH:
        return False

    try:
        VerifyKey(bytes(public_key)).verify(sha512(marshal_bytes), bytes(signature))
    except BadSignatureError:
        return False
    return True
