"""
Abstract interface for address and key handling.

Defines the contract the transaction builders rely on for address validation
and key derivation. The builders own no address-parsing logic themselves.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from pycardano import PaymentSigningKey, PaymentVerificationKey

from fatbatch.core.errors import InvalidKey

ED25519_SEED_LENGTH = 32
ED25519_PUBLIC_KEY_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64


@dataclass(frozen=True)
class KeyPair:
    """
    An Ed25519 key pair able to produce detached signatures.

    Attributes:
        public_key: Raw 32-byte public key
        signing_key: Signing key wrapping the 32-byte seed
    """

    public_key: bytes
    signing_key: PaymentSigningKey = field(repr=False, compare=False)

    @classmethod
    def from_seed(cls, seed: bytes) -> "KeyPair":
        """
        Derive a key pair from a raw 32-byte seed.

        Args:
            seed: Private key seed

        Returns:
            KeyPair for the seed
        """
        if not isinstance(seed, (bytes, bytearray)) or len(seed) != ED25519_SEED_LENGTH:
            raise InvalidKey(f"Ed25519 seed must be {ED25519_SEED_LENGTH} bytes")

        signing_key = PaymentSigningKey(bytes(seed))
        verification_key = PaymentVerificationKey.from_signing_key(signing_key)
        return cls(public_key=verification_key.payload, signing_key=signing_key)

    @classmethod
    def generate(cls) -> "KeyPair":
        """Generate a new random key pair."""
        return cls.from_seed(PaymentSigningKey.generate().payload)

    @property
    def seed(self) -> bytes:
        return self.signing_key.payload

    def sign(self, message: bytes) -> bytes:
        """Produce a detached 64-byte signature over message."""
        return self.signing_key.sign(message)


class AddressCodec(ABC):
    """
    Abstract interface for address validation and key derivation.

    The transaction builders treat these as oracle calls:
    - address classification (private / public)
    - private address -> public address
    - private address -> key pair
    - public key -> public address
    """

    @abstractmethod
    def is_valid_private_address(self, address: str) -> bool:
        """Check whether address is a well-formed private address."""
        pass

    @abstractmethod
    def is_valid_public_address(self, address: str) -> bool:
        """Check whether address is a well-formed public address."""
        pass

    @abstractmethod
    def public_address(self, private_address: str) -> str:
        """
        Derive the public address of a private address.

        Raises:
            InvalidAddress: If private_address is not valid
        """
        pass

    @abstractmethod
    def key_pair(self, private_address: str) -> KeyPair:
        """
        Derive the signing key pair of a private address.

        Raises:
            InvalidAddress: If private_address is not valid
        """
        pass

    @abstractmethod
    def public_key_to_address(self, public_key: bytes) -> str:
        """
        Derive the public address controlled by a raw public key.

        Raises:
            InvalidKey: If public_key has the wrong length
        """
        pass
